from dotenv import load_dotenv
import os

load_dotenv()

API_BASE = os.getenv("STORMRISK_API", "http://localhost:8000").rstrip("/")
HTTP_TIMEOUT = float(os.getenv("STORMRISK_HTTP_TIMEOUT", "30"))
DEMO_MODE = os.getenv("STORMRISK_DEMO", "").strip().lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("STORMRISK_LOG_LEVEL", "INFO").upper()

FEED_PATHS = {
    "bangladesh": os.getenv("STORMRISK_PATH_BANGLADESH", "/api/bangladesh"),
    "amphan": os.getenv("STORMRISK_PATH_AMPHAN", "/api/amphan"),
    "health": os.getenv("STORMRISK_PATH_HEALTH", "/api/health"),
    "education": os.getenv("STORMRISK_PATH_EDUCATION", "/api/education"),
    "stats": os.getenv("STORMRISK_PATH_STATS", "/api/stats"),
}

# Centre of Bangladesh
MAP_CENTER = (23.6850, 90.3563)
MAP_ZOOM = 7
MAP_MAX_ZOOM = 18
BASEMAPS = ("OpenStreetMap", "Dark Theme")
