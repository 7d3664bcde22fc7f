from typing import Dict, List, Optional

import httpx

from ..config import FEED_PATHS

# Synthetic feeds approximating the coastal belt hit by Cyclone Amphan (May 2020)

_DEMO_SUBDISTRICTS = [
    # division, district, upazila, lon, lat, score, label, children, health, education
    ("Khulna", "Satkhira", "Shyamnagar", 89.20, 22.25, 5, "Very High", 41230.4, 6, 212),
    ("Khulna", "Satkhira", "Assasuni", 89.15, 22.55, 4, "High", 30114.0, 4, 187),
    ("Khulna", "Khulna", "Koyra", 89.30, 22.35, 5, "Very High", 23805.7, 3, 149),
    ("Khulna", "Khulna", "Dacope", 89.50, 22.50, 4, "High", 16590.2, 2, 121),
    ("Khulna", "Bagerhat", "Mongla", 89.60, 22.40, 3, "Medium", 14872.9, 5, 98),
    ("Khulna", "Bagerhat", "Sarankhola", 89.80, 22.30, 3, "Medium", 12011.0, 2, 84),
    ("Barisal", "Patuakhali", "Kalapara", 90.20, 21.95, 2, "Low", 24460.5, 3, 165),
    ("Barisal", "Barguna", "Patharghata", 89.95, 22.05, 2, "Low", 17703.3, 2, 110),
    ("Barisal", "Bhola", "Char Fasson", 90.75, 22.20, 1, "Very Low", 52318.8, 4, 301),
    ("Chittagong", "Cox's Bazar", "Teknaf", 92.30, 20.90, 0, "No Risk", 33570.1, 3, 140),
]

_DEMO_TRACK = [
    # time (UTC), lon, lat, wind (mph), pressure (mb)
    ("2020-05-16T00:00:00Z", 86.3, 10.4, 35, 1004),
    ("2020-05-16T12:00:00Z", 86.4, 11.2, 50, 998),
    ("2020-05-17T00:00:00Z", 86.4, 12.0, 85, 985),
    ("2020-05-17T12:00:00Z", 86.5, 12.9, 120, 966),
    ("2020-05-18T00:00:00Z", 86.5, 13.8, 160, 925),
    ("2020-05-18T12:00:00Z", 86.7, 15.0, 155, 928),
    ("2020-05-19T00:00:00Z", 86.9, 16.3, 140, 940),
    ("2020-05-19T12:00:00Z", 87.3, 17.8, 125, 952),
    ("2020-05-20T00:00:00Z", 87.7, 19.3, 110, 962),
    ("2020-05-20T12:00:00Z", 88.3, 21.7, 100, 968),
    ("2020-05-21T00:00:00Z", 88.9, 23.4, 60, 990),
    ("2020-05-21T06:00:00Z", 89.3, 24.3, 35, 996),
]

_DEMO_HEALTH = [
    ("Satkhira Medical College Hospital", "Satkhira", 89.07, 22.72),
    ("Shyamnagar Upazila Health Complex", "Shyamnagar", 89.10, 22.33),
    ("Khulna Medical College Hospital", "Khulna", 89.53, 22.82),
    ("Mongla Port Hospital", "Mongla", 89.60, 22.48),
    ("Kalapara Upazila Health Complex", None, 90.23, 21.99),
]

_DEMO_EDUCATION = [
    ("Shyamnagar Government Mohsin College", "Shyamnagar", 89.11, 22.34),
    ("Koyra Madinabad Secondary School", "Koyra", 89.30, 22.36),
    ("Dacope Government Primary School", None, 89.50, 22.57),
    ("Char Fasson Government College", "Char Fasson", 90.75, 22.19),
]


def _square(lon: float, lat: float, half: float = 0.1) -> Dict:
    ring = [
        [lon - half, lat - half],
        [lon + half, lat - half],
        [lon + half, lat + half],
        [lon - half, lat + half],
        [lon - half, lat - half],
    ]
    return {"type": "Polygon", "coordinates": [ring]}


def _point(lon: float, lat: float) -> Dict:
    return {"type": "Point", "coordinates": [lon, lat]}


def _collection(features: List[Dict]) -> Dict:
    return {"type": "FeatureCollection", "features": features}


def _facility_features(rows) -> List[Dict]:
    features = []
    for name, city, lon, lat in rows:
        props = {"name": name}
        if city:
            props["addr_city"] = city
        features.append({"type": "Feature", "geometry": _point(lon, lat), "properties": props})
    return features


def demo_feeds() -> Dict[str, Dict]:
    """Return the five feed documents keyed like ``FEED_PATHS``."""
    districts = []
    for division, district, upazila, lon, lat, score, label, kids, health, edu in _DEMO_SUBDISTRICTS:
        districts.append(
            {
                "type": "Feature",
                "geometry": _square(lon, lat),
                "properties": {
                    "NAME_1": division,
                    "NAME_2": district,
                    "NAME_3": district,
                    "NAME_4": upazila,
                    "storm_risk_score": score,
                    "hospital_density_class": "Low" if health < 4 else "Medium",
                    "health_facility_count": health,
                    "education_facility_count": edu,
                    "children_under_five": kids,
                    "risk_level": label,
                },
            }
        )
    track = [
        {
            "type": "Feature",
            "geometry": _point(lon, lat),
            "properties": {"time": ts, "max_sustained_wind": wind, "central_pressure": pressure},
        }
        for ts, lon, lat, wind, pressure in _DEMO_TRACK
    ]
    health = _facility_features(_DEMO_HEALTH)
    education = _facility_features(_DEMO_EDUCATION)
    stats = {
        "total_districts": len(districts),
        "high_risk_districts": sum(1 for row in _DEMO_SUBDISTRICTS if row[5] >= 4),
        "total_health_facilities": len(health),
        "total_education_facilities": len(education),
    }
    return {
        "bangladesh": _collection(districts),
        "amphan": _collection(track),
        "health": _collection(health),
        "education": _collection(education),
        "stats": stats,
    }


def demo_transport(paths: Optional[Dict[str, str]] = None) -> httpx.MockTransport:
    """Serve the synthetic feeds at the configured endpoint paths."""
    paths = {**FEED_PATHS, **(paths or {})}
    feeds = demo_feeds()
    by_path = {paths[key]: doc for key, doc in feeds.items()}

    def handler(request: httpx.Request) -> httpx.Response:
        doc = by_path.get(request.url.path)
        if doc is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return httpx.Response(200, json=doc)

    return httpx.MockTransport(handler)
