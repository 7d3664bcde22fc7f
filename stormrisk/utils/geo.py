import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from shapely.geometry import shape

LOGGER = logging.getLogger(__name__)

# (min_lon, min_lat, max_lon, max_lat)
Bounds = Tuple[float, float, float, float]


def geometry_bounds(geometry: Optional[Dict[str, Any]]) -> Optional[Bounds]:
    if not geometry:
        return None
    try:
        geom = shape(geometry)
    except (ValueError, TypeError, KeyError, IndexError, AttributeError) as exc:
        LOGGER.warning("Skipping malformed %s geometry: %s", geometry.get("type"), exc)
        return None
    if geom.is_empty:
        return None
    return tuple(float(v) for v in geom.bounds)


def union_bounds(geometries: Iterable[Optional[Dict[str, Any]]]) -> Optional[Bounds]:
    boxes = [b for b in (geometry_bounds(g) for g in geometries) if b is not None]
    if not boxes:
        return None
    return (
        min(b[0] for b in boxes),
        min(b[1] for b in boxes),
        max(b[2] for b in boxes),
        max(b[3] for b in boxes),
    )


def point_lonlat(geometry: Optional[Dict[str, Any]]) -> Optional[Tuple[float, float]]:
    if not geometry or geometry.get("type") != "Point":
        return None
    coords = geometry.get("coordinates") or []
    if len(coords) < 2:
        return None
    try:
        return float(coords[0]), float(coords[1])
    except (TypeError, ValueError):
        return None
