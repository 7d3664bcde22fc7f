from typing import Any, Iterable, Tuple

import numpy as np
import pandas as pd

# Saffir-Simpson style bands in mph, highest first; lower bounds are inclusive
STORM_BANDS = [
    (157, "Category 5 Hurricane", "#8b0000"),
    (130, "Category 4 Hurricane", "#ff0000"),
    (111, "Category 3 Hurricane", "#ff6600"),
    (96, "Category 2 Hurricane", "#ffaa00"),
    (74, "Category 1 Hurricane", "#ffff00"),
    (39, "Tropical Storm", "#00ff00"),
]
TROPICAL_DEPRESSION = ("Tropical Depression", "#0066ff")

CATEGORY_ORDER = [TROPICAL_DEPRESSION[0]] + [label for _, label, _ in reversed(STORM_BANDS)]


def _as_speed(wind_speed: Any) -> float:
    try:
        speed = float(wind_speed)
    except (TypeError, ValueError):
        return float("nan")
    return speed


def classify_wind(wind_speed: Any) -> Tuple[str, str]:
    """Return ``(category label, colour)`` for a sustained wind speed in mph."""
    speed = _as_speed(wind_speed)
    for threshold, label, color in STORM_BANDS:
        if speed >= threshold:
            return label, color
    return TROPICAL_DEPRESSION


def storm_category(wind_speed: Any) -> str:
    return classify_wind(wind_speed)[0]


def wind_speed_color(wind_speed: Any) -> str:
    return classify_wind(wind_speed)[1]


def storm_marker_radius(wind_speed: Any) -> float:
    speed = _as_speed(wind_speed)
    if np.isnan(speed):
        return 3
    return max(3, speed / 10)


def storm_categories(wind_speeds: Iterable[Any]) -> pd.Series:
    """Vectorised ``storm_category`` for a whole track."""
    speeds = pd.to_numeric(pd.Series(list(wind_speeds), dtype=object), errors="coerce")
    bins = [-np.inf] + [threshold for threshold, _, _ in reversed(STORM_BANDS)] + [np.inf]
    cats = pd.cut(speeds, bins=bins, labels=CATEGORY_ORDER, right=False)
    return cats.astype(object).where(cats.notna(), TROPICAL_DEPRESSION[0])
