import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from stormrisk.styling.storm import (
    CATEGORY_ORDER,
    classify_wind,
    storm_categories,
    storm_category,
    storm_marker_radius,
    wind_speed_color,
)


@pytest.mark.parametrize(
    "wind,label",
    [
        (157, "Category 5 Hurricane"),
        (156, "Category 4 Hurricane"),
        (130, "Category 4 Hurricane"),
        (129.9, "Category 3 Hurricane"),
        (111, "Category 3 Hurricane"),
        (96, "Category 2 Hurricane"),
        (95, "Category 1 Hurricane"),
        (74, "Category 1 Hurricane"),
        (73, "Tropical Storm"),
        (39, "Tropical Storm"),
        (38, "Tropical Depression"),
        (0, "Tropical Depression"),
    ],
)
def test_band_edges_are_inclusive(wind, label):
    assert storm_category(wind) == label


def test_colors_follow_bands():
    assert wind_speed_color(160) == "#8b0000"
    assert wind_speed_color(130) == "#ff0000"
    assert wind_speed_color(111) == "#ff6600"
    assert wind_speed_color(96) == "#ffaa00"
    assert wind_speed_color(74) == "#ffff00"
    assert wind_speed_color(39) == "#00ff00"
    assert wind_speed_color(10) == "#0066ff"
    assert classify_wind(200) == ("Category 5 Hurricane", "#8b0000")


def test_classification_is_monotonic():
    severities = [CATEGORY_ORDER.index(storm_category(w)) for w in np.arange(0, 200, 0.5)]
    assert all(a <= b for a, b in zip(severities, severities[1:]))


@pytest.mark.parametrize("wind", [None, "fast", float("nan")])
def test_missing_wind_is_a_depression(wind):
    assert storm_category(wind) == "Tropical Depression"


def test_vectorised_matches_scalar():
    winds = [35, 39, 74, 95.5, 96, 111, 129, 130, 157, 180, None]
    got = list(storm_categories(winds))
    assert got == [storm_category(w) for w in winds]


def test_marker_radius():
    assert storm_marker_radius(160) == 16
    assert storm_marker_radius(20) == 3
    assert storm_marker_radius(None) == 3
