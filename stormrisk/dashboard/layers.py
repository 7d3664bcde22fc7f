from dataclasses import dataclass, field
from html import escape
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ..data.feeds import DashboardData
from ..data.schemas import (
    DistrictCollection,
    DistrictProperties,
    FacilityCollection,
    StormTrackCollection,
    StormTrackProperties,
)
from ..styling.risk import district_style, risk_label
from ..styling.storm import storm_category, storm_marker_radius
from ..utils.formatting import grouped_count, js_number
from .state import DISTRICTS, EDUCATION_FACILITIES, HEALTH_FACILITIES, STORM_TRACK

HEALTH_COLOR = "#e53e3e"
EDUCATION_COLOR = "#3182ce"

STORM_MARKER = {"fillColor": "#000000", "color": "#fff", "weight": 2, "opacity": 1, "fillOpacity": 0.8}
FACILITY_MARKER = {"radius": 4, "color": "#fff", "weight": 1, "opacity": 1, "fillOpacity": 0.8}


@dataclass(frozen=True)
class RenderedFeature:
    index: int
    geometry: Optional[Dict[str, Any]]
    style: Dict[str, Any]
    popup: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LayerSpec:
    name: str
    kind: str  # "polygons" | "points"
    features: Tuple[RenderedFeature, ...]


@dataclass(frozen=True)
class DistrictPanel:
    title: str
    rows: Tuple[Tuple[str, str], ...]


def _popup(title: str, lines: List[Tuple[str, str]]) -> str:
    spans = "".join(f"<span><strong>{escape(k)}:</strong> {v}</span>" for k, v in lines)
    return (
        f'<div class="popup-title">{escape(title)}</div>'
        f'<div class="popup-info">{spans}</div>'
    )


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "Unknown"
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return value
    if ts.tzinfo is not None:
        return ts.tz_convert("UTC").strftime("%d %b %Y, %H:%M UTC")
    return ts.strftime("%d %b %Y, %H:%M")


def _measure(value: Any, unit: str) -> str:
    return "n/a" if value is None else f"{js_number(value)} {unit}"


def district_popup(props: DistrictProperties) -> str:
    score = props.storm_risk_score
    badge = f'<span class="risk-badge risk-{score}">{escape(risk_label(score))}</span>'
    return _popup(
        props.name_4,
        [
            ("District", escape(props.name_2)),
            ("Division", escape(props.name_1)),
            ("Severity Level", f"{score} {badge}"),
            ("Health Facilities", js_number(props.health_facility_count)),
            ("Education Facilities", js_number(props.education_facility_count)),
            ("Children Under 5", grouped_count(props.children_under_five)),
        ],
    )


def storm_popup(props: StormTrackProperties) -> str:
    return _popup(
        "Storm Track Point",
        [
            ("Time", escape(format_timestamp(props.timestamp))),
            ("Wind Speed", _measure(props.max_sustained_wind, "mph")),
            ("Pressure", _measure(props.central_pressure, "mb")),
            ("Category", storm_category(props.max_sustained_wind)),
        ],
    )


def facility_popup(name: Optional[str], city: Optional[str], default_title: str) -> str:
    lines = [("City", escape(city))] if city else []
    return _popup(name or default_title, lines)


def district_panel(props: DistrictProperties) -> DistrictPanel:
    score = props.storm_risk_score
    return DistrictPanel(
        title=props.name_4,
        rows=(
            ("District", props.name_2),
            ("Division", props.name_1),
            ("Storm Risk Score", f"{score}/5"),
            ("Risk Level", risk_label(score)),
            ("Health Facilities", js_number(props.health_facility_count)),
            ("Education Facilities", js_number(props.education_facility_count)),
            ("Children Under 5", grouped_count(props.children_under_five)),
        ),
    )


def district_layer(collection: DistrictCollection) -> LayerSpec:
    features = tuple(
        RenderedFeature(
            index=i,
            geometry=feature.geometry,
            style=district_style(feature),
            popup=district_popup(feature.properties),
            properties=feature.properties.model_dump(by_alias=True),
        )
        for i, feature in enumerate(collection.features)
    )
    return LayerSpec(name=DISTRICTS, kind="polygons", features=features)


def storm_track_layer(collection: StormTrackCollection) -> LayerSpec:
    features = tuple(
        RenderedFeature(
            index=i,
            geometry=feature.geometry,
            style={**STORM_MARKER, "radius": storm_marker_radius(feature.properties.max_sustained_wind)},
            popup=storm_popup(feature.properties),
        )
        for i, feature in enumerate(collection.features)
    )
    return LayerSpec(name=STORM_TRACK, kind="points", features=features)


def facility_layer(name: str, collection: FacilityCollection, color: str, default_title: str) -> LayerSpec:
    features = tuple(
        RenderedFeature(
            index=i,
            geometry=feature.geometry,
            style={**FACILITY_MARKER, "fillColor": color},
            popup=facility_popup(feature.properties.name, feature.properties.city, default_title),
        )
        for i, feature in enumerate(collection.features)
    )
    return LayerSpec(name=name, kind="points", features=features)


def build_layers(data: DashboardData) -> Dict[str, LayerSpec]:
    """All four layers in drawing order: districts first, points on top."""
    return {
        DISTRICTS: district_layer(data.bangladesh),
        STORM_TRACK: storm_track_layer(data.amphan),
        HEALTH_FACILITIES: facility_layer(
            HEALTH_FACILITIES, data.health, HEALTH_COLOR, "Health Facility"
        ),
        EDUCATION_FACILITIES: facility_layer(
            EDUCATION_FACILITIES, data.education, EDUCATION_COLOR, "Education Facility"
        ),
    }
