from typing import Any, Dict, Union

from ..data.schemas import DistrictFeature, DistrictProperties

# Storm risk score -> fill colour (diverging blue to red)
RISK_COLORS = {
    0: "#f0f0f0",
    1: "#91bfdb",
    2: "#e0f3f8",
    3: "#fee08b",
    4: "#fc8d59",
    5: "#d73027",
}

RISK_LABELS = {
    5: "Very High",
    4: "High",
    3: "Medium",
    2: "Low",
    1: "Very Low",
    0: "No Risk",
}

DISTRICT_STROKE = {
    "weight": 2,
    "opacity": 1,
    "color": "#fff",
    "dashArray": "",
    "fillOpacity": 0.7,
}

HOVER_EMPHASIS = {
    "weight": 3,
    "color": "#666",
    "dashArray": "",
    "fillOpacity": 0.9,
}


def _risk_key(score: Any):
    # bool is an int subclass but never a valid score
    if isinstance(score, bool):
        return None
    if isinstance(score, float) and score.is_integer():
        return int(score)
    return score if isinstance(score, int) else None


def risk_fill_color(score: Any) -> str:
    return RISK_COLORS.get(_risk_key(score), RISK_COLORS[0])


def risk_label(score: Any) -> str:
    return RISK_LABELS.get(_risk_key(score), "Unknown")


def _score_of(feature: Union[DistrictFeature, DistrictProperties, Dict]) -> Any:
    if isinstance(feature, DistrictFeature):
        return feature.properties.storm_risk_score
    if isinstance(feature, DistrictProperties):
        return feature.storm_risk_score
    if isinstance(feature, dict):
        props = feature.get("properties", feature) or {}
        return props.get("storm_risk_score") if isinstance(props, dict) else None
    return None


def district_style(feature: Union[DistrictFeature, DistrictProperties, Dict]) -> Dict[str, Any]:
    """Fill colour from the storm risk score plus the fixed district stroke."""
    return {"fillColor": risk_fill_color(_score_of(feature)), **DISTRICT_STROKE}


def hover_style(base: Dict[str, Any]) -> Dict[str, Any]:
    return {**base, **HOVER_EMPHASIS}
