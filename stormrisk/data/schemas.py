"""Validated shapes of the five dashboard feeds.

Defaults for optional attributes are applied here, once, so renderers and the
export never need to guard against missing values themselves.
"""
import math
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Number = Union[int, float]

RISK_SCORES = (0, 1, 2, 3, 4, 5)


def _to_count(value: Any) -> Number:
    """Missing, null, NaN, empty and non-numeric values count as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value) if value.is_integer() else value
    return 0


def _to_risk_score(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value in RISK_SCORES:
        return value
    return 0


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class _FeedModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class DistrictProperties(_FeedModel):
    name_1: str = Field("", alias="NAME_1")
    name_2: str = Field("", alias="NAME_2")
    name_3: str = Field("", alias="NAME_3")
    name_4: str = Field("", alias="NAME_4")
    storm_risk_score: int = 0
    hospital_density_class: str = "Low"
    health_facility_count: Number = 0
    education_facility_count: Number = 0
    children_under_five: Number = 0
    risk_level: str = ""

    @field_validator("name_1", "name_2", "name_3", "name_4", "risk_level", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _to_text(value)

    @field_validator("hospital_density_class", mode="before")
    @classmethod
    def _density(cls, value: Any) -> str:
        return _to_text(value) or "Low"

    @field_validator("storm_risk_score", mode="before")
    @classmethod
    def _score(cls, value: Any) -> int:
        return _to_risk_score(value)

    @field_validator(
        "health_facility_count", "education_facility_count", "children_under_five", mode="before"
    )
    @classmethod
    def _count(cls, value: Any) -> Number:
        return _to_count(value)


class StormTrackProperties(_FeedModel):
    timestamp: Optional[str] = Field(None, validation_alias=AliasChoices("time", "timestamp"))
    max_sustained_wind: Optional[Number] = None
    central_pressure: Optional[Number] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _time(cls, value: Any) -> Optional[str]:
        return None if value is None else _to_text(value)

    @field_validator("max_sustained_wind", "central_pressure", mode="before")
    @classmethod
    def _measure(cls, value: Any) -> Optional[Number]:
        if value is None or value == "":
            return None
        return _to_count(value)


class FacilityProperties(_FeedModel):
    name: Optional[str] = None
    city: Optional[str] = Field(None, validation_alias=AliasChoices("addr_city", "city"))

    @field_validator("name", "city", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Optional[str]:
        text = _to_text(value).strip()
        return text or None


class _Feature(_FeedModel):
    type: Literal["Feature"] = "Feature"
    geometry: Optional[Dict[str, Any]] = None

    @field_validator("properties", mode="before", check_fields=False)
    @classmethod
    def _null_properties(cls, value: Any) -> Any:
        return {} if value is None else value


class DistrictFeature(_Feature):
    properties: DistrictProperties = Field(default_factory=DistrictProperties)


class StormTrackFeature(_Feature):
    properties: StormTrackProperties = Field(default_factory=StormTrackProperties)


class FacilityFeature(_Feature):
    properties: FacilityProperties = Field(default_factory=FacilityProperties)


class DistrictCollection(_FeedModel):
    type: Literal["FeatureCollection"]
    features: List[DistrictFeature]


class StormTrackCollection(_FeedModel):
    type: Literal["FeatureCollection"]
    features: List[StormTrackFeature]


class FacilityCollection(_FeedModel):
    type: Literal["FeatureCollection"]
    features: List[FacilityFeature]


class SummaryStats(_FeedModel):
    total_districts: int
    high_risk_districts: int
    total_health_facilities: int
    total_education_facilities: int
