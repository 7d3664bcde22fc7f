from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, Optional

from ..data.feeds import DashboardData
from ..data.schemas import DistrictFeature

DISTRICTS = "districts"
STORM_TRACK = "storm_track"
HEALTH_FACILITIES = "health_facilities"
EDUCATION_FACILITIES = "education_facilities"

TOGGLE_LAYERS = (STORM_TRACK, HEALTH_FACILITIES, EDUCATION_FACILITIES)


class LoadStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class DashboardState:
    """Session state; every change produces a new instance."""

    status: LoadStatus = LoadStatus.LOADING
    data: Optional[DashboardData] = None
    error: Optional[str] = None
    visible: FrozenSet[str] = frozenset(TOGGLE_LAYERS)
    selected: Optional[int] = None

    def loaded(self, data: DashboardData) -> "DashboardState":
        return replace(self, status=LoadStatus.READY, data=data, error=None)

    def failed(self, message: str) -> "DashboardState":
        return replace(self, status=LoadStatus.FAILED, data=None, error=message)

    def with_layer(self, name: str, visible: bool) -> "DashboardState":
        layers = self.visible | {name} if visible else self.visible - {name}
        return replace(self, visible=frozenset(layers))

    def with_selection(self, index: Optional[int]) -> "DashboardState":
        return replace(self, selected=index)

    @property
    def selected_district(self) -> Optional[DistrictFeature]:
        if self.data is None or self.selected is None:
            return None
        features = self.data.bangladesh.features
        if 0 <= self.selected < len(features):
            return features[self.selected]
        return None
