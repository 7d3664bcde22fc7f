from typing import Any, Callable, Dict, Protocol, Sequence, Tuple

from ..data.schemas import SummaryStats
from ..export.subdistricts import ExportArtifact
from ..utils.geo import Bounds
from .layers import DistrictPanel, LayerSpec

StyleHandler = Callable[[Dict[str, Any]], Dict[str, Any]]


class MapView(Protocol):
    """Capabilities the controller needs from whatever draws the dashboard."""

    def init_map(
        self, center: Tuple[float, float], zoom: float, max_zoom: float, basemaps: Sequence[str]
    ) -> None: ...

    def show_loading(self) -> None: ...

    def hide_loading(self) -> None: ...

    def show_error(self, message: str) -> None: ...

    def update_stats(self, stats: SummaryStats) -> None: ...

    def add_layer(self, layer: LayerSpec) -> None: ...

    def remove_layer(self, name: str) -> None: ...

    def fit_bounds(self, bounds: Bounds) -> None: ...

    def show_panel(self, panel: DistrictPanel) -> None: ...

    def on_district_hover(self, enter: StyleHandler, leave: StyleHandler) -> None: ...

    def on_district_select(self, handler: Callable[[int], None]) -> None: ...

    def on_layer_toggle(self, name: str, handler: Callable[[bool], None]) -> None: ...

    def on_export(self, handler: Callable[[], ExportArtifact]) -> None: ...

    def deliver_download(self, artifact: ExportArtifact) -> None: ...
