import logging
from functools import partial
from typing import Callable, Dict, Optional

from ..config import BASEMAPS, MAP_CENTER, MAP_MAX_ZOOM, MAP_ZOOM
from ..data.feeds import DashboardData, load_dashboard_data
from ..errors import LoadFailure
from ..export.subdistricts import ExportArtifact, export_subdistricts
from ..styling.risk import district_style, hover_style
from ..utils.geo import geometry_bounds, union_bounds
from .layers import LayerSpec, build_layers, district_panel
from .state import DISTRICTS, TOGGLE_LAYERS, DashboardState, LoadStatus
from .view import MapView

LOGGER = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load map data. Please refresh the page."


class DashboardController:
    """
    Drives one dashboard session against a ``MapView``:
    init map -> load feeds -> stats -> layers -> fit -> handlers -> ready.

    The controller owns ``state`` and replaces it on every change; callers
    persist ``controller.state`` between renders.
    """

    def __init__(
        self,
        view: MapView,
        loader: Optional[Callable[[], DashboardData]] = None,
        state: Optional[DashboardState] = None,
    ):
        self.view = view
        self.loader = loader or load_dashboard_data
        self.state = state or DashboardState()
        self.layers: Dict[str, LayerSpec] = {}

    def start(self) -> DashboardState:
        self.view.init_map(MAP_CENTER, MAP_ZOOM, MAP_MAX_ZOOM, BASEMAPS)
        self.view.show_loading()
        if self.state.status is LoadStatus.LOADING:
            self.load_data()
        if self.state.status is LoadStatus.FAILED:
            self.view.show_error(self.state.error or LOAD_ERROR_MESSAGE)
            return self.state
        self.render()
        self.attach_handlers()
        self.view.hide_loading()
        return self.state

    def load_data(self) -> None:
        try:
            data = self.loader()
        except LoadFailure as exc:
            LOGGER.exception("Error loading data: %s", exc)
            self.state = self.state.failed(LOAD_ERROR_MESSAGE)
        else:
            self.state = self.state.loaded(data)

    def render(self) -> None:
        data = self.state.data
        self.view.update_stats(data.stats)
        self.layers = build_layers(data)
        for name, layer in self.layers.items():
            if name == DISTRICTS or name in self.state.visible:
                self.view.add_layer(layer)
        bounds = union_bounds(f.geometry for f in data.bangladesh.features)
        if bounds is not None:
            self.view.fit_bounds(bounds)

    def attach_handlers(self) -> None:
        self.view.on_district_hover(
            enter=lambda feature: hover_style(district_style(feature)),
            leave=district_style,
        )
        self.view.on_district_select(self.select_district)
        for name in TOGGLE_LAYERS:
            self.view.on_layer_toggle(name, partial(self.toggle_layer, name))
        self.view.on_export(self.export)

    def select_district(self, index: int) -> None:
        features = self.state.data.bangladesh.features
        if not 0 <= index < len(features):
            LOGGER.warning("Ignoring selection of unknown district index %s", index)
            return
        self.state = self.state.with_selection(index)
        feature = features[index]
        self.view.show_panel(district_panel(feature.properties))
        bounds = geometry_bounds(feature.geometry)
        if bounds is not None:
            self.view.fit_bounds(bounds)

    def toggle_layer(self, name: str, checked: bool) -> None:
        if checked == (name in self.state.visible):
            return
        self.state = self.state.with_layer(name, checked)
        if checked:
            self.view.add_layer(self.layers[name])
        else:
            self.view.remove_layer(name)

    def export(self) -> ExportArtifact:
        artifact = export_subdistricts(self.state.data.bangladesh)
        self.view.deliver_download(artifact)
        return artifact
