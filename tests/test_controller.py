import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from stormrisk.dashboard.controller import LOAD_ERROR_MESSAGE, DashboardController
from stormrisk.dashboard.state import (
    DISTRICTS,
    EDUCATION_FACILITIES,
    HEALTH_FACILITIES,
    STORM_TRACK,
    DashboardState,
    LoadStatus,
)
from stormrisk.data.demo import demo_transport
from stormrisk.data.feeds import load_dashboard_data
from stormrisk.errors import LoadFailure


class FakeView:
    """Records every call the controller makes."""

    def __init__(self):
        self.calls = []
        self.layers = {}
        self.handlers = {}
        self.toggles = {}
        self.bounds = None
        self.panel = None
        self.errors = []
        self.downloads = []

    def init_map(self, center, zoom, max_zoom, basemaps):
        self.calls.append(("init_map", center, zoom))

    def show_loading(self):
        self.calls.append(("show_loading",))

    def hide_loading(self):
        self.calls.append(("hide_loading",))

    def show_error(self, message):
        self.calls.append(("show_error",))
        self.errors.append(message)

    def update_stats(self, stats):
        self.calls.append(("update_stats", stats.total_districts))

    def add_layer(self, layer):
        self.calls.append(("add_layer", layer.name))
        self.layers[layer.name] = layer

    def remove_layer(self, name):
        self.calls.append(("remove_layer", name))
        self.layers.pop(name)

    def fit_bounds(self, bounds):
        self.bounds = bounds

    def show_panel(self, panel):
        self.panel = panel

    def on_district_hover(self, enter, leave):
        self.handlers["enter"] = enter
        self.handlers["leave"] = leave

    def on_district_select(self, handler):
        self.handlers["select"] = handler

    def on_layer_toggle(self, name, handler):
        self.toggles[name] = handler

    def on_export(self, handler):
        self.handlers["export"] = handler

    def deliver_download(self, artifact):
        self.downloads.append(artifact)


def _demo_loader():
    return load_dashboard_data(base_url="http://demo", transport=demo_transport())


def _failing_loader():
    raise LoadFailure("health", "HTTP 503 from /api/health")


@pytest.fixture
def started():
    view = FakeView()
    controller = DashboardController(view, loader=_demo_loader)
    controller.start()
    return view, controller


def test_failed_load_renders_nothing_and_shows_one_error():
    view = FakeView()
    controller = DashboardController(view, loader=_failing_loader)
    state = controller.start()
    assert state.status is LoadStatus.FAILED
    assert state.data is None
    assert view.errors == [LOAD_ERROR_MESSAGE]
    names = [c[0] for c in view.calls]
    assert "add_layer" not in names
    assert "update_stats" not in names
    assert "hide_loading" not in names
    assert view.handlers == {}


def test_failed_state_is_not_retried_on_rerender():
    calls = []

    def loader():
        calls.append(1)
        return _demo_loader()

    view = FakeView()
    state = DashboardState().failed(LOAD_ERROR_MESSAGE)
    DashboardController(view, loader=loader, state=state).start()
    assert calls == []
    assert view.errors == [LOAD_ERROR_MESSAGE]


def test_unexpected_errors_propagate():
    def broken():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        DashboardController(FakeView(), loader=broken).start()


def test_successful_start_renders_everything(started):
    view, controller = started
    assert controller.state.status is LoadStatus.READY
    assert list(view.layers) == [DISTRICTS, STORM_TRACK, HEALTH_FACILITIES, EDUCATION_FACILITIES]
    assert ("update_stats", 10) in view.calls
    assert view.calls[-1] == ("hide_loading",)
    min_lon, min_lat, max_lon, max_lat = view.bounds
    assert min_lon == pytest.approx(89.05)
    assert max_lon == pytest.approx(92.40)
    assert min_lat == pytest.approx(20.80)
    assert max_lat == pytest.approx(22.65)
    assert set(view.toggles) == {STORM_TRACK, HEALTH_FACILITIES, EDUCATION_FACILITIES}


def test_loaded_state_is_reused_without_fetching(started):
    _, first = started
    view = FakeView()
    controller = DashboardController(view, loader=_failing_loader, state=first.state)
    controller.start()
    assert controller.state.status is LoadStatus.READY
    assert view.errors == []
    assert DISTRICTS in view.layers


def test_toggles_attach_and_detach_independently(started):
    view, controller = started
    view.toggles[HEALTH_FACILITIES](False)
    assert HEALTH_FACILITIES not in view.layers
    assert STORM_TRACK in view.layers and EDUCATION_FACILITIES in view.layers
    view.toggles[STORM_TRACK](False)
    view.toggles[HEALTH_FACILITIES](True)
    assert set(view.layers) == {DISTRICTS, HEALTH_FACILITIES, EDUCATION_FACILITIES}
    assert controller.state.visible == frozenset({HEALTH_FACILITIES, EDUCATION_FACILITIES})


def test_repeated_toggle_signal_is_a_no_op(started):
    view, _ = started
    before = len(view.calls)
    view.toggles[EDUCATION_FACILITIES](True)
    assert len(view.calls) == before


def test_hidden_layers_stay_hidden_on_rerender(started):
    view, controller = started
    view.toggles[STORM_TRACK](False)
    rerun = FakeView()
    DashboardController(rerun, loader=_failing_loader, state=controller.state).start()
    assert STORM_TRACK not in rerun.layers


def test_selecting_a_district_fills_panel_and_frames_it(started):
    view, controller = started
    view.handlers["select"](0)
    assert controller.state.selected == 0
    assert view.panel.title == "Shyamnagar"
    rows = dict(view.panel.rows)
    assert rows["District"] == "Satkhira"
    assert rows["Division"] == "Khulna"
    assert rows["Storm Risk Score"] == "5/5"
    assert rows["Risk Level"] == "Very High"
    assert rows["Children Under 5"] == "41,230.4"
    assert view.bounds == pytest.approx((89.10, 22.15, 89.30, 22.35))


def test_unknown_selection_is_ignored(started):
    view, controller = started
    view.handlers["select"](99)
    assert controller.state.selected is None
    assert view.panel is None


def test_hover_handlers_emphasise_and_restore(started):
    view, _ = started
    feature = {"properties": {"storm_risk_score": 3}}
    entered = view.handlers["enter"](feature)
    left = view.handlers["leave"](feature)
    assert entered["color"] == "#666" and entered["weight"] == 3
    assert left["color"] == "#fff" and left["weight"] == 2
    assert entered["fillColor"] == left["fillColor"] == "#fee08b"


def test_export_handler_uses_loaded_districts(started):
    view, _ = started
    artifact = view.handlers["export"]()
    lines = artifact.content.split("\n")
    assert len(lines) == 11
    assert lines[1].endswith('"Very High"')
    assert lines[-1].startswith('"Cox\'s Bazar","Teknaf"')
    assert view.downloads[-1] is artifact
    assert artifact.filename == "bangladesh_subdistricts_export.csv"
    assert artifact.mime == "text/csv"
