import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import pandas as pd
import pydeck as pdk
import streamlit as st

sys.path.append(str(Path(__file__).resolve().parents[1]))

from stormrisk.config import DEMO_MODE, LOG_LEVEL  # noqa: E402
from stormrisk.dashboard.controller import DashboardController  # noqa: E402
from stormrisk.dashboard.deck import (  # noqa: E402
    build_deck,
    highlight_from_style,
    view_state_for_bounds,
)
from stormrisk.dashboard.layers import DistrictPanel, LayerSpec, format_timestamp  # noqa: E402
from stormrisk.dashboard.state import (  # noqa: E402
    DISTRICTS,
    EDUCATION_FACILITIES,
    HEALTH_FACILITIES,
    STORM_TRACK,
    DashboardState,
)
from stormrisk.data.demo import demo_transport  # noqa: E402
from stormrisk.data.feeds import load_dashboard_data  # noqa: E402
from stormrisk.data.schemas import SummaryStats  # noqa: E402
from stormrisk.export.subdistricts import ExportArtifact  # noqa: E402
from stormrisk.styling.risk import RISK_COLORS, RISK_LABELS  # noqa: E402
from stormrisk.styling.storm import STORM_BANDS, TROPICAL_DEPRESSION, storm_categories  # noqa: E402

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
)

MAP_KEY = "district-map"
SOURCE_CHOICES = ["Live API", "Demo (synthetic)"]
TOGGLE_LABELS = {
    STORM_TRACK: "Storm track (Amphan)",
    HEALTH_FACILITIES: "Health facilities",
    EDUCATION_FACILITIES: "Education facilities",
}

if "dashboard_state" not in st.session_state:
    st.session_state["dashboard_state"] = {}

st.set_page_config(page_title="Bangladesh Storm Risk", layout="wide")
st.markdown(
    """
    <style>
    .hero-panel {
        text-align: center;
        padding: 1.6rem 2rem;
        margin-bottom: 1.4rem;
        border-radius: 22px;
        background: linear-gradient(140deg, rgba(49,130,206,0.12), rgba(215,48,39,0.10));
        border: 1px solid rgba(0,0,0,0.06);
    }
    .hero-eyebrow {
        letter-spacing: 0.3rem;
        text-transform: uppercase;
        font-size: 0.8rem;
        color: #718096;
        margin-bottom: 0.4rem;
    }
    .hero-headline {
        font-size: clamp(1.6rem, 3.5vw, 2.6rem);
        font-weight: 600;
    }
    .popup-title {
        font-weight: 700;
        font-size: 13px;
        margin-bottom: 4px;
    }
    .popup-info span {
        display: block;
        line-height: 1.4;
    }
    .risk-badge {
        padding: 1px 6px;
        border-radius: 8px;
        font-size: 11px;
        font-weight: 600;
    }
    .legend-dot {
        width: 14px;
        height: 14px;
        border-radius: 50%;
        display: inline-block;
        margin-right: 6px;
        border: 1px solid rgba(0,0,0,0.15);
    }
    </style>
    """,
    unsafe_allow_html=True,
)

st.markdown(
    """
    <section class="hero-panel">
        <p class="hero-eyebrow">Storm Risk · Bangladesh</p>
        <div class="hero-headline">Sub-district storm exposure, Cyclone Amphan's track and nearby facilities.</div>
    </section>
    """,
    unsafe_allow_html=True,
)


def _legend_row(color: str, label: str) -> str:
    return (
        "<div style='display:flex;align-items:center;font-size:0.85rem;margin-bottom:2px;'>"
        f"<span class='legend-dot' style='background-color:{color};'></span>{label}</div>"
    )


def _selected_index(selection: Any) -> Optional[int]:
    """Pull the picked district out of a pydeck selection state."""
    if not selection:
        return None
    picked = selection.get("selection", {}) or {}
    objects = (picked.get("objects", {}) or {}).get(DISTRICTS) or []
    if objects:
        obj = objects[0]
        props = obj.get("properties", obj) or {}
        index = props.get("feature_index")
        if index is not None:
            return int(index)
    indices = (picked.get("indices", {}) or {}).get(DISTRICTS) or []
    return int(indices[0]) if indices else None


class StreamlitMapView:
    """``MapView`` drawn with Streamlit widgets and a pydeck chart."""

    def __init__(self):
        self.layers: Dict[str, LayerSpec] = {}
        self.view_state = None
        self.basemap = "OpenStreetMap"
        self.highlight = None
        self._max_zoom = 18
        self._select: Optional[Callable[[int], None]] = None
        self._toggles: Dict[str, Callable[[bool], None]] = {}
        self._export = None
        self.artifact: Optional[ExportArtifact] = None
        self._ready = False
        self._loading = st.empty()
        self._stats_area = st.container()
        map_col, panel_col = st.columns([3, 1])
        self._map_area = map_col.container()
        self._panel_area = panel_col.empty()

    def init_map(
        self, center: Tuple[float, float], zoom: float, max_zoom: float, basemaps: Sequence[str]
    ) -> None:
        self._max_zoom = max_zoom
        self.view_state = pdk.ViewState(latitude=center[0], longitude=center[1], zoom=zoom)
        self.basemap = st.sidebar.radio("Base map", list(basemaps), index=0)

    def show_loading(self) -> None:
        self._loading.info("Loading map data…", icon="⏳")

    def hide_loading(self) -> None:
        self._loading.empty()
        self._ready = True

    def show_error(self, message: str) -> None:
        self._loading.error(message, icon="⚠️")

    def update_stats(self, stats: SummaryStats) -> None:
        with self._stats_area:
            cols = st.columns(4)
            cols[0].metric("Total sub-districts", f"{stats.total_districts:,}")
            cols[1].metric("High-risk sub-districts", f"{stats.high_risk_districts:,}")
            cols[2].metric("Health facilities", f"{stats.total_health_facilities:,}")
            cols[3].metric("Education facilities", f"{stats.total_education_facilities:,}")

    def add_layer(self, layer: LayerSpec) -> None:
        self.layers[layer.name] = layer

    def remove_layer(self, name: str) -> None:
        self.layers.pop(name, None)

    def fit_bounds(self, bounds) -> None:
        self.view_state = view_state_for_bounds(bounds, max_zoom=self._max_zoom)

    def show_panel(self, panel: DistrictPanel) -> None:
        with self._panel_area.container():
            st.markdown(f"#### {panel.title or 'Unnamed sub-district'}")
            for label, value in panel.rows:
                st.markdown(f"**{label}:** {value}")

    def on_district_hover(self, enter, leave) -> None:
        self.highlight = highlight_from_style(enter({}))

    def on_district_select(self, handler: Callable[[int], None]) -> None:
        self._select = handler

    def on_layer_toggle(self, name: str, handler: Callable[[bool], None]) -> None:
        self._toggles[name] = handler

    def on_export(self, handler) -> None:
        self._export = handler

    def run(self) -> None:
        if not self._ready:
            return
        st.sidebar.subheader("Layers")
        for name, handler in self._toggles.items():
            handler(st.sidebar.checkbox(TOGGLE_LABELS.get(name, name), value=True, key=f"toggle-{name}"))
        index = _selected_index(st.session_state.get(MAP_KEY))
        if index is not None and self._select is not None:
            self._select(index)
        else:
            self._panel_area.info("Click a sub-district to see its details.")
        deck = build_deck(self.layers.values(), self.view_state, self.basemap, self.highlight)
        with self._map_area:
            try:
                st.pydeck_chart(
                    deck,
                    use_container_width=True,
                    height=620,
                    key=MAP_KEY,
                    on_select="rerun",
                    selection_mode="single-object",
                )
            except Exception as exc:
                st.warning(f"Map failed to render: {exc}.", icon="⚠️")
        if self._export is not None:
            self._export()

    def deliver_download(self, artifact: ExportArtifact) -> None:
        # Streamlit needs the bytes before the click, so the button carries them
        self.artifact = artifact
        st.sidebar.download_button(
            "Export Data (CSV)",
            data=artifact.content.encode("utf-8"),
            file_name=artifact.filename,
            mime=artifact.mime,
            use_container_width=True,
        )


st.sidebar.title("Storm risk dashboard")
source = st.sidebar.radio(
    "Data source",
    SOURCE_CHOICES,
    index=1 if DEMO_MODE else 0,
    help="Live reads the configured feed API; Demo serves bundled synthetic feeds.",
)
use_demo = source != "Live API"


def _loader():
    with st.spinner("Fetching district, storm track and facility feeds…"):
        return load_dashboard_data(transport=demo_transport() if use_demo else None)


view = StreamlitMapView()
controller = DashboardController(
    view,
    loader=_loader,
    state=st.session_state["dashboard_state"].get(source),
)
controller.start()
view.run()
st.session_state["dashboard_state"][source] = controller.state

state: DashboardState = controller.state
if state.data is not None:
    legend_risk, legend_storm = st.columns(2)
    with legend_risk:
        st.markdown("**Storm risk score**")
        st.markdown(
            "".join(_legend_row(RISK_COLORS[s], f"{s} - {RISK_LABELS[s]}") for s in range(5, -1, -1)),
            unsafe_allow_html=True,
        )
    with legend_storm:
        st.markdown("**Storm category (sustained wind)**")
        rows = [_legend_row(color, f"{label} (≥{t} mph)") for t, label, color in STORM_BANDS]
        rows.append(_legend_row(TROPICAL_DEPRESSION[1], f"{TROPICAL_DEPRESSION[0]} (<39 mph)"))
        st.markdown("".join(rows), unsafe_allow_html=True)

    with st.expander("Storm track points"):
        track = pd.DataFrame(
            [
                {
                    "time": format_timestamp(f.properties.timestamp),
                    "max_sustained_wind": f.properties.max_sustained_wind,
                    "central_pressure": f.properties.central_pressure,
                }
                for f in state.data.amphan.features
            ]
        )
        if not track.empty:
            track["category"] = storm_categories(track["max_sustained_wind"]).values
        st.dataframe(track, use_container_width=True)

    if view.artifact is not None:
        with st.expander("Export preview"):
            st.dataframe(view.artifact.rows, use_container_width=True)
    st.caption(
        "Severity in the export comes from each sub-district's risk_level label; map colours "
        "come from storm_risk_score."
    )
