import math
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import pydeck as pdk

from ..config import MAP_CENTER, MAP_MAX_ZOOM, MAP_ZOOM
from ..utils.geo import Bounds, point_lonlat
from .layers import LayerSpec

# Base map name -> carto style
BASEMAP_STYLES = {
    "OpenStreetMap": "road",
    "Dark Theme": "dark",
}

TILE_SIZE = 256
DEFAULT_HIGHLIGHT = [102, 102, 102, 128]

TOOLTIP_STYLE = {
    "backgroundColor": "white",
    "color": "#1a202c",
    "fontFamily": "Arial, sans-serif",
    "fontSize": "12px",
}


def hex_to_rgba(color: str, opacity: float = 1.0) -> List[int]:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return [r, g, b, int(round(255 * max(0.0, min(1.0, opacity))))]


def view_state_for_bounds(
    bounds: Optional[Bounds],
    max_zoom: float = MAP_MAX_ZOOM,
    width: int = 900,
    height: int = 620,
) -> pdk.ViewState:
    """Centre on the bounds and pick the largest zoom that still shows all of them."""
    if bounds is None:
        return pdk.ViewState(latitude=MAP_CENTER[0], longitude=MAP_CENTER[1], zoom=MAP_ZOOM)
    min_lon, min_lat, max_lon, max_lat = bounds
    lon_span = max(max_lon - min_lon, 1e-6)
    lat_span = max(max_lat - min_lat, 1e-6)
    zoom_x = math.log2(width * 360.0 / (lon_span * TILE_SIZE))
    zoom_y = math.log2(height * 180.0 / (lat_span * TILE_SIZE))
    zoom = max(0.0, min(zoom_x, zoom_y, max_zoom))
    return pdk.ViewState(
        latitude=(min_lat + max_lat) / 2.0,
        longitude=(min_lon + max_lon) / 2.0,
        zoom=round(zoom, 2),
    )


def _polygon_layer(spec: LayerSpec, highlight: List[int]) -> pdk.Layer:
    features = []
    for f in spec.features:
        style = f.style
        features.append(
            {
                "type": "Feature",
                "geometry": f.geometry,
                "properties": {
                    **f.properties,
                    "feature_index": f.index,
                    "popup_html": f.popup,
                    "fill_color": hex_to_rgba(style["fillColor"], style["fillOpacity"]),
                    "line_color": hex_to_rgba(style["color"], style["opacity"]),
                    "line_width": style["weight"],
                },
            }
        )
    return pdk.Layer(
        "GeoJsonLayer",
        id=spec.name,
        data={"type": "FeatureCollection", "features": features},
        pickable=True,
        stroked=True,
        filled=True,
        get_fill_color="properties.fill_color",
        get_line_color="properties.line_color",
        get_line_width="properties.line_width",
        line_width_units="pixels",
        auto_highlight=True,
        highlight_color=highlight,
    )


def _point_layer(spec: LayerSpec) -> pdk.Layer:
    rows = []
    for f in spec.features:
        lonlat = point_lonlat(f.geometry)
        if lonlat is None:
            continue
        style = f.style
        rows.append(
            {
                "lon": lonlat[0],
                "lat": lonlat[1],
                "radius": style["radius"],
                "fill_color": hex_to_rgba(style["fillColor"], style["fillOpacity"]),
                "line_color": hex_to_rgba(style["color"], style["opacity"]),
                "line_width": style["weight"],
                "popup_html": f.popup,
                "feature_index": f.index,
            }
        )
    return pdk.Layer(
        "ScatterplotLayer",
        id=spec.name,
        data=pd.DataFrame(rows),
        pickable=True,
        stroked=True,
        filled=True,
        get_position="[lon, lat]",
        get_radius="radius",
        radius_units="pixels",
        get_fill_color="fill_color",
        get_line_color="line_color",
        get_line_width="line_width",
        line_width_units="pixels",
    )


def deck_layer(spec: LayerSpec, highlight: Optional[List[int]] = None) -> pdk.Layer:
    if spec.kind == "polygons":
        return _polygon_layer(spec, highlight or DEFAULT_HIGHLIGHT)
    return _point_layer(spec)


def highlight_from_style(style: Dict[str, Any]) -> List[int]:
    """deck.gl highlights with one colour; take it from the hover outline."""
    return hex_to_rgba(style.get("color", "#666"), style.get("fillOpacity", 0.9) / 2)


def build_deck(
    layers: Iterable[LayerSpec],
    view_state: pdk.ViewState,
    basemap: str = "OpenStreetMap",
    highlight: Optional[List[int]] = None,
) -> pdk.Deck:
    return pdk.Deck(
        layers=[deck_layer(spec, highlight) for spec in layers],
        initial_view_state=view_state,
        map_provider="carto",
        map_style=BASEMAP_STYLES.get(basemap, "road"),
        tooltip={"html": "{popup_html}", "style": TOOLTIP_STYLE},
    )
