# maps.py — Leaflet (folium) maps of scored boroughs
import io

import folium
import numpy as np
import pandas as pd
import pydeck as pdk

from config import BAND_COLORS
from selling_score import score_band


def _valid_geo(scored: pd.DataFrame) -> pd.DataFrame:
    if not all(c in scored.columns for c in ["lat", "lon"]) or scored[["lat", "lon"]].dropna().empty:
        return pd.DataFrame()
    g = scored.dropna(subset=["lat", "lon"]).copy()
    return g[g["lat"].between(-90, 90) & g["lon"].between(-180, 180)]


def _popup_html(r) -> str:
    parts = [
        f"<b>{r.get('borough', '')}</b>",
        f"Score: {r.get('composite_score', np.nan):.0f} ({r.get('score_band', '')})",
        f"Engagement: {r.get('engagement', np.nan):,.0f}",
        f"Dwell time: {r.get('dwell_time', np.nan):,.0f}s",
        f"Personalization: {r.get('personalization_score', np.nan):.2f}",
        f"Conversion: {100 * r.get('conversion_rate', np.nan):.1f}%",
    ]
    return "<br>".join(parts)


def _add_legend(m: folium.Map) -> None:
    items = "".join(
        f"<div><span style='display:inline-block;width:12px;height:12px;border-radius:3px;"
        f"background:{color};margin-right:6px'></span>{band}</div>"
        for band, color in BAND_COLORS.items()
    )
    html = (
        "<div style='position:fixed;bottom:24px;left:24px;z-index:9999;background:white;"
        "padding:8px 10px;border-radius:6px;box-shadow:0 1px 4px rgba(0,0,0,.3);font-size:12px'>"
        f"<b>Selling score</b>{items}</div>"
    )
    m.get_root().html.add_child(folium.Element(html))


def make_borough_marker_map(scored: pd.DataFrame) -> folium.Map | None:
    """One CircleMarker per borough, coloured by score band."""
    g = _valid_geo(scored)
    if g.empty:
        return None
    if "score_band" not in g.columns:
        g["score_band"] = g["composite_score"].apply(score_band)

    m = folium.Map(location=[g["lat"].mean(), g["lon"].mean()], zoom_start=10, tiles="OpenStreetMap")
    layer = folium.FeatureGroup(name="Boroughs").add_to(m)
    for _, r in g.iterrows():
        color = BAND_COLORS.get(r["score_band"], "#64748b")
        folium.CircleMarker(
            location=[r["lat"], r["lon"]],
            radius=8, color="#1f2937", weight=1,
            fill=True, fill_color=color, fill_opacity=0.85,
            tooltip=str(r.get("borough", "")),
            popup=folium.Popup(_popup_html(r), max_width=300),
        ).add_to(layer)
    _add_legend(m)
    folium.LayerControl(collapsed=False).add_to(m)
    return m


def make_score_bubble_map(scored: pd.DataFrame) -> folium.Map | None:
    """Proportional circles (meters) sized by composite score."""
    g = _valid_geo(scored)
    if g.empty:
        return None
    m = folium.Map(location=[g["lat"].mean(), g["lon"].mean()], zoom_start=10, tiles="OpenStreetMap")
    for _, r in g.iterrows():
        score = float(r["composite_score"]) if pd.notna(r["composite_score"]) else 0.0
        radius = float(300 + 20 * score)  # meters
        folium.Circle(
            location=[r["lat"], r["lon"]],
            radius=radius, color="#2563eb", weight=2,
            fill=True, fill_opacity=0.15,
            popup=folium.Popup(f"<b>{r.get('borough', '')}</b><br>Score: {score:.0f}", max_width=300),
        ).add_to(m)
    return m


def map_to_html(m: folium.Map) -> bytes:
    buf = io.BytesIO()
    m.save(buf, close_file=False)
    return buf.getvalue()


# ------------ pydeck (dashboard scatter) ------------
def _hex_to_rgb(color: str):
    color = color.lstrip("#")
    return [int(color[i:i + 2], 16) for i in (0, 2, 4)]


def make_pydeck_deck(scored: pd.DataFrame) -> pdk.Deck | None:
    """ScatterplotLayer with radius scaled by score and colour by band."""
    g = _valid_geo(scored)
    if g.empty:
        return None
    if "score_band" not in g.columns:
        g["score_band"] = g["composite_score"].apply(score_band)
    g["color"] = g["score_band"].map(lambda b: _hex_to_rgb(BAND_COLORS.get(b, "#64748b")))
    g["radius_m"] = (300 + 20 * g["composite_score"].fillna(0)).clip(300, 2300)
    view = pdk.ViewState(latitude=float(g["lat"].mean()), longitude=float(g["lon"].mean()), zoom=9.2)
    layer = pdk.Layer("ScatterplotLayer", data=g, get_position='[lon, lat]',
                      get_radius='radius_m', radius_min_pixels=3, radius_max_pixels=40,
                      get_fill_color='color', pickable=True, auto_highlight=True)
    tooltip = {"html": "<b>{borough}</b><br/>Score {composite_score}<br/>{score_band}",
               "style": {"backgroundColor": "steelblue", "color": "white"}}
    return pdk.Deck(layers=[layer], initial_view_state=view, tooltip=tooltip)
