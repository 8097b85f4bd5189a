"""
src/layout/components/health_gauge.py
──────────────────────────────────────
Site health gauge: needle value is the site's health score, colour follows
the site's operating status, and the delta compares it to the fleet average.
"""
from __future__ import annotations

import plotly.graph_objects as go
from dash import dcc

from config.faults import SITE_STATUS_COLORS
from src.data.models import Site

CARD_BG = "#161b22"
MUTED = "#8b949e"

HEALTHY_SCORE = 80
WARNING_SCORE = 60


def health_color(score: float) -> str:
    if score >= HEALTHY_SCORE:
        return "#2ea44f"
    if score >= WARNING_SCORE:
        return "#e8a020"
    return "#da3633"


def health_gauge(site: Site, fleet_avg: float | None = None, height: int = 200) -> dcc.Graph:
    """
    Args:
        site: Site whose health score is shown
        fleet_avg: Fleet average health; adds a delta readout when given
        height: Figure height in px
    """
    color = SITE_STATUS_COLORS.get(site.status.value, health_color(site.health_score))
    mode = "gauge+number" if fleet_avg is None else "gauge+number+delta"

    fig = go.Figure(go.Indicator(
        mode=mode,
        value=site.health_score,
        number={"suffix": "%", "font": {"color": color, "size": 28}},
        delta={
            "reference": fleet_avg or 0,
            "valueformat": ".0f",
            "increasing": {"color": "#2ea44f"},
            "decreasing": {"color": "#da3633"},
        },
        title={"text": f"{site.name}<br><span style='font-size:10px'>{site.status.value}</span>",
               "font": {"color": MUTED, "size": 12}},
        gauge={
            "axis": {"range": [0, 100], "tickcolor": "#30363d", "tickfont": {"color": MUTED, "size": 9}},
            "bar": {"color": color, "thickness": 0.25},
            "bgcolor": "rgba(0,0,0,0)",
            "borderwidth": 0,
            "steps": [
                {"range": [0, WARNING_SCORE], "color": "rgba(218,54,51,0.12)"},
                {"range": [WARNING_SCORE, HEALTHY_SCORE], "color": "rgba(232,160,32,0.10)"},
                {"range": [HEALTHY_SCORE, 100], "color": "rgba(46,164,79,0.10)"},
            ],
        },
    ))
    fig.update_layout(
        paper_bgcolor=CARD_BG,
        margin={"l": 20, "r": 20, "t": 50, "b": 10},
        height=height,
        font={"color": "#c9d1d9"},
    )
    return dcc.Graph(figure=fig, config={"displayModeBar": False}, style={"height": f"{height}px"})
