"""
src/pages/sites.py
───────────────────
Site detail page: site selector, health, latest readings, telemetry chart
and the SCADA cyber-health panel.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

from config.telemetry import DEFAULT_METRIC, METRIC_OPTIONS

MUTED = "#8b949e"

_LABEL = {"fontSize": ".72rem", "color": MUTED, "textTransform": "uppercase"}


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Site Detail", className="page-title"),
                    html.P("Per-site telemetry, predictions and SCADA link health", className="page-subtitle"),
                ],
                className="page-header",
            ),

            # ── Controls ───────────────────────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        [
                            html.Label("Site", style=_LABEL),
                            dcc.Dropdown(id="sites-select", clearable=False, className="dark-dropdown"),
                        ],
                        md=4,
                    ),
                    dbc.Col(
                        [
                            html.Label("Metric", style=_LABEL),
                            dcc.Dropdown(
                                id="sites-metric",
                                options=METRIC_OPTIONS,
                                value=DEFAULT_METRIC,
                                clearable=False,
                                className="dark-dropdown",
                            ),
                        ],
                        md=3,
                    ),
                ],
                className="g-3 mb-3",
            ),

            # ── Site header: gauge + info + KPIs ───────────────────────────────
            dbc.Row(
                [
                    dbc.Col(html.Div(id="sites-gauge", className="chart-card"), md=3),
                    dbc.Col(html.Div(id="sites-info", className="chart-card"), md=9),
                ],
                className="g-3 mb-3",
            ),

            # ── Telemetry chart ────────────────────────────────────────────────
            html.Div(
                [
                    html.Div(id="sites-chart-title", className="chart-title"),
                    dcc.Graph(id="sites-telemetry-chart", config={"displayModeBar": False}),
                ],
                className="chart-card mb-3",
            ),

            # ── Predictions / maintenance / cyber health ───────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Site Predictions", className="chart-title"),
                                html.Div(id="sites-predictions"),
                            ],
                            className="chart-card",
                        ),
                        md=4,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Maintenance Actions", className="chart-title"),
                                html.Div(id="sites-maintenance"),
                            ],
                            className="chart-card",
                        ),
                        md=4,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("SCADA Cyber Health", className="chart-title"),
                                html.Div(id="sites-cyber-health"),
                            ],
                            className="chart-card",
                        ),
                        md=4,
                    ),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
