"""
src/pages/overview.py
──────────────────────
Fleet overview page: KPIs, simulator controls, prediction engine, risk
forecast, recent faults and model performance trend.

Static structure; dynamic data injected via callbacks.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

from config.faults import TRIGGER_BUTTON_FAULTS, fault_label

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"

_BTN = {
    "fontSize": ".78rem",
    "fontWeight": "600",
    "background": "transparent",
    "borderRadius": "4px",
    "padding": "4px 12px",
    "cursor": "pointer",
}


def _simulator_card() -> html.Div:
    fault_buttons = [
        dbc.Col(
            html.Button(
                f"⚡ {fault_label(fault_type)}",
                id={"type": "fault-btn", "index": fault_type},
                n_clicks=0,
                style={**_BTN, "width": "100%", "color": "#c9d1d9", "border": f"1px solid {BORDER}"},
            ),
            xs=6,
        )
        for fault_type in TRIGGER_BUTTON_FAULTS
    ]
    return html.Div(
        [
            html.Div(
                [
                    html.Span("SCADA Telemetry Simulator", className="chart-title"),
                    html.Span(id="sim-readings-count", style={"fontSize": ".72rem", "color": MUTED}),
                ],
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "baseline"},
            ),
            html.Div(
                [
                    html.Button(
                        "▶ Start",
                        id="sim-toggle-btn",
                        n_clicks=0,
                        style={**_BTN, "color": "#2ea44f", "border": "1px solid #2ea44f"},
                    ),
                    html.Button(
                        "↺ Reset",
                        id="sim-reset-btn",
                        n_clicks=0,
                        style={**_BTN, "color": MUTED, "border": f"1px solid {BORDER}"},
                    ),
                ],
                style={"display": "flex", "gap": "8px", "margin": "10px 0"},
            ),
            dbc.Switch(
                id="sim-auto-switch",
                label="Auto-inject random faults",
                value=False,
                style={"fontSize": ".8rem", "color": MUTED},
            ),
            html.Div(id="sim-active-fault", className="mb-2"),
            dbc.Row(fault_buttons, className="g-2"),
            html.Div(id="sim-feedback", style={"fontSize": ".72rem", "color": MUTED, "marginTop": "8px"}),
        ],
        className="chart-card",
    )


def _prediction_engine_card() -> html.Div:
    return html.Div(
        [
            html.Div("AI Prediction Engine", className="chart-title"),
            html.Div(id="engine-status", style={"margin": "8px 0"}),
            html.Button(
                "Run analysis now",
                id="engine-run-btn",
                n_clicks=0,
                style={**_BTN, "color": "#58a6ff", "border": "1px solid #58a6ff"},
            ),
            html.Div(id="engine-feedback", style={"fontSize": ".72rem", "color": MUTED, "marginTop": "8px"}),
        ],
        className="chart-card",
    )


def layout() -> html.Div:
    return html.Div(
        [
            # ── Page header ───────────────────────────────────────────────────
            html.Div(
                [
                    html.H2("Grid Operations Overview", className="page-title"),
                    html.P(
                        "Renewable fleet health, SCADA telemetry and fault risk in real time",
                        className="page-subtitle",
                    ),
                ],
                className="page-header",
            ),
            # ── Fleet KPI banner (dynamic) ────────────────────────────────────
            html.Div(id="overview-kpi-banner", className="mb-4"),
            # ── Simulator + prediction engine ─────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(_simulator_card(), md=7),
                    dbc.Col(_prediction_engine_card(), md=5),
                ],
                className="g-3 mb-3",
            ),
            # ── Risk forecast + recent faults ─────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Risk Forecast (24-72h)", className="chart-title"),
                                html.Div(id="overview-risk-forecast"),
                            ],
                            className="chart-card",
                        ),
                        md=6,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Recent Faults", className="chart-title"),
                                html.Div(id="overview-recent-faults"),
                            ],
                            className="chart-card",
                        ),
                        md=6,
                    ),
                ],
                className="g-3 mb-3",
            ),
            # ── Performance trend ─────────────────────────────────────────────
            html.Div(
                [
                    html.Div("Model Performance Trend", className="chart-title"),
                    dcc.Graph(id="overview-performance-chart", config={"displayModeBar": False}),
                ],
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
