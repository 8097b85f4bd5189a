"""
src/pages/predictions.py
─────────────────────────
Predictions page: ranked fault predictions with "create task", and the
maintenance queue with operator status buttons.
"""

import dash_bootstrap_components as dbc
from dash import html


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Fault Predictions", className="page-title"),
                    html.P(
                        "Detector-bank predictions ranked by probability · maintenance queue",
                        className="page-subtitle",
                    ),
                ],
                className="page-header",
            ),
            # ── Summary KPIs ───────────────────────────────────────────────────
            html.Div(id="predictions-kpis", className="mb-3"),
            html.Div(id="predictions-feedback", style={"fontSize": ".78rem", "color": "#8b949e", "marginBottom": "8px"}),
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Active Predictions", className="chart-title"),
                                html.Div(id="predictions-table", style={"overflowX": "auto"}),
                            ],
                            className="chart-card",
                        ),
                        lg=7,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Maintenance Queue", className="chart-title"),
                                html.Div(id="maintenance-queue"),
                            ],
                            className="chart-card",
                        ),
                        lg=5,
                    ),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
