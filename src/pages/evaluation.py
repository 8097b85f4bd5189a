"""
src/pages/evaluation.py
────────────────────────
Model evaluation page: run an evaluation, confusion matrix, detailed
metrics, business impact and evaluation history.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.Div(
                        [
                            html.H2("Model Evaluation", className="page-title"),
                            html.P(
                                "Detection accuracy, early-warning lead time and business impact",
                                className="page-subtitle",
                            ),
                        ]
                    ),
                    html.Button(
                        "Run evaluation",
                        id="eval-run-btn",
                        n_clicks=0,
                        style={
                            "fontSize": ".8rem",
                            "fontWeight": "600",
                            "color": "#58a6ff",
                            "background": "transparent",
                            "border": "1px solid #58a6ff",
                            "borderRadius": "4px",
                            "padding": "6px 14px",
                            "cursor": "pointer",
                            "height": "fit-content",
                        },
                    ),
                ],
                className="page-header",
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
            ),
            html.Div(id="eval-feedback", style={"fontSize": ".78rem", "color": "#8b949e", "marginBottom": "8px"}),
            # ── Headline metrics ───────────────────────────────────────────────
            html.Div(id="eval-kpis", className="mb-3"),
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Confusion Matrix", className="chart-title"),
                                dcc.Graph(id="eval-confusion-matrix", config={"displayModeBar": False}),
                            ],
                            className="chart-card",
                        ),
                        md=5,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Detailed Metrics", className="chart-title"),
                                html.Div(id="eval-detail-table"),
                            ],
                            className="chart-card",
                        ),
                        md=7,
                    ),
                ],
                className="g-3 mb-3",
            ),
            html.Div(
                [
                    html.Div("Evaluation History", className="chart-title"),
                    html.Div(id="eval-history", style={"overflowX": "auto"}),
                ],
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
