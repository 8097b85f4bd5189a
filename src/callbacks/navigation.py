"""
src/callbacks/navigation.py: routing, scheduler tick and Overview page callbacks.
"""
from __future__ import annotations

import plotly.graph_objects as go
import dash_bootstrap_components as dbc
from dash import Input, Output, State, html

from config.faults import fault_label, level_color
from src.analytics.fleet import evaluation_trend, fleet_summary, recent_faults, risk_forecast, site_name
from src.layout.components.data_table import empty_state, simple_table
from src.layout.components.health_gauge import health_color
from src.layout.components.kpi_card import kpi_card
from src.layout.components.status_badge import confidence_badge, status_badge
from src.layout.main import fault_banner
from src.layout.navbar import indicator_style
from src.runtime.monitor import FleetMonitor

CARD_BG = "#161b22"
GRID_CLR = "#30363d"
MUTED = "#8b949e"

OVERVIEW_FETCH_LIMIT = 50


def _performance_figure(trend) -> go.Figure:
    fig = go.Figure()
    if not trend.empty:
        x = [str(d) for d in trend["evaluation_date"]]
        for column, label, color in (
            ("precision", "Precision", "#58a6ff"),
            ("recall", "Recall", "#2ea44f"),
            ("f1", "F1", "#a371f7"),
        ):
            fig.add_trace(go.Scatter(x=x, y=trend[column], name=label, mode="lines+markers", line={"color": color}))
    else:
        fig.add_annotation(text="Run an evaluation to see the trend", showarrow=False, font={"color": MUTED})
    fig.update_layout(
        template="plotly_dark",
        paper_bgcolor=CARD_BG,
        plot_bgcolor=CARD_BG,
        margin={"l": 10, "r": 10, "t": 10, "b": 10},
        font={"color": "#c9d1d9", "size": 11},
        xaxis={"gridcolor": GRID_CLR, "type": "category"},
        yaxis={"gridcolor": GRID_CLR, "range": [0, 100], "ticksuffix": "%"},
        legend={"bgcolor": "rgba(0,0,0,0)", "font": {"size": 10}, "orientation": "h"},
        height=240,
    )
    return fig


def register(app, monitor: FleetMonitor) -> None:
    """Register routing, the scheduler tick and overview page callbacks."""
    store = monitor.store

    # ── Page routing ──────────────────────────────────────────────────────────
    from src.pages import evaluation, overview, predictions, sites

    @app.callback(
        Output("page-content", "children"),
        Input("url", "pathname"),
    )
    def display_page(pathname: str):
        routes = {
            "/": overview.layout,
            "/predictions": predictions.layout,
            "/sites": sites.layout,
            "/evaluation": evaluation.layout,
        }
        return routes.get(pathname, overview.layout)()

    # ── Navbar collapse ───────────────────────────────────────────────────────
    @app.callback(
        Output("navbar-collapse", "is_open"),
        Input("navbar-toggler", "n_clicks"),
        State("navbar-collapse", "is_open"),
        prevent_initial_call=True,
    )
    def toggle_navbar(n_clicks: int, is_open: bool) -> bool:
        return not is_open

    # ── Scheduler tick ────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("store-tick", "data"),
            Output("navbar-sim-indicator", "children"),
            Output("navbar-sim-indicator", "style"),
            Output("global-fault-banner", "children"),
        ],
        Input("interval-tick", "n_intervals"),
    )
    def tick(n_intervals: int):
        monitor.tick()
        sim = monitor.simulator.state
        if sim.active_fault:
            label = f"● {fault_label(sim.active_fault)} {sim.countdown_s}s"
        else:
            label = "● live" if sim.running else "● idle"
        return n_intervals, label, indicator_style(sim.running), fault_banner(sim.active_fault, sim.countdown_s)

    # ── Overview: KPIs, engine, forecast, faults, trend ───────────────────────
    @app.callback(
        [
            Output("overview-kpi-banner", "children"),
            Output("engine-status", "children"),
            Output("overview-risk-forecast", "children"),
            Output("overview-recent-faults", "children"),
            Output("overview-performance-chart", "figure"),
        ],
        [
            Input("interval-live", "n_intervals"),
            Input("engine-feedback", "children"),
        ],
    )
    def update_overview(n_intervals: int, _feedback):
        fleet = store.list("site", "site_id")
        faults = store.list("fault", "-created_date", OVERVIEW_FETCH_LIMIT)
        preds = store.list("prediction", "-created_date", OVERVIEW_FETCH_LIMIT)
        evaluations = store.list("evaluation", "-created_date", 10)
        summary = fleet_summary(fleet, faults, preds)

        avg_color = health_color(summary.avg_health)
        kpi_banner = dbc.Row(
            [
                dbc.Col(
                    kpi_card(
                        "Fleet Health",
                        f"{summary.avg_health}%",
                        avg_color,
                        sub_label=f"{summary.site_count} sites monitored",
                        border_color=avg_color,
                        progress=summary.avg_health,
                    ),
                    xs=6, md=3,
                ),
                dbc.Col(
                    kpi_card(
                        "Critical Sites",
                        str(summary.critical_sites),
                        "#da3633" if summary.critical_sites else "#2ea44f",
                    ),
                    xs=6, md=3,
                ),
                dbc.Col(
                    kpi_card(
                        "Active Faults",
                        str(summary.active_faults),
                        "#e8a020" if summary.active_faults else "#2ea44f",
                    ),
                    xs=6, md=3,
                ),
                dbc.Col(
                    kpi_card(
                        "High-Risk Predictions",
                        str(summary.high_risk_predictions),
                        "#f0883e" if summary.high_risk_predictions else "#2ea44f",
                        sub_label="probability ≥ 70%",
                    ),
                    xs=6, md=3,
                ),
            ],
            className="g-3",
        )

        engine = monitor.predictor
        last = engine.last_analysis.strftime("%H:%M:%S") if engine.last_analysis else "never"
        engine_status = html.Div(
            [
                html.Div(f"Model {engine.model_version}", style={"fontSize": ".8rem", "color": "#c9d1d9"}),
                html.Div(f"{len(engine.detectors)} detectors · last analysis {last}", style={"fontSize": ".72rem", "color": MUTED}),
                html.Div(f"{engine.predictions_generated} predictions generated this session", style={"fontSize": ".72rem", "color": MUTED}),
            ]
        )

        forecast = risk_forecast(preds)
        if forecast:
            forecast_table = simple_table(
                ["Site", "Fault", "Probability", "TTF", "Confidence", "Priority"],
                [
                    [
                        site_name(fleet, item.prediction.site_id),
                        fault_label(item.prediction.predicted_fault_type),
                        html.Span(
                            f"{item.prediction.fault_probability:.0%}",
                            style={"color": level_color(item.priority.value), "fontWeight": "700"},
                        ),
                        f"{item.prediction.estimated_time_to_failure_min:.0f} min",
                        confidence_badge(item.prediction.confidence_level.value),
                        status_badge(item.priority.value),
                    ]
                    for item in forecast
                ],
            )
        else:
            forecast_table = empty_state("No significant risks detected")

        faults_table = simple_table(
            ["Started", "Site", "Fault", "Severity", "Status", "AI"],
            [
                [
                    html.Span(f.start_timestamp.strftime("%d/%m %H:%M:%S"), style={"color": MUTED, "fontSize": ".72rem"}),
                    site_name(fleet, f.site_id),
                    fault_label(f.fault_type),
                    status_badge(f.severity.value),
                    f.status.value,
                    "✓" if f.detected_by_ai else "–",
                ]
                for f in recent_faults(faults)
            ],
            empty_message="No faults recorded.",
        )

        return kpi_banner, engine_status, forecast_table, faults_table, _performance_figure(evaluation_trend(evaluations))
