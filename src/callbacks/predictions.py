"""
src/callbacks/predictions.py
─────────────────────────────
Predictions page callbacks: ranked predictions, "create task", and the
maintenance queue with operator status changes.
"""
from __future__ import annotations

import logging

import dash_bootstrap_components as dbc
from dash import ALL, Input, Output, ctx, html, no_update

from config.faults import fault_label, level_color
from src.analytics.fleet import prediction_summary, rank_maintenance, rank_predictions, site_name
from src.analytics.maintenance import InvalidStatusTransition
from src.data.models import ActionStatus
from src.data.store import RecordNotFoundError, StoreError
from src.layout.components.data_table import empty_state, simple_table
from src.layout.components.kpi_card import kpi_card
from src.layout.components.status_badge import action_status_badge, confidence_badge, status_badge
from src.runtime.monitor import FleetMonitor

logger = logging.getLogger(__name__)

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"

PREDICTIONS_FETCH_LIMIT = 100
MAINTENANCE_FETCH_LIMIT = 50
PREDICTIONS_SHOWN = 20


def _small_button(label: str, btn_id: dict, color: str = "#58a6ff") -> html.Button:
    return html.Button(
        label,
        id=btn_id,
        n_clicks=0,
        style={
            "fontSize": ".68rem",
            "fontWeight": "600",
            "color": color,
            "background": "transparent",
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "2px 8px",
            "cursor": "pointer",
            "marginRight": "4px",
        },
    )


def _action_card(action, sites) -> html.Div:
    controls = []
    if action.status == ActionStatus.PENDING:
        controls = [
            _small_button("Schedule", {"type": "action-status-btn", "index": action.id, "status": "scheduled"}),
            _small_button("Start", {"type": "action-status-btn", "index": action.id, "status": "in_progress"}, "#a371f7"),
        ]
    return html.Div(
        [
            html.Div(
                [
                    status_badge(action.priority.value),
                    html.Span(site_name(sites, action.site_id), style={"color": "#58a6ff", "fontSize": ".78rem", "marginLeft": "8px"}),
                    html.Span(action_status_badge(action.status.value), style={"marginLeft": "auto"}),
                ],
                style={"display": "flex", "alignItems": "center", "marginBottom": "6px"},
            ),
            html.Div(action.recommended_action, style={"fontSize": ".85rem", "color": "#c9d1d9", "fontWeight": "600"}),
            html.Ul(
                [html.Li(j) for j in action.justification],
                style={"fontSize": ".72rem", "color": MUTED, "margin": "4px 0", "paddingLeft": "18px"},
            ),
            html.Div(
                f"Cost ${action.estimated_repair_cost_usd:,.0f} · "
                f"{action.estimated_completion_time_hr:g} h to complete · "
                f"{action.estimated_downtime_if_ignored_hr:g} h downtime if ignored",
                style={"fontSize": ".72rem", "color": MUTED, "marginBottom": "6px"},
            ),
            html.Div(controls),
        ],
        style={
            "backgroundColor": CARD_BG,
            "border": f"1px solid {level_color(action.priority.value) if action.status == ActionStatus.PENDING else BORDER}",
            "borderRadius": "8px",
            "padding": "10px 12px",
            "marginBottom": "8px",
        },
    )


def register(app, monitor: FleetMonitor) -> None:
    store = monitor.store

    @app.callback(
        [
            Output("predictions-kpis", "children"),
            Output("predictions-table", "children"),
            Output("maintenance-queue", "children"),
        ],
        [
            Input("interval-live", "n_intervals"),
            Input("predictions-feedback", "children"),
        ],
    )
    def update_predictions(n_intervals: int, _feedback):
        sites = store.list("site", "site_id")
        predictions = store.list("prediction", "-created_date", PREDICTIONS_FETCH_LIMIT)
        actions = store.list("maintenance", "-created_date", MAINTENANCE_FETCH_LIMIT)
        summary = prediction_summary(predictions)

        kpis = dbc.Row(
            [
                dbc.Col(kpi_card("Total Predictions", str(summary.total), "#58a6ff"), xs=6, md=3),
                dbc.Col(kpi_card("High Risk", str(summary.high_risk), "#f0883e" if summary.high_risk else "#2ea44f"), xs=6, md=3),
                dbc.Col(kpi_card("Validated", str(summary.validated), "#2ea44f"), xs=6, md=3),
                dbc.Col(kpi_card("Avg Time to Failure", f"{summary.avg_time_to_failure_min} min", "#e8a020"), xs=6, md=3),
            ],
            className="g-3",
        )

        table = simple_table(
            ["Time", "Site", "Fault", "Probability", "TTF", "Confidence", "Factors", ""],
            [
                [
                    html.Span(p.timestamp.strftime("%d/%m %H:%M:%S"), style={"color": MUTED, "fontSize": ".72rem"}),
                    site_name(sites, p.site_id),
                    fault_label(p.predicted_fault_type),
                    html.Span(f"{p.fault_probability:.0%}", style={"fontWeight": "700", "color": "#c9d1d9"}),
                    f"{p.estimated_time_to_failure_min:.0f} min",
                    confidence_badge(p.confidence_level.value),
                    html.Span(", ".join(p.contributing_factors), style={"fontSize": ".7rem", "color": MUTED}),
                    _small_button("Create task", {"type": "create-task-btn", "index": p.id}),
                ]
                for p in rank_predictions(predictions, PREDICTIONS_SHOWN)
            ],
            empty_message="No predictions yet. Run the prediction engine once telemetry is flowing.",
        )

        ranked_actions = rank_maintenance(actions)
        queue = [_action_card(a, sites) for a in ranked_actions] if ranked_actions else empty_state(
            "No maintenance actions yet."
        )
        return kpis, table, queue

    @app.callback(
        Output("predictions-feedback", "children"),
        [
            Input({"type": "create-task-btn", "index": ALL}, "n_clicks"),
            Input({"type": "action-status-btn", "index": ALL, "status": ALL}, "n_clicks"),
        ],
        prevent_initial_call=True,
    )
    def handle_actions(_create_clicks, _status_clicks):
        trigger = ctx.triggered_id
        if not trigger or not ctx.triggered[0]["value"]:
            return no_update

        if trigger["type"] == "create-task-btn":
            try:
                action = monitor.recommend(trigger["index"])
            except StoreError:
                logger.exception("Could not create maintenance task for %s", trigger["index"])
                return "Could not create maintenance task."
            if action is None:
                return "Prediction no longer exists."
            return f"Maintenance task created: {action.recommended_action} ({action.priority.value})."

        try:
            action = monitor.update_action(trigger["index"], trigger["status"])
        except (InvalidStatusTransition, RecordNotFoundError) as exc:
            logger.warning("Rejected maintenance status change: %s", exc)
            return str(exc)
        except StoreError:
            logger.exception("Could not update maintenance action %s", trigger["index"])
            return "Could not update maintenance action."
        return f"Action moved to {action.status.value.replace('_', ' ')}."
