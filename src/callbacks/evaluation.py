"""
src/callbacks/evaluation.py
────────────────────────────
Model evaluation page callbacks.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
import plotly.graph_objects as go
from dash import Input, Output, no_update

from src.layout.components.data_table import empty_state, simple_table
from src.layout.components.kpi_card import kpi_card
from src.runtime.monitor import FleetMonitor

CARD_BG = "#161b22"
MUTED = "#8b949e"

HISTORY_LIMIT = 10


def _confusion_figure(result) -> go.Figure:
    fig = go.Figure()
    if result is None:
        fig.add_annotation(text="No evaluation yet", showarrow=False, font={"color": MUTED})
    else:
        z = [
            [result.true_positives, result.false_negatives],
            [result.false_positives, result.true_negatives],
        ]
        labels = [["TP", "FN"], ["FP", "TN"]]
        fig.add_trace(
            go.Heatmap(
                z=z,
                x=["Predicted fault", "Predicted normal"],
                y=["Actual fault", "Actual normal"],
                text=[[f"{labels[i][j]}<br>{z[i][j]}" for j in range(2)] for i in range(2)],
                texttemplate="%{text}",
                colorscale=[[0, "rgba(88,166,255,0.10)"], [1, "#58a6ff"]],
                showscale=False,
            )
        )
        fig.update_yaxes(autorange="reversed")
    fig.update_layout(
        template="plotly_dark",
        paper_bgcolor=CARD_BG,
        plot_bgcolor=CARD_BG,
        margin={"l": 10, "r": 10, "t": 10, "b": 10},
        font={"color": "#c9d1d9", "size": 11},
        height=260,
    )
    return fig


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


def register(app, monitor: FleetMonitor) -> None:

    @app.callback(
        Output("eval-feedback", "children"),
        Input("eval-run-btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def run_evaluation(n_clicks: int):
        if not n_clicks:
            return no_update
        result = monitor.evaluate()
        if result is None:
            return "Evaluation failed; see logs."
        return f"Evaluation stored for {result.evaluation_date.isoformat()} (F1 {_pct(result.f1_score)})."

    @app.callback(
        [
            Output("eval-kpis", "children"),
            Output("eval-confusion-matrix", "figure"),
            Output("eval-detail-table", "children"),
            Output("eval-history", "children"),
        ],
        [
            Input("interval-live", "n_intervals"),
            Input("eval-feedback", "children"),
        ],
    )
    def update_evaluation(n_intervals: int, _feedback):
        history = monitor.evaluator.history(HISTORY_LIMIT)
        latest = history[0] if history else None

        if latest is None:
            kpis = empty_state("No evaluation yet. Press \"Run evaluation\".")
            detail = empty_state("–")
        else:
            kpis = dbc.Row(
                [
                    dbc.Col(kpi_card("Precision", _pct(latest.precision), "#58a6ff", progress=latest.precision * 100), xs=6, md=3),
                    dbc.Col(kpi_card("Recall", _pct(latest.recall), "#2ea44f", progress=latest.recall * 100), xs=6, md=3),
                    dbc.Col(kpi_card("F1 Score", _pct(latest.f1_score), "#a371f7", progress=latest.f1_score * 100), xs=6, md=3),
                    dbc.Col(
                        kpi_card(
                            "Early Warning",
                            f"{latest.avg_early_warning_lead_time_min:.0f} min",
                            "#e8a020",
                            sub_label="average lead time",
                        ),
                        xs=6, md=3,
                    ),
                ],
                className="g-3",
            )
            detail = simple_table(
                ["Metric", "Value"],
                [
                    ["Faults detected by AI", str(latest.total_faults_detected)],
                    ["False alarm rate", _pct(latest.false_alarm_rate)],
                    ["Baseline detection time", f"{latest.baseline_detection_time_min:.0f} min"],
                    ["AI detection time", f"{latest.ai_detection_time_min:.0f} min"],
                    ["Fault isolation time reduction", f"{latest.fault_isolation_time_reduction_pct:.0f}%"],
                    ["Downtime prevented", f"{latest.downtime_prevented_hr:.0f} h"],
                    ["Cost savings", f"${latest.cost_savings_usd:,.0f}"],
                    ["Evaluation period", f"{latest.evaluation_period_days} days"],
                    ["Model version", latest.model_version],
                ],
            )

        history_table = simple_table(
            ["Date", "Precision", "Recall", "F1", "TP", "FP", "FN", "TN", "Savings"],
            [
                [
                    e.evaluation_date.isoformat(),
                    _pct(e.precision),
                    _pct(e.recall),
                    _pct(e.f1_score),
                    str(e.true_positives),
                    str(e.false_positives),
                    str(e.false_negatives),
                    str(e.true_negatives),
                    f"${e.cost_savings_usd:,.0f}",
                ]
                for e in history
            ],
            empty_message="No evaluations stored.",
        )
        return kpis, _confusion_figure(latest), detail, history_table
