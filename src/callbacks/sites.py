"""
src/callbacks/sites.py
───────────────────────
Site detail page callbacks.
"""
from __future__ import annotations

import plotly.graph_objects as go
from dash import Input, Output, State, html

from config.faults import LINK_STATUS_COLORS, SITE_STATUS_COLORS, fault_label
from config.telemetry import METRIC_DISPLAY, SITE_CHART_POINTS, SITE_READINGS_LIMIT
from src.analytics.fleet import cyber_health, fleet_summary, rank_maintenance, sites_by_health, telemetry_frame
from src.data.models import FaultStatus
from src.layout.components.data_table import empty_state, simple_table
from src.layout.components.health_gauge import health_gauge
from src.layout.components.kpi_card import mini_kpi
from src.layout.components.status_badge import action_status_badge, confidence_badge, status_badge
from src.runtime.monitor import FleetMonitor

CARD_BG = "#161b22"
GRID_CLR = "#30363d"
MUTED = "#8b949e"
PLOTLY_TMPL = "plotly_dark"


def _layout(height: int = 300) -> dict:
    return {
        "template": PLOTLY_TMPL,
        "paper_bgcolor": CARD_BG,
        "plot_bgcolor": CARD_BG,
        "margin": {"l": 10, "r": 10, "t": 10, "b": 10},
        "font": {"color": "#c9d1d9", "size": 11},
        "xaxis": {"gridcolor": GRID_CLR},
        "yaxis": {"gridcolor": GRID_CLR},
        "legend": {"bgcolor": "rgba(0,0,0,0)", "font": {"size": 10}},
        "height": height,
        "showlegend": False,
    }


def _telemetry_figure(readings, metric: str) -> go.Figure:
    display = METRIC_DISPLAY[metric]
    df = telemetry_frame(readings)
    fig = go.Figure()
    if df.empty or metric not in df:
        fig.add_annotation(text="No telemetry for this site yet", showarrow=False, font={"color": MUTED})
    else:
        df = df.tail(SITE_CHART_POINTS)
        low, high = display.normal_range
        fig.add_hrect(y0=low, y1=high, fillcolor="rgba(46,164,79,0.08)", line_width=0)
        fig.add_trace(
            go.Scatter(
                x=df["timestamp"],
                y=df[metric],
                mode="lines+markers",
                line={"color": display.color, "width": 2},
                marker={"size": 4},
                name=display.label,
            )
        )
    fig.update_layout(**_layout(280))
    fig.update_yaxes(title_text=display.unit)
    return fig


def _cyber_panel(health) -> html.Div:
    active = health.active_cyber_faults
    return html.Div(
        [
            html.Div(
                [
                    mini_kpi("Avg latency", f"{health.avg_latency_ms:.1f} ms", LINK_STATUS_COLORS[health.latency_status]),
                    mini_kpi("Packet loss", f"{health.avg_packet_loss_pct:.2f}%", LINK_STATUS_COLORS[health.packet_loss_status]),
                    mini_kpi("Cyber faults", str(len(active)), "#da3633" if active else "#2ea44f"),
                    mini_kpi("Samples", str(health.sample_count)),
                ],
                style={"display": "grid", "gridTemplateColumns": "1fr 1fr", "gap": "8px", "marginBottom": "8px"},
            ),
            html.Div(
                [
                    html.Div(
                        [status_badge(f.severity.value), html.Span(fault_label(f.fault_type), style={"marginLeft": "6px"})],
                        style={"fontSize": ".78rem", "marginBottom": "4px"},
                    )
                    for f in active
                ]
            ),
        ]
    )


def register(app, monitor: FleetMonitor) -> None:
    store = monitor.store

    # ── Site selector ─────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("sites-select", "options"),
            Output("sites-select", "value"),
        ],
        Input("url", "pathname"),
        State("store-site", "data"),
    )
    def populate_sites(pathname: str, selected: str | None):
        sites = sites_by_health(store.list("site", "site_id"))
        options = [{"label": f"{s.name} ({s.site_id})", "value": s.site_id} for s in sites]
        ids = [s.site_id for s in sites]
        value = selected if selected in ids else (ids[0] if ids else None)
        return options, value

    @app.callback(
        Output("store-site", "data"),
        Input("sites-select", "value"),
        prevent_initial_call=True,
    )
    def remember_site(site_id: str | None):
        return site_id

    # ── Site content ──────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("sites-gauge", "children"),
            Output("sites-info", "children"),
            Output("sites-chart-title", "children"),
            Output("sites-telemetry-chart", "figure"),
            Output("sites-predictions", "children"),
            Output("sites-maintenance", "children"),
            Output("sites-cyber-health", "children"),
        ],
        [
            Input("sites-select", "value"),
            Input("sites-metric", "value"),
            Input("interval-live", "n_intervals"),
        ],
    )
    def update_site(site_id: str | None, metric: str, n_intervals: int):
        display = METRIC_DISPLAY[metric]
        title = f"{display.label} ({display.unit})"
        matches = store.filter("site", {"site_id": site_id}, None, 1) if site_id else []
        if not matches:
            empty = empty_state("Select a site.")
            return empty, empty, title, _telemetry_figure([], metric), empty, empty, empty
        site = matches[0]

        readings = store.filter("reading", {"site_id": site_id}, "-created_date", SITE_READINGS_LIMIT)
        faults = store.filter("fault", {"site_id": site_id}, "-created_date", 50)
        predictions = store.filter("prediction", {"site_id": site_id}, "-created_date", 20)
        actions = store.filter("maintenance", {"site_id": site_id}, "-created_date", 10)
        latest = readings[0] if readings else None

        info = html.Div(
            [
                html.Div(
                    [
                        html.Span(site.name, style={"fontWeight": "700", "color": "#58a6ff", "fontSize": "1rem"}),
                        html.Span(site.site_id, style={"fontSize": ".68rem", "color": MUTED, "marginLeft": "8px"}),
                        html.Span(
                            status_badge(site.status.value, SITE_STATUS_COLORS.get(site.status.value)),
                            style={"marginLeft": "12px"},
                        ),
                    ],
                    style={"marginBottom": "4px"},
                ),
                html.Div(
                    f"{site.location} · {site.site_type.value} · {site.capacity_mw:g} MW · {site.inverter_count} inverters",
                    style={"fontSize": ".75rem", "color": MUTED, "marginBottom": "10px"},
                ),
                html.Div(
                    [
                        mini_kpi("Voltage", f"{latest.voltage_kv or 0:.1f} kV" if latest else "–"),
                        mini_kpi("Frequency", f"{latest.frequency_hz or 60:.2f} Hz" if latest else "–"),
                        mini_kpi("Power", f"{latest.power_kw or 0:.0f} kW" if latest else "–"),
                        mini_kpi("Inverter", f"{latest.inverter_temp_c or 0:.1f} °C" if latest else "–"),
                        mini_kpi("THD", f"{latest.thd_pct or 0:.1f}%" if latest else "–"),
                        mini_kpi("Power factor", f"{latest.power_factor or 0:.2f}" if latest else "–"),
                        mini_kpi(
                            "Active faults",
                            str(sum(1 for f in faults if f.status == FaultStatus.ACTIVE)),
                            "#da3633" if any(f.status == FaultStatus.ACTIVE for f in faults) else "#2ea44f",
                        ),
                        mini_kpi("Predictions", str(len(predictions))),
                    ],
                    style={"display": "grid", "gridTemplateColumns": "repeat(4, 1fr)", "gap": "8px"},
                ),
            ]
        )

        preds_table = simple_table(
            ["Fault", "Prob.", "Confidence"],
            [
                [fault_label(p.predicted_fault_type), f"{p.fault_probability:.0%}", confidence_badge(p.confidence_level.value)]
                for p in predictions
            ],
            empty_message="No predictions for this site.",
        )
        actions_table = simple_table(
            ["Action", "Priority", "Status"],
            [
                [a.recommended_action, status_badge(a.priority.value), action_status_badge(a.status.value)]
                for a in rank_maintenance(actions)
            ],
            empty_message="No maintenance actions for this site.",
        )

        return (
            health_gauge(site, fleet_avg=fleet_summary(store.list("site"), [], []).avg_health, height=180),
            info,
            title,
            _telemetry_figure(readings, metric),
            preds_table,
            actions_table,
            _cyber_panel(cyber_health(readings, faults)),
        )
