"""
src/layout/main.py
───────────────────
Root layout for the grid operations dashboard.

  - session stores: selected site, last scheduler tick
  - "interval-tick" drains the scheduler (readings, scenario countdown,
    prediction cycle); "interval-live" refreshes page data
  - fleet-wide fault banner, shown on every page while a scenario runs
  - footer with the telemetry and prediction cadences in force
"""
from dash import dcc, html

from config.faults import fault_label
from config.settings import settings
from src.analytics.predictor import MODEL_VERSION
from src.layout.navbar import create_navbar

PAGE_BG = "#0d1117"
BORDER = "#30363d"
MUTED = "#8b949e"
WARN = "#f0883e"


def _session_state() -> list:
    return [
        dcc.Store(id="store-site", data=None),
        dcc.Store(id="store-tick", data=0),
        dcc.Location(id="url", refresh=False),
    ]


def _clocks() -> list:
    return [
        dcc.Interval(id="interval-tick", interval=settings.TICK_INTERVAL_MS, n_intervals=0),
        dcc.Interval(id="interval-live", interval=settings.UI_REFRESH_MS, n_intervals=0),
    ]


def fault_banner(fault_type: str | None, countdown_s: int = 0) -> html.Div | None:
    """Strip under the navbar while a fault scenario is injecting telemetry."""
    if fault_type is None:
        return None
    return html.Div(
        [
            html.Span("⚠", style={"marginRight": "8px"}),
            html.Span(f"{fault_label(fault_type)} scenario injecting SCADA telemetry", style={"fontWeight": "600"}),
            html.Span(f" · {countdown_s}s remaining", style={"color": MUTED}),
        ],
        style={
            "padding": ".4rem 1.5rem",
            "fontSize": ".78rem",
            "color": WARN,
            "backgroundColor": "rgba(240,136,62,0.10)",
            "borderBottom": "1px solid rgba(240,136,62,0.4)",
        },
    )


def _footer() -> html.Footer:
    cadence = (
        f"reading every {settings.READING_INTERVAL_S:g}s · "
        f"prediction cycle every {settings.PREDICTION_INTERVAL_S:g}s · "
        f"detector window {settings.DETECTOR_WINDOW} readings"
    )
    return html.Footer(
        [
            html.Span("Grid Fault Monitor", style={"color": "#58a6ff", "fontWeight": "600"}),
            html.Span(f" · model {MODEL_VERSION} · "),
            html.Span(cadence),
            html.Span(" · simulated SCADA telemetry"),
        ],
        style={
            "textAlign": "center",
            "padding": ".7rem",
            "fontSize": ".72rem",
            "color": MUTED,
            "borderTop": f"1px solid {BORDER}",
            "marginTop": "2rem",
        },
    )


def create_layout() -> html.Div:
    return html.Div(
        [
            *_session_state(),
            *_clocks(),
            create_navbar(),
            html.Div(id="global-fault-banner"),
            html.Div(id="page-content", style={"minHeight": "calc(100vh - 60px)"}),
            _footer(),
        ],
        style={"backgroundColor": PAGE_BG, "minHeight": "100vh", "color": "#c9d1d9"},
    )
