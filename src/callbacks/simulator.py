"""
src/callbacks/simulator.py
───────────────────────────
Simulator controls and prediction-engine button on the Overview page.
"""
from __future__ import annotations

from dash import ALL, Input, Output, State, ctx, html, no_update

from config.faults import fault_label
from src.runtime.monitor import FleetMonitor

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


def _toggle_button(running: bool) -> tuple[str, dict]:
    if running:
        return "❚❚ Pause", {**_BTN, "color": "#e8a020", "border": "1px solid #e8a020"}
    return "▶ Start", {**_BTN, "color": "#2ea44f", "border": "1px solid #2ea44f"}


def _active_fault_banner(fault_type: str | None, countdown_s: int) -> html.Div | None:
    if fault_type is None:
        return None
    return html.Div(
        [
            html.Span(f"⚠ {fault_label(fault_type)} active", style={"color": "#f0883e", "fontWeight": "600"}),
            html.Span(f"{countdown_s}s remaining", style={"color": "#f0883e", "fontSize": ".72rem"}),
        ],
        style={
            "display": "flex",
            "justifyContent": "space-between",
            "padding": "8px 10px",
            "border": "1px solid rgba(240,136,62,0.4)",
            "backgroundColor": "rgba(240,136,62,0.12)",
            "borderRadius": "6px",
            "fontSize": ".8rem",
        },
    )


def register(app, monitor: FleetMonitor) -> None:
    simulator = monitor.simulator

    # ── Buttons: start/pause, reset, fault triggers, auto mode ────────────────
    @app.callback(
        Output("sim-feedback", "children"),
        [
            Input("sim-toggle-btn", "n_clicks"),
            Input("sim-reset-btn", "n_clicks"),
            Input({"type": "fault-btn", "index": ALL}, "n_clicks"),
            Input("sim-auto-switch", "value"),
        ],
        prevent_initial_call=True,
    )
    def handle_controls(_toggle, _reset, _fault_clicks, auto_mode):
        trigger = ctx.triggered_id
        if trigger is None:
            return no_update

        if trigger == "sim-auto-switch":
            simulator.set_auto_fault_mode(bool(auto_mode))
            return f"Auto fault injection {'on' if auto_mode else 'off'}."

        if not ctx.triggered[0]["value"]:
            return no_update

        if trigger == "sim-toggle-btn":
            running = simulator.toggle()
            return "Simulator running." if running else "Simulator paused."
        if trigger == "sim-reset-btn":
            simulator.reset()
            return "Simulator reset."

        fault_type = trigger["index"]
        if simulator.fault_active:
            return f"{fault_label(simulator.state.active_fault)} still active; wait for it to clear."
        fault = simulator.trigger_fault(fault_type)
        if fault is None:
            return f"{fault_label(fault_type)} injected (fault record not saved)."
        return f"{fault_label(fault_type)} injected at {fault.site_id}."

    # ── Live simulator state ──────────────────────────────────────────────────
    @app.callback(
        [
            Output("sim-readings-count", "children"),
            Output("sim-active-fault", "children"),
            Output("sim-toggle-btn", "children"),
            Output("sim-toggle-btn", "style"),
            Output({"type": "fault-btn", "index": ALL}, "disabled"),
        ],
        [
            Input("store-tick", "data"),
            Input("sim-feedback", "children"),
        ],
        State({"type": "fault-btn", "index": ALL}, "id"),
    )
    def update_simulator_state(_tick, _feedback, button_ids):
        state = simulator.state
        label, style = _toggle_button(state.running)
        disabled = [state.active_fault is not None for _ in button_ids]
        return (
            f"{state.readings_count} readings",
            _active_fault_banner(state.active_fault, state.countdown_s),
            label,
            style,
            disabled,
        )

    # ── Prediction engine: on-demand cycle ────────────────────────────────────
    @app.callback(
        Output("engine-feedback", "children"),
        Input("engine-run-btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def run_engine(n_clicks: int):
        if not n_clicks:
            return no_update
        if not monitor.predictor.has_telemetry():
            return "No telemetry yet. Start the simulator first."
        predictions = monitor.run_predictions()
        if not predictions:
            return "Analysis complete: no fault risk above threshold."
        kinds = ", ".join(sorted({fault_label(p.predicted_fault_type) for p in predictions}))
        return f"Analysis complete: {len(predictions)} predictions ({kinds})."

