"""
config/telemetry.py
───────────────────
Telemetry metrics offered on the site chart, with display labels, line
colours and the normal band drawn behind the series.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class MetricDisplay:
    label: str
    unit: str
    color: str
    normal_range: tuple[float, float]


METRIC_DISPLAY: dict[str, MetricDisplay] = {
    "voltage_kv": MetricDisplay("Voltage", "kV", "#58a6ff", (110.0, 125.0)),
    "current_a": MetricDisplay("Current", "A", "#2ea44f", (0.0, 400.0)),
    "frequency_hz": MetricDisplay("Frequency", "Hz", "#a371f7", (59.5, 60.5)),
    "power_kw": MetricDisplay("Power", "kW", "#e8a020", (0.0, 5_000.0)),
    "inverter_temp_c": MetricDisplay("Inverter Temp", "°C", "#da3633", (20.0, 75.0)),
    "latency_ms": MetricDisplay("SCADA Latency", "ms", "#db61a2", (0.0, 100.0)),
    "thd_pct": MetricDisplay("THD", "%", "#f0883e", (0.0, 5.0)),
    "dc_link_voltage_v": MetricDisplay("DC Link Voltage", "V", "#39c5cf", (600.0, 750.0)),
}

DEFAULT_METRIC = "voltage_kv"

METRIC_OPTIONS = [
    {"label": f"{m.label} ({m.unit})", "value": name} for name, m in METRIC_DISPLAY.items()
]

# Readings pulled per site for the chart and cyber panel
SITE_READINGS_LIMIT = 100
SITE_CHART_POINTS = 50
