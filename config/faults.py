"""
config/faults.py
────────────────
Display configuration for fault types, severities, priorities, confidence
levels and maintenance statuses.

Tables are keyed by the plain string value so lookups work the same for
enum members and for values read back from the store.
"""

# ── Fault types ───────────────────────────────────────────────────────────────
FAULT_TYPE_LABELS: dict[str, str] = {
    "overvoltage": "Overvoltage",
    "undervoltage": "Undervoltage",
    "frequency_drift": "Frequency Drift",
    "harmonic_spike": "Harmonic Spike",
    "inverter_overheat": "Inverter Overheat",
    "scada_latency": "SCADA Latency",
    "dc_instability": "DC Instability",
    "unauthorized_command": "Unauthorized Command",
}

# Scenarios offered as manual trigger buttons (dc_instability is auto-mode only)
TRIGGER_BUTTON_FAULTS = [
    "overvoltage",
    "undervoltage",
    "frequency_drift",
    "harmonic_spike",
    "inverter_overheat",
    "scada_latency",
]


def fault_label(fault_type: str) -> str:
    return FAULT_TYPE_LABELS.get(fault_type, fault_type.replace("_", " ").title())


# ── Severity / priority ───────────────────────────────────────────────────────
LEVEL_COLORS: dict[str, str] = {
    "critical": "#da3633",
    "high": "#f0883e",
    "medium": "#e8a020",
    "low": "#58a6ff",
}

# ── Confidence ────────────────────────────────────────────────────────────────
CONFIDENCE_COLORS: dict[str, str] = {
    "very_high": "#2ea44f",
    "high": "#58a6ff",
    "medium": "#e8a020",
    "low": "#8b949e",
}

CONFIDENCE_LABELS: dict[str, str] = {
    "very_high": "Very high",
    "high": "High",
    "medium": "Medium",
    "low": "Low",
}

# ── Maintenance status ────────────────────────────────────────────────────────
ACTION_STATUS_COLORS: dict[str, str] = {
    "pending": "#e8a020",
    "scheduled": "#58a6ff",
    "in_progress": "#a371f7",
    "completed": "#2ea44f",
    "deferred": "#8b949e",
}

# ── Cyber health ──────────────────────────────────────────────────────────────
LINK_STATUS_COLORS: dict[str, str] = {
    "healthy": "#2ea44f",
    "warning": "#e8a020",
    "critical": "#da3633",
}

# ── Site status ───────────────────────────────────────────────────────────────
SITE_STATUS_COLORS: dict[str, str] = {
    "operational": "#2ea44f",
    "degraded": "#e8a020",
    "critical": "#da3633",
    "offline": "#8b949e",
}


def level_color(level: str) -> str:
    return LEVEL_COLORS.get(level, "#8b949e")
