"""
src/layout/components/status_badge.py
──────────────────────────────────────
Color-coded inline badges for severity, priority, confidence and status.
"""

from dash import html

from config.faults import ACTION_STATUS_COLORS, CONFIDENCE_COLORS, CONFIDENCE_LABELS, LEVEL_COLORS

MUTED = "#8b949e"


def status_badge(value: str, color: str | None = None, label: str | None = None) -> html.Span:
    """Inline badge with color-coded border. `value` is an enum's string value."""
    color = color or LEVEL_COLORS.get(value, MUTED)
    return html.Span(
        label or value.replace("_", " ").capitalize(),
        style={
            "fontSize": ".65rem",
            "fontWeight": "700",
            "color": color,
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "1px 7px",
            "whiteSpace": "nowrap",
        },
    )


def confidence_badge(level: str) -> html.Span:
    return status_badge(level, CONFIDENCE_COLORS.get(level, MUTED), CONFIDENCE_LABELS.get(level))


def action_status_badge(status: str) -> html.Span:
    return status_badge(status, ACTION_STATUS_COLORS.get(status, MUTED))
