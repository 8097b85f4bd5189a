"""
src/layout/components/kpi_card.py
──────────────────────────────────
KPI cards for fleet, prediction and evaluation summaries.
"""
from dash import html

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"


def _progress_bar(pct: float, color: str) -> html.Div:
    pct = max(0.0, min(100.0, pct))
    return html.Div(
        html.Div(style={"width": f"{pct:.0f}%", "height": "100%", "backgroundColor": color, "borderRadius": "2px"}),
        style={"height": "4px", "backgroundColor": BORDER, "borderRadius": "2px", "marginTop": "8px"},
    )


def kpi_card(
    label: str,
    value: str,
    color: str = "#c9d1d9",
    sub_label: str = "",
    border_color: str = BORDER,
    progress: float | None = None,
) -> html.Div:
    """
    Compact KPI metric card.

    Args:
        label: Metric name (shown above value)
        value: Formatted value string
        color: Value text color (reflects status)
        sub_label: Small secondary line below value, e.g. "5 sites monitored"
        border_color: Card border color (can reflect severity)
        progress: Optional 0–100 fill for a thin bar under the value
    """
    children = [
        html.Div(label, style={"fontSize": ".68rem", "color": MUTED, "textTransform": "uppercase", "letterSpacing": ".06em"}),
        html.Div(value, style={"fontSize": "1.4rem", "fontWeight": "700", "color": color, "lineHeight": "1.2", "marginTop": "2px"}),
    ]
    if sub_label:
        children.append(html.Div(sub_label, style={"fontSize": ".68rem", "color": MUTED, "marginTop": "2px"}))
    if progress is not None:
        children.append(_progress_bar(progress, color))

    return html.Div(
        children,
        style={
            "backgroundColor": CARD_BG,
            "border": f"1px solid {border_color}",
            "borderRadius": "8px",
            "padding": "14px 16px",
            "minWidth": "120px",
            "height": "100%",
        },
    )


def mini_kpi(label: str, value: str, color: str = "#c9d1d9") -> html.Div:
    """Label/value pair for site and cyber-health panels."""
    return html.Div([
        html.Div(label, style={"fontSize": ".62rem", "color": MUTED, "textTransform": "uppercase"}),
        html.Div(value, style={"fontSize": ".85rem", "fontWeight": "700", "color": color}),
    ])
