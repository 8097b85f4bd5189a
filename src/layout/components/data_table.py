"""
src/layout/components/data_table.py
────────────────────────────────────
Plain HTML table in the dashboard's dark card style.
"""
from __future__ import annotations

from dash import html

BORDER = "#30363d"
MUTED = "#8b949e"


def empty_state(message: str) -> html.Div:
    return html.Div(message, style={"color": MUTED, "padding": "20px", "textAlign": "center", "fontSize": ".82rem"})


def simple_table(headers: list[str], rows: list[list], empty_message: str = "No data yet.") -> html.Div:
    """`rows` are lists of cell contents (strings or Dash components)."""
    if not rows:
        return empty_state(empty_message)
    body = [
        html.Tr([html.Td(cell, style={"padding": "6px 8px"}) for cell in row], style={"borderBottom": f"1px solid {BORDER}"})
        for row in rows
    ]
    return html.Div(
        html.Table(
            [
                html.Thead(
                    html.Tr(
                        [html.Th(h, style={"padding": "6px 8px"}) for h in headers],
                        style={"color": MUTED, "fontSize": ".65rem", "textTransform": "uppercase"},
                    )
                ),
                html.Tbody(body),
            ],
            style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".8rem"},
        ),
        style={"overflowX": "auto"},
    )
