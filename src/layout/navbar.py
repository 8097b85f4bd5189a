"""
src/layout/navbar.py
─────────────────────
Navigation bar with page links and a live simulator indicator.
"""

import dash_bootstrap_components as dbc
from dash import html

NAV_BG = "#0d1117"
BORDER = "#30363d"
ACCENT = "#58a6ff"

NAV_LINKS = [
    ("Overview", "/", "nav-overview"),
    ("Predictions", "/predictions", "nav-predictions"),
    ("Sites", "/sites", "nav-sites"),
    ("Evaluation", "/evaluation", "nav-evaluation"),
]


def create_navbar() -> dbc.Navbar:
    return dbc.Navbar(
        dbc.Container(
            [
                # Brand
                dbc.NavbarBrand(
                    [
                        html.Span("⚡", style={"marginRight": "8px", "fontSize": "1.1rem"}),
                        html.Span(
                            "Grid Fault Monitor", style={"fontWeight": "700", "letterSpacing": ".04em"}
                        ),
                    ],
                    href="/",
                    style={"color": ACCENT, "textDecoration": "none"},
                ),
                dbc.NavbarToggler(id="navbar-toggler", n_clicks=0),
                dbc.Collapse(
                    dbc.Nav(
                        [
                            *[
                                dbc.NavItem(dbc.NavLink(label, href=href, id=nav_id, active="exact"))
                                for label, href, nav_id in NAV_LINKS
                            ],
                            # Simulator run indicator (updated by the tick callback)
                            dbc.NavItem(
                                html.Span(
                                    "● idle",
                                    id="navbar-sim-indicator",
                                    style=indicator_style(False),
                                )
                            ),
                        ],
                        className="ms-auto",
                        navbar=True,
                    ),
                    id="navbar-collapse",
                    navbar=True,
                    is_open=False,
                ),
            ],
            fluid=True,
        ),
        color=NAV_BG,
        dark=True,
        sticky="top",
        style={"borderBottom": f"1px solid {BORDER}", "padding": ".5rem 1rem"},
    )


def indicator_style(running: bool) -> dict:
    return {
        "color": "#2ea44f" if running else "#8b949e",
        "border": f"1px solid {'#2ea44f' if running else BORDER}",
        "borderRadius": "4px",
        "fontSize": ".72rem",
        "fontWeight": "700",
        "padding": "2px 8px",
        "marginLeft": "12px",
        "whiteSpace": "nowrap",
    }
