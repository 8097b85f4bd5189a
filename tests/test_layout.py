"""
tests/test_layout.py
─────────────────────
Tests for the dashboard root layout shell.
"""
from src.analytics.predictor import MODEL_VERSION
from src.layout.main import create_layout, fault_banner


def _ids(component) -> set:
    found = set()
    node_id = getattr(component, "id", None)
    if node_id is not None:
        found.add(node_id)
    children = getattr(component, "children", None)
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        if hasattr(child, "to_plotly_json"):
            found |= _ids(child)
    return found


def _text(component) -> str:
    children = getattr(component, "children", component)
    if isinstance(children, str):
        return children
    if not isinstance(children, (list, tuple)):
        children = [children]
    return "".join(_text(c) for c in children if c is not None)


class TestRootLayout:
    def test_shell_ids(self):
        ids = _ids(create_layout())
        assert {
            "store-site",
            "store-tick",
            "url",
            "interval-tick",
            "interval-live",
            "global-fault-banner",
            "page-content",
            "navbar-sim-indicator",
        } <= ids

    def test_footer_shows_model_and_cadence(self):
        footer = create_layout().children[-1]
        text = _text(footer)
        assert MODEL_VERSION in text
        assert "prediction cycle every 30s" in text


class TestFaultBanner:
    def test_hidden_when_idle(self):
        assert fault_banner(None) is None

    def test_names_scenario_and_countdown(self):
        text = _text(fault_banner("scada_latency", 12))
        assert "SCADA Latency" in text
        assert "12s remaining" in text
