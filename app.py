"""
app.py
──────
Grid Fault Monitor: application entry point.

Startup sequence:
  1. Configure JSON logging
  2. Open the SQLite store and register the seed fleet
  3. Build the FleetMonitor (simulator, prediction cycle, advisor, evaluator)
  4. Create Dash app with DARKLY bootstrap theme and register callbacks
  5. Run dev server (or expose `server` for gunicorn in production)
"""
import json
import logging
import sys
from datetime import UTC, datetime

import dash
import dash_bootstrap_components as dbc

from config.settings import settings
from config.sites import SEED_SITES
from src.data.store import Store
from src.layout.main import create_layout
from src.runtime.monitor import FleetMonitor

logger = logging.getLogger(__name__)


# ── 1. Structured JSON logging ────────────────────────────────────────────────

def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    """Install a one-line JSON formatter on the root logger (stderr)."""

    class _JsonFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            log_entry = {
                "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info and record.exc_info[1] is not None:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


configure_logging()

# ── 2. Store + seed fleet ─────────────────────────────────────────────────────
store = Store(settings.DATABASE_URL)
added = store.seed_sites(SEED_SITES)
logger.info("Store ready at %s (%d seed sites added)", settings.DATABASE_URL, added)

# ── 3. Monitor ────────────────────────────────────────────────────────────────
monitor = FleetMonitor(store)

# ── 4. Dash app ───────────────────────────────────────────────────────────────
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.DARKLY],
    suppress_callback_exceptions=True,
    meta_tags=[{"name": "viewport", "content": "width=device-width, initial-scale=1"}],
    title="Grid Fault Monitor",
)

server = app.server  # gunicorn entry point
app.layout = create_layout()

from src.callbacks import evaluation, navigation, predictions, simulator, sites  # noqa: E402

navigation.register(app, monitor)
simulator.register(app, monitor)
predictions.register(app, monitor)
sites.register(app, monitor)
evaluation.register(app, monitor)

# ── 5. Run ────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app.run(
        debug=settings.DEBUG,
        host=settings.HOST,
        port=settings.PORT,
        use_reloader=False,
    )
