"""
src/runtime/monitor.py
──────────────────────
Wires the telemetry core onto one scheduler.

  simulator   readings every 3 s while running, scenario countdown, auto faults
  predictor   full prediction cycle every 30 s whenever telemetry exists
  advisor     maintenance actions on operator request
  evaluator   evaluation snapshots on operator request

The dashboard owns a single FleetMonitor and calls tick() from a Dash
interval; tests drive the same object through a VirtualClock.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from config.settings import settings
from src.analytics.evaluation import EvaluationEngine
from src.analytics.maintenance import MaintenanceAdvisor
from src.analytics.predictor import PredictionEngine
from src.data.models import ActionStatus, EvaluationResult, MaintenanceAction, Prediction, Site
from src.data.simulator import TelemetrySimulator
from src.data.store import Store
from src.runtime.scheduler import Scheduler

logger = logging.getLogger(__name__)


class FleetMonitor:
    def __init__(
        self,
        store: Store,
        scheduler: Scheduler | None = None,
        rng: np.random.Generator | None = None,
        sites: Sequence[Site] | None = None,
        prediction_interval_s: float = settings.PREDICTION_INTERVAL_S,
    ) -> None:
        self.store = store
        self.scheduler = scheduler or Scheduler()
        self.rng = rng if rng is not None else np.random.default_rng(settings.SIMULATION_SEED)
        if sites is None:
            sites = store.list("site", "site_id")

        clock = self.scheduler.clock
        self.simulator = TelemetrySimulator(store, sites, self.scheduler, self.rng)
        self.predictor = PredictionEngine(store, now=clock.now)
        self.advisor = MaintenanceAdvisor(store)
        self.evaluator = EvaluationEngine(store, self.rng, today=lambda: clock.now().date())
        self._prediction_task = self.scheduler.every(
            prediction_interval_s, self.predictor.run_if_telemetry, "prediction-cycle"
        )
        logger.info("Fleet monitor ready: %d sites, predictions every %ss", len(sites), prediction_interval_s)

    def tick(self) -> int:
        """Fire everything due now. Returns the number of tasks that ran."""
        return self.scheduler.run_pending()

    def run_predictions(self) -> list[Prediction]:
        return self.predictor.run_cycle()

    def recommend(self, prediction_id: str) -> MaintenanceAction | None:
        return self.advisor.recommend_by_id(prediction_id)

    def update_action(self, action_id: str, status: ActionStatus | str) -> MaintenanceAction:
        return self.advisor.update_status(action_id, status)

    def evaluate(self) -> EvaluationResult | None:
        return self.evaluator.run()

    def stop(self) -> None:
        self.simulator.pause()
        self._prediction_task.cancel()
