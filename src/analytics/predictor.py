"""
src/analytics/predictor.py
──────────────────────────
Prediction synthesizer: runs the detector bank over every site and turns
detector Signals into stored Prediction records.

Cycle:
  1. Group readings by site (sites with fewer than MIN_READINGS are skipped)
  2. Run every detector once against the site's readings
  3. Signals with probability > 0.5 become Predictions
     (confidence bucket, fixed contributing factors, model version)
  4. Each Prediction is persisted; a failed write is logged and skipped

A detector that raises, or a failed write, never stops the rest of the batch.
Cycles are serialized per site, and a site is only re-evaluated once it has
a reading newer than the last one evaluated, so overlapping manual and
periodic runs cannot persist the same prediction twice.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime

from config.settings import settings
from src.analytics.detectors import DETECTORS, Detector, Signal
from src.data.models import ConfidenceLevel, Prediction, TelemetryReading
from src.data.store import Store, StoreError

logger = logging.getLogger(__name__)

MODEL_VERSION = "v2.4.1-rf-ensemble"
MIN_READINGS = settings.MIN_READINGS_PER_SITE
PROBABILITY_GATE = 0.5

CONTRIBUTING_FACTORS: dict[str, list[str]] = {
    "overvoltage": ["Rising voltage trend", "Grid instability detected", "Load imbalance"],
    "undervoltage": ["Voltage drop trend", "High load conditions", "Transformer tap position"],
    "frequency_drift": ["Generation-load mismatch", "Interconnection stress", "Governor response delay"],
    "inverter_overheat": ["Ambient temperature rise", "Reduced cooling efficiency", "High power throughput"],
    "scada_latency": ["Network congestion", "RTU response delay", "Packet queue buildup"],
    "harmonic_spike": ["Non-linear load increase", "Filter degradation", "Resonance conditions"],
}
GENERIC_FACTORS = ["Anomaly pattern detected"]


def classify_confidence(probability: float) -> ConfidenceLevel:
    """Bucket a probability: ≥0.85 very_high, ≥0.7 high, ≥0.5 medium, else low."""
    if probability >= 0.85:
        return ConfidenceLevel.VERY_HIGH
    if probability >= 0.7:
        return ConfidenceLevel.HIGH
    if probability >= 0.5:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def contributing_factors(fault_type: str) -> list[str]:
    return list(CONTRIBUTING_FACTORS.get(fault_type, GENERIC_FACTORS))


def group_by_site(readings: Iterable[TelemetryReading]) -> dict[str, list[TelemetryReading]]:
    grouped: dict[str, list[TelemetryReading]] = defaultdict(list)
    for reading in readings:
        grouped[reading.site_id].append(reading)
    return dict(grouped)


def build_prediction(
    site_id: str,
    fault_type: str,
    signal: Signal,
    timestamp: datetime,
    model_version: str = MODEL_VERSION,
) -> Prediction:
    return Prediction(
        site_id=site_id,
        timestamp=timestamp,
        predicted_fault_type=fault_type,
        fault_probability=signal.probability,
        estimated_time_to_failure_min=signal.estimated_time_to_failure_min,
        confidence_level=classify_confidence(signal.probability),
        contributing_factors=contributing_factors(fault_type),
        model_version=model_version,
    )


class PredictionEngine:
    def __init__(
        self,
        store: Store,
        detectors: Sequence[Detector] = DETECTORS,
        model_version: str = MODEL_VERSION,
        now: Callable[[], datetime] | None = None,
        min_readings: int = MIN_READINGS,
        fetch_limit: int = settings.PREDICTION_FETCH_LIMIT,
    ) -> None:
        self.store = store
        self.detectors = list(detectors)
        self.model_version = model_version
        self.min_readings = min_readings
        self.fetch_limit = fetch_limit
        self._now = now or (lambda: datetime.now(tz=UTC))
        self._site_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        # newest reading timestamp already evaluated, per site
        self._evaluated_through: dict[str, datetime] = {}
        self.last_analysis: datetime | None = None
        self.predictions_generated = 0

    def _site_lock(self, site_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._site_locks.setdefault(site_id, threading.Lock())

    def recent_readings(self) -> list[TelemetryReading]:
        try:
            return self.store.list("reading", "-created_date", self.fetch_limit)
        except StoreError:
            logger.exception("Could not load telemetry for prediction cycle")
            return []

    def has_telemetry(self) -> bool:
        try:
            return self.store.count("reading") > 0
        except StoreError:
            logger.exception("Could not count telemetry readings")
            return False

    def evaluate_site(self, site_id: str, readings: Sequence[TelemetryReading]) -> list[Prediction]:
        """Run the whole bank for one site and persist what clears the gate."""
        saved: list[Prediction] = []
        with self._site_lock(site_id):
            newest = max((r.timestamp for r in readings), default=None)
            seen = self._evaluated_through.get(site_id)
            if newest is None or (seen is not None and newest <= seen):
                logger.debug("No new telemetry for site %s since %s; skipped", site_id, seen)
                return saved
            self._evaluated_through[site_id] = newest

            for detector in self.detectors:
                try:
                    signal = detector.evaluate(readings)
                except Exception:
                    logger.exception("Detector %s failed for site %s", detector.fault_type, site_id)
                    continue
                if signal is None or signal.probability <= PROBABILITY_GATE:
                    continue

                prediction = build_prediction(
                    site_id, detector.fault_type, signal, self._now(), self.model_version
                )
                try:
                    saved.append(self.store.create("prediction", prediction))
                except StoreError:
                    logger.exception(
                        "Failed to save %s prediction for site %s", detector.fault_type, site_id
                    )
        return saved

    def run_cycle(self, readings: Sequence[TelemetryReading] | None = None) -> list[Prediction]:
        """
        One prediction pass over all sites.

        Args:
            readings: Recent telemetry for any number of sites. When None,
                the newest readings are loaded from the store.

        Returns:
            The predictions that were persisted in this cycle.
        """
        if readings is None:
            readings = self.recent_readings()

        predictions: list[Prediction] = []
        for site_id, site_readings in group_by_site(readings).items():
            if len(site_readings) < self.min_readings:
                continue
            predictions.extend(self.evaluate_site(site_id, site_readings))

        self.last_analysis = self._now()
        self.predictions_generated += len(predictions)
        logger.info(
            "Prediction cycle complete: %d readings, %d predictions", len(readings), len(predictions)
        )
        return predictions

    def run_if_telemetry(self) -> list[Prediction]:
        """Periodic entry point: skip the cycle entirely while no telemetry exists."""
        if not self.has_telemetry():
            return []
        return self.run_cycle()
