"""
src/analytics/evaluation.py
───────────────────────────
Evaluation / scoring engine.

Produces an illustrative EvaluationResult from prediction and fault history.
The confusion matrix is derived from fixed multipliers on record counts, not
from matching predictions against fault outcomes:

  TP = ⌊0.85 × AI-detected faults⌋      FP = ⌊0.08 × predictions⌋
  FN = ⌊0.15 × AI-detected faults⌋      TN = ⌊0.60 × predictions⌋

precision / recall / F1 are 0 when their denominator is 0. Any value that
comes out as 0 is then replaced by a fixed demo default so the dashboard
never shows an all-zero snapshot. Business-impact fields are fixed
baselines plus a little jitter from the injected random source.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime

import numpy as np

from config.settings import settings
from src.analytics.predictor import MODEL_VERSION
from src.data.models import EvaluationResult, Fault, Prediction
from src.data.store import Store, StoreError

logger = logging.getLogger(__name__)

EVALUATION_PERIOD_DAYS = 7
DEFAULT_LEAD_TIME_MIN = 35
BASELINE_DETECTION_TIME_MIN = 45
AI_DETECTION_TIME_MIN = 12

# Substituted when the computed value is 0
FALLBACKS = {
    "true_positives": 12,
    "false_positives": 3,
    "false_negatives": 2,
    "true_negatives": 45,
    "precision": 0.86,
    "recall": 0.92,
    "f1_score": 0.89,
}


@dataclass(frozen=True)
class ConfusionCounts:
    true_positives: int
    false_positives: int
    false_negatives: int
    true_negatives: int


def confusion_counts(prediction_count: int, ai_detected_faults: int) -> ConfusionCounts:
    return ConfusionCounts(
        true_positives=math.floor(ai_detected_faults * 0.85),
        false_positives=math.floor(prediction_count * 0.08),
        false_negatives=math.floor(ai_detected_faults * 0.15),
        true_negatives=math.floor(prediction_count * 0.6),
    )


def safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def f1_score(precision: float, recall: float) -> float:
    return safe_ratio(2 * precision * recall, precision + recall)


def precision_recall_f1(tp: int, fp: int, fn: int) -> tuple[float, float, float]:
    precision = safe_ratio(tp, tp + fp)
    recall = safe_ratio(tp, tp + fn)
    return precision, recall, f1_score(precision, recall)


def average_lead_time(faults: Sequence[Fault]) -> int:
    """
    Mean detection lead time over faults that carry a positive one, rounded
    half up. Late detections (negative lead time) are left out.
    """
    lead_times = [f.detection_lead_time_min for f in faults if (f.detection_lead_time_min or 0) > 0]
    if not lead_times:
        return DEFAULT_LEAD_TIME_MIN
    return math.floor(sum(lead_times) / len(lead_times) + 0.5)


def score(
    predictions: Sequence[Prediction],
    faults: Sequence[Fault],
    rng: np.random.Generator,
    evaluation_date: date,
    model_version: str = MODEL_VERSION,
) -> EvaluationResult:
    """Compute an (unsaved) EvaluationResult from history."""
    ai_detected = sum(1 for f in faults if f.detected_by_ai)
    counts = confusion_counts(len(predictions), ai_detected)
    precision, recall, f1 = precision_recall_f1(
        counts.true_positives, counts.false_positives, counts.false_negatives
    )

    computed = {
        "true_positives": counts.true_positives,
        "false_positives": counts.false_positives,
        "false_negatives": counts.false_negatives,
        "true_negatives": counts.true_negatives,
        "precision": precision,
        "recall": recall,
        "f1_score": f1,
    }
    metrics = {name: value or FALLBACKS[name] for name, value in computed.items()}

    return EvaluationResult(
        evaluation_date=evaluation_date,
        evaluation_period_days=EVALUATION_PERIOD_DAYS,
        total_faults_detected=ai_detected,
        **metrics,
        false_alarm_rate=0.05 + float(rng.random()) * 0.03,
        avg_early_warning_lead_time_min=average_lead_time(faults),
        baseline_detection_time_min=BASELINE_DETECTION_TIME_MIN,
        ai_detection_time_min=AI_DETECTION_TIME_MIN,
        fault_isolation_time_reduction_pct=65 + int(rng.integers(0, 10)),
        downtime_prevented_hr=18 + int(rng.integers(0, 12)),
        cost_savings_usd=35_000 + int(rng.integers(0, 20_000)),
        model_version=model_version,
    )


class EvaluationEngine:
    def __init__(
        self,
        store: Store,
        rng: np.random.Generator | None = None,
        today: Callable[[], date] | None = None,
        model_version: str = MODEL_VERSION,
        fetch_limit: int = settings.EVALUATION_FETCH_LIMIT,
    ) -> None:
        self.store = store
        self.rng = rng if rng is not None else np.random.default_rng()
        self._today = today or (lambda: datetime.now(tz=UTC).date())
        self.model_version = model_version
        self.fetch_limit = fetch_limit

    def run(self) -> EvaluationResult | None:
        """Score current history and persist the snapshot. None if storage failed."""
        try:
            predictions = self.store.list("prediction", "-created_date", self.fetch_limit)
            faults = self.store.list("fault", "-created_date", self.fetch_limit)
        except StoreError:
            logger.exception("Could not load history for evaluation")
            return None

        result = score(predictions, faults, self.rng, self._today(), self.model_version)
        try:
            saved = self.store.create("evaluation", result)
        except StoreError:
            logger.exception("Failed to save evaluation result")
            return None

        logger.info(
            "Evaluation stored: precision=%.3f recall=%.3f f1=%.3f",
            saved.precision,
            saved.recall,
            saved.f1_score,
        )
        return saved

    def history(self, limit: int = 10) -> list[EvaluationResult]:
        """Stored evaluations, newest first."""
        try:
            return self.store.list("evaluation", "-created_date", limit)
        except StoreError:
            logger.exception("Could not load evaluation history")
            return []
