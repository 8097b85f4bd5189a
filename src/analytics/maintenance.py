"""
src/analytics/maintenance.py
────────────────────────────
Maintenance recommendation generator.

A Prediction maps to one MaintenanceAction through a fixed per-fault action
table (action text, flat repair cost, flat downtime hours):

  priority            probability ≥ 0.8 → critical, ≥ 0.6 → high, else medium
  downtime if ignored template downtime × 2
  justification       the prediction's contributing factors
                      (["AI prediction triggered"] when there are none)

Repeated requests for the same prediction create repeated actions unless
duplicates are disabled, in which case the existing action is returned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from config.settings import settings
from src.data.models import ActionStatus, MaintenanceAction, Prediction, Priority
from src.data.store import RecordNotFoundError, Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionTemplate:
    action: str
    cost_usd: float
    downtime_hr: float


ACTION_TEMPLATES: dict[str, ActionTemplate] = {
    "overvoltage": ActionTemplate("Inspect voltage regulator and transformer tap settings", 2500, 4),
    "undervoltage": ActionTemplate("Check load balancing and grid connection points", 1800, 3),
    "frequency_drift": ActionTemplate("Verify governor settings and grid synchronization", 3200, 6),
    "inverter_overheat": ActionTemplate("Inspect inverter cooling fan and airflow systems", 1500, 2),
    "scada_latency": ActionTemplate("Check RTU connections and network infrastructure", 800, 1),
    "harmonic_spike": ActionTemplate("Inspect harmonic filters and capacitor banks", 2200, 3),
    "dc_instability": ActionTemplate("Check MPPT settings and string connections", 1200, 2),
}
FALLBACK_TEMPLATE = ActionTemplate("General inspection recommended", 1000, 2)
DEFAULT_JUSTIFICATION = ["AI prediction triggered"]

# Operator transitions accepted from each status
ALLOWED_TRANSITIONS: dict[ActionStatus, frozenset[ActionStatus]] = {
    ActionStatus.PENDING: frozenset({ActionStatus.SCHEDULED, ActionStatus.IN_PROGRESS}),
}


class InvalidStatusTransition(ValueError):
    """The requested maintenance status change is not an allowed transition."""


def classify_priority(probability: float) -> Priority:
    if probability >= 0.8:
        return Priority.CRITICAL
    if probability >= 0.6:
        return Priority.HIGH
    return Priority.MEDIUM


def action_template(fault_type: str) -> ActionTemplate:
    return ACTION_TEMPLATES.get(fault_type, FALLBACK_TEMPLATE)


def build_action(prediction: Prediction) -> MaintenanceAction:
    """Derive an unsaved pending MaintenanceAction from a prediction."""
    template = action_template(prediction.predicted_fault_type)
    return MaintenanceAction(
        site_id=prediction.site_id,
        recommended_action=template.action,
        priority=classify_priority(prediction.fault_probability),
        justification=list(prediction.contributing_factors) or list(DEFAULT_JUSTIFICATION),
        estimated_repair_cost_usd=template.cost_usd,
        estimated_downtime_if_ignored_hr=template.downtime_hr * 2,
        estimated_completion_time_hr=template.downtime_hr,
        status=ActionStatus.PENDING,
        triggered_by_prediction_id=prediction.id,
    )


class MaintenanceAdvisor:
    def __init__(
        self,
        store: Store,
        allow_duplicates: bool = settings.ALLOW_DUPLICATE_RECOMMENDATIONS,
    ) -> None:
        self.store = store
        self.allow_duplicates = allow_duplicates

    def recommend(self, prediction: Prediction) -> MaintenanceAction:
        """
        Create and persist the recommended action for `prediction`.

        Raises StoreError if the action cannot be written; the caller decides
        whether that is fatal.
        """
        if not self.allow_duplicates and prediction.id is not None:
            existing = self.store.filter(
                "maintenance", {"triggered_by_prediction_id": prediction.id}, "created_date", 1
            )
            if existing:
                logger.info("Reusing maintenance action %s for prediction %s", existing[0].id, prediction.id)
                return existing[0]

        action = self.store.create("maintenance", build_action(prediction))
        logger.info(
            "Maintenance action %s (%s) created for site %s",
            action.id,
            action.priority.value,
            action.site_id,
        )
        return action

    def recommend_by_id(self, prediction_id: str) -> MaintenanceAction | None:
        prediction = self.store.get("prediction", prediction_id)
        if prediction is None:
            logger.warning("Prediction %s not found; no action created", prediction_id)
            return None
        return self.recommend(prediction)

    def update_status(self, action_id: str, status: ActionStatus | str) -> MaintenanceAction:
        """
        Advance an action's lifecycle on operator request.

        Raises:
            RecordNotFoundError: no action with `action_id`
            InvalidStatusTransition: the change is not pending→scheduled
                or pending→in_progress
        """
        target = ActionStatus(status)
        current = self.store.get("maintenance", action_id)
        if current is None:
            raise RecordNotFoundError(f"maintenance {action_id!r} not found")
        if target not in ALLOWED_TRANSITIONS.get(current.status, frozenset()):
            raise InvalidStatusTransition(
                f"Cannot move action {action_id} from {current.status.value} to {target.value}"
            )
        return self.store.update("maintenance", action_id, {"status": target})
