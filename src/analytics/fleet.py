"""
src/analytics/fleet.py
──────────────────────
Read-side summaries of stored records for the dashboard.

Everything here is a pure function of records already loaded from the
store: counts and averages for KPI cards, presentation orderings, the
risk forecast, the cyber-health view and the evaluation trend.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pandas as pd

from src.data.models import (
    EvaluationResult,
    Fault,
    FaultStatus,
    FaultType,
    MaintenanceAction,
    Prediction,
    Priority,
    Site,
    SiteStatus,
    TelemetryReading,
)
from src.data.store import to_dataframe

HIGH_RISK_PROBABILITY = 0.7
RISK_FORECAST_SIZE = 5
CYBER_WINDOW = 50
CYBER_FAULT_TYPES = frozenset({FaultType.SCADA_LATENCY.value, FaultType.UNAUTHORIZED_COMMAND.value})

# critical first; unknown priorities sort after low
PRIORITY_RANK: dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}

_EPOCH = datetime.min.replace(tzinfo=UTC)


# ── KPI summaries ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FleetSummary:
    site_count: int
    avg_health: int
    critical_sites: int
    active_faults: int
    high_risk_predictions: int


def fleet_summary(
    sites: Sequence[Site],
    faults: Sequence[Fault],
    predictions: Sequence[Prediction],
) -> FleetSummary:
    if sites:
        avg_health = round(sum(s.health_score or 100 for s in sites) / len(sites))
    else:
        avg_health = 100
    return FleetSummary(
        site_count=len(sites),
        avg_health=avg_health,
        critical_sites=sum(1 for s in sites if s.status == SiteStatus.CRITICAL),
        active_faults=sum(1 for f in faults if f.status == FaultStatus.ACTIVE),
        high_risk_predictions=sum(1 for p in predictions if p.fault_probability >= HIGH_RISK_PROBABILITY),
    )


@dataclass(frozen=True)
class PredictionSummary:
    total: int
    high_risk: int
    validated: int
    avg_time_to_failure_min: int


def prediction_summary(predictions: Sequence[Prediction]) -> PredictionSummary:
    total_ttf = sum(p.estimated_time_to_failure_min or 0 for p in predictions)
    return PredictionSummary(
        total=len(predictions),
        high_risk=sum(1 for p in predictions if p.fault_probability >= HIGH_RISK_PROBABILITY),
        validated=sum(1 for p in predictions if p.was_accurate is True),
        avg_time_to_failure_min=round(total_ttf / max(len(predictions), 1)),
    )


# ── Orderings ─────────────────────────────────────────────────────────────────

def rank_predictions(predictions: Sequence[Prediction], limit: int | None = None) -> list[Prediction]:
    """Highest fault probability first; ties keep their incoming order."""
    ranked = sorted(predictions, key=lambda p: p.fault_probability or 0, reverse=True)
    return ranked if limit is None else ranked[:limit]


def forecast_priority(probability: float) -> Priority:
    if probability >= 0.8:
        return Priority.CRITICAL
    if probability >= 0.6:
        return Priority.HIGH
    if probability >= 0.4:
        return Priority.MEDIUM
    return Priority.LOW


@dataclass(frozen=True)
class RiskItem:
    prediction: Prediction
    priority: Priority


def risk_forecast(predictions: Sequence[Prediction], size: int = RISK_FORECAST_SIZE) -> list[RiskItem]:
    return [RiskItem(p, forecast_priority(p.fault_probability)) for p in rank_predictions(predictions, size)]


def _priority_value(priority: Priority | str) -> str:
    return priority.value if isinstance(priority, Priority) else str(priority)


def rank_maintenance(actions: Sequence[MaintenanceAction]) -> list[MaintenanceAction]:
    """critical > high > medium > low; stable within a priority."""
    return sorted(actions, key=lambda a: PRIORITY_RANK.get(_priority_value(a.priority), len(PRIORITY_RANK)))


def recent_faults(faults: Sequence[Fault], limit: int = 8) -> list[Fault]:
    def started(fault: Fault) -> datetime:
        return fault.start_timestamp or fault.created_date or _EPOCH

    return sorted(faults, key=started, reverse=True)[:limit]


def sites_by_health(sites: Sequence[Site]) -> list[Site]:
    """Least healthy first."""
    return sorted(sites, key=lambda s: 100 if s.health_score is None else s.health_score)


def site_name(sites: Sequence[Site], site_id: str) -> str:
    for site in sites:
        if site.site_id == site_id:
            return site.name or site_id
    return site_id


# ── Cyber health ──────────────────────────────────────────────────────────────

def latency_status(avg_latency_ms: float) -> str:
    if avg_latency_ms < 50:
        return "healthy"
    if avg_latency_ms < 150:
        return "warning"
    return "critical"


def packet_loss_status(avg_packet_loss_pct: float) -> str:
    if avg_packet_loss_pct < 0.5:
        return "healthy"
    if avg_packet_loss_pct < 2:
        return "warning"
    return "critical"


@dataclass(frozen=True)
class CyberHealth:
    avg_latency_ms: float
    avg_packet_loss_pct: float
    latency_status: str
    packet_loss_status: str
    sample_count: int
    active_cyber_faults: list[Fault] = field(default_factory=list)


def cyber_health(
    readings: Sequence[TelemetryReading],
    faults: Sequence[Fault],
    window: int = CYBER_WINDOW,
) -> CyberHealth:
    """SCADA link quality over the `window` most recent readings."""
    recent = sorted(readings, key=lambda r: r.timestamp, reverse=True)[:window]
    n = len(recent)
    avg_latency = sum(r.latency_ms or 0 for r in recent) / n if n else 0.0
    avg_loss = sum(r.packet_loss_pct or 0 for r in recent) / n if n else 0.0
    active = [
        f for f in faults if f.fault_type in CYBER_FAULT_TYPES and f.status == FaultStatus.ACTIVE
    ]
    return CyberHealth(
        avg_latency_ms=avg_latency,
        avg_packet_loss_pct=avg_loss,
        latency_status=latency_status(avg_latency),
        packet_loss_status=packet_loss_status(avg_loss),
        sample_count=n,
        active_cyber_faults=active,
    )


# ── Frames for charts ─────────────────────────────────────────────────────────

def telemetry_frame(readings: Sequence[TelemetryReading]) -> pd.DataFrame:
    """Readings as a DataFrame sorted oldest → newest, ready for a time-series plot."""
    if not readings:
        return pd.DataFrame(columns=["timestamp", "site_id"])
    df = to_dataframe(list(readings))
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df.sort_values("timestamp").reset_index(drop=True)


def evaluation_trend(evaluations: Sequence[EvaluationResult], size: int = 5) -> pd.DataFrame:
    """
    Last `size` evaluations, oldest → newest, with precision / recall / F1 as
    integer percentages. `evaluations` is expected newest first.
    """
    rows = [
        {
            "evaluation_date": e.evaluation_date,
            "precision": round((e.precision or 0) * 100),
            "recall": round((e.recall or 0) * 100),
            "f1": round((e.f1_score or 0) * 100),
        }
        for e in reversed(list(evaluations)[:size])
    ]
    return pd.DataFrame(rows, columns=["evaluation_date", "precision", "recall", "f1"])
