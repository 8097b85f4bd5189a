"""
src/data/models.py
──────────────────
Pydantic v2 data models for sites, telemetry, faults, predictions,
maintenance actions and evaluation snapshots.

Every stored record carries `id` and `created_date`, both assigned by the
store on create.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SiteType(str, Enum):
    SOLAR = "solar"
    WIND = "wind"
    HYBRID = "hybrid"


class SiteStatus(str, Enum):
    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    CRITICAL = "critical"
    OFFLINE = "offline"


class FaultType(str, Enum):
    OVERVOLTAGE = "overvoltage"
    UNDERVOLTAGE = "undervoltage"
    FREQUENCY_DRIFT = "frequency_drift"
    HARMONIC_SPIKE = "harmonic_spike"
    INVERTER_OVERHEAT = "inverter_overheat"
    SCADA_LATENCY = "scada_latency"
    DC_INSTABILITY = "dc_instability"
    UNAUTHORIZED_COMMAND = "unauthorized_command"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FaultStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class ConfidenceLevel(str, Enum):
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ActionStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DEFERRED = "deferred"


class Record(BaseModel):
    id: str | None = None
    created_date: datetime | None = None


class Site(Record):
    site_id: str
    name: str
    location: str = ""
    site_type: SiteType = SiteType.SOLAR
    capacity_mw: float = Field(default=0.0, ge=0.0)
    inverter_count: int = Field(default=0, ge=0)
    commissioned_date: date | None = None
    last_maintenance_date: date | None = None
    health_score: float = Field(default=100.0, ge=0.0, le=100.0)
    status: SiteStatus = SiteStatus.OPERATIONAL


class TelemetryReading(Record):
    model_config = ConfigDict(frozen=True)

    site_id: str
    timestamp: datetime
    voltage_kv: float | None = None
    current_a: float | None = None
    frequency_hz: float | None = None
    power_kw: float | None = None
    energy_kwh: float | None = None
    power_factor: float | None = None
    inverter_temp_c: float | None = None
    dc_link_voltage_v: float | None = None
    breaker_status: str = "CLOSED"
    relay_event: str = "NONE"
    latency_ms: float | None = None
    packet_loss_pct: float | None = None
    thd_pct: float | None = None
    irradiance_wm2: float | None = None


class Fault(Record):
    fault_id: str
    site_id: str
    fault_type: str
    severity: Severity = Severity.MEDIUM
    status: FaultStatus = FaultStatus.ACTIVE
    start_timestamp: datetime
    trigger_condition: str = ""
    observable_symptoms: list[str] = Field(default_factory=list)
    detected_by_ai: bool = False
    detection_lead_time_min: float | None = None


class Prediction(Record):
    site_id: str
    timestamp: datetime
    predicted_fault_type: str
    fault_probability: float = Field(ge=0.0, le=1.0)
    estimated_time_to_failure_min: float = Field(ge=0.0)
    confidence_level: ConfidenceLevel
    contributing_factors: list[str] = Field(default_factory=list)
    model_version: str
    was_accurate: bool | None = None


class MaintenanceAction(Record):
    site_id: str
    recommended_action: str
    priority: Priority
    justification: list[str] = Field(default_factory=list)
    estimated_repair_cost_usd: float = Field(ge=0.0)
    estimated_downtime_if_ignored_hr: float = Field(ge=0.0)
    estimated_completion_time_hr: float = Field(default=0.0, ge=0.0)
    status: ActionStatus = ActionStatus.PENDING
    triggered_by_prediction_id: str | None = None


class EvaluationResult(Record):
    evaluation_date: date
    evaluation_period_days: int = 7
    total_faults_detected: int = Field(default=0, ge=0)
    true_positives: int = Field(ge=0)
    false_positives: int = Field(ge=0)
    false_negatives: int = Field(ge=0)
    true_negatives: int = Field(ge=0)
    precision: float = Field(ge=0.0, le=1.0)
    recall: float = Field(ge=0.0, le=1.0)
    f1_score: float = Field(ge=0.0, le=1.0)
    false_alarm_rate: float = Field(ge=0.0, le=1.0)
    avg_early_warning_lead_time_min: float = Field(ge=0.0)
    baseline_detection_time_min: float = Field(ge=0.0)
    ai_detection_time_min: float = Field(ge=0.0)
    fault_isolation_time_reduction_pct: float = Field(ge=0.0, le=100.0)
    downtime_prevented_hr: float = Field(ge=0.0)
    cost_savings_usd: float = Field(ge=0.0)
    model_version: str
