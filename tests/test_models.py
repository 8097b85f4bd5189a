"""
tests/test_models.py
─────────────────────
Tests for Pydantic v2 data models.
"""
import pytest
from pydantic import ValidationError

from src.data.models import (
    ActionStatus,
    EvaluationResult,
    FaultStatus,
    MaintenanceAction,
    Priority,
    Site,
    SiteStatus,
    TelemetryReading,
)


class TestSite:
    def test_defaults(self):
        site = Site(site_id="S-1", name="Test")
        assert site.health_score == 100.0
        assert site.status == SiteStatus.OPERATIONAL

    def test_health_score_bounds(self):
        with pytest.raises(ValidationError):
            Site(site_id="S-1", name="Test", health_score=120.0)

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValidationError):
            Site(site_id="S-1", name="Test", capacity_mw=-5.0)


class TestTelemetryReading:
    def test_missing_metrics_stay_none(self, now):
        r = TelemetryReading(site_id="S-1", timestamp=now, voltage_kv=120.0)
        assert r.voltage_kv == 120.0
        assert r.frequency_hz is None
        assert r.breaker_status == "CLOSED"
        assert r.relay_event == "NONE"

    def test_frozen(self, now):
        r = TelemetryReading(site_id="S-1", timestamp=now)
        with pytest.raises(ValidationError):
            r.voltage_kv = 130.0

    def test_model_copy_update(self, now):
        r = TelemetryReading(site_id="S-1", timestamp=now, voltage_kv=120.0)
        r2 = r.model_copy(update={"voltage_kv": 140.0})
        assert r.voltage_kv == 120.0
        assert r2.voltage_kv == 140.0


class TestFault:
    def test_defaults(self, make_fault):
        f = make_fault()
        assert f.status == FaultStatus.ACTIVE
        assert f.observable_symptoms == []
        assert f.detection_lead_time_min is None

    def test_fault_type_is_plain_string(self, make_fault):
        f = make_fault(fault_type="unauthorized_command")
        assert f.fault_type == "unauthorized_command"


class TestPrediction:
    def test_probability_bounds(self, make_prediction):
        with pytest.raises(ValidationError):
            make_prediction(probability=1.2)

    def test_was_accurate_unset(self, make_prediction):
        assert make_prediction().was_accurate is None


class TestMaintenanceAction:
    def test_defaults_to_pending(self):
        a = MaintenanceAction(
            site_id="S-1",
            recommended_action="Inspect",
            priority=Priority.HIGH,
            estimated_repair_cost_usd=100,
            estimated_downtime_if_ignored_hr=2,
        )
        assert a.status == ActionStatus.PENDING
        assert a.triggered_by_prediction_id is None

    def test_status_from_string(self):
        a = MaintenanceAction(
            site_id="S-1",
            recommended_action="Inspect",
            priority="critical",
            estimated_repair_cost_usd=100,
            estimated_downtime_if_ignored_hr=2,
            status="scheduled",
        )
        assert a.priority == Priority.CRITICAL
        assert a.status == ActionStatus.SCHEDULED


class TestEvaluationResult:
    def test_precision_bounds(self, now):
        with pytest.raises(ValidationError):
            EvaluationResult(
                evaluation_date=now.date(),
                true_positives=1, false_positives=0, false_negatives=0, true_negatives=0,
                precision=1.5, recall=0.5, f1_score=0.5, false_alarm_rate=0.05,
                avg_early_warning_lead_time_min=35, baseline_detection_time_min=45,
                ai_detection_time_min=12, fault_isolation_time_reduction_pct=70,
                downtime_prevented_hr=20, cost_savings_usd=40000, model_version="v",
            )
