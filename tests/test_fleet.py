"""
tests/test_fleet.py
────────────────────
Tests for dashboard summaries, orderings and cyber health.
"""
from datetime import date, timedelta

import pytest

from src.analytics.evaluation import score
from src.analytics.fleet import (
    cyber_health,
    evaluation_trend,
    fleet_summary,
    forecast_priority,
    latency_status,
    packet_loss_status,
    prediction_summary,
    rank_maintenance,
    rank_predictions,
    recent_faults,
    risk_forecast,
    site_name,
    sites_by_health,
    telemetry_frame,
)
from src.data.models import FaultStatus, MaintenanceAction, Priority, SiteStatus


def _action(priority):
    return MaintenanceAction(
        site_id="S",
        recommended_action=f"do {priority}",
        priority=priority,
        estimated_repair_cost_usd=1,
        estimated_downtime_if_ignored_hr=1,
    )


class TestFleetSummary:
    def test_counts(self, sites, make_fault, make_prediction):
        sites[1] = sites[1].model_copy(update={"status": SiteStatus.CRITICAL})
        faults = [make_fault(), make_fault(status=FaultStatus.RESOLVED)]
        predictions = [make_prediction(probability=0.85), make_prediction(probability=0.55)]
        summary = fleet_summary(sites, faults, predictions)
        assert summary.site_count == 2
        assert summary.avg_health == 80
        assert summary.critical_sites == 1
        assert summary.active_faults == 1
        assert summary.high_risk_predictions == 1

    def test_no_sites(self):
        assert fleet_summary([], [], []).avg_health == 100


class TestPredictionSummary:
    def test_summary(self, make_prediction):
        predictions = [
            make_prediction(probability=0.9, estimated_time_to_failure_min=15, was_accurate=True),
            make_prediction(probability=0.6, estimated_time_to_failure_min=40),
        ]
        summary = prediction_summary(predictions)
        assert summary.total == 2
        assert summary.high_risk == 1
        assert summary.validated == 1
        assert summary.avg_time_to_failure_min == 28

    def test_empty(self):
        assert prediction_summary([]).avg_time_to_failure_min == 0


class TestOrderings:
    def test_rank_predictions(self, make_prediction):
        predictions = [make_prediction(probability=p) for p in (0.6, 0.92, 0.75)]
        assert [p.fault_probability for p in rank_predictions(predictions)] == [0.92, 0.75, 0.6]
        assert len(rank_predictions(predictions, limit=2)) == 2

    @pytest.mark.parametrize(
        "probability, expected",
        [(0.85, Priority.CRITICAL), (0.65, Priority.HIGH), (0.45, Priority.MEDIUM), (0.2, Priority.LOW)],
    )
    def test_forecast_priority(self, probability, expected):
        assert forecast_priority(probability) == expected

    def test_risk_forecast_top_five(self, make_prediction):
        predictions = [make_prediction(probability=p / 10) for p in range(1, 10)]
        items = risk_forecast(predictions)
        assert len(items) == 5
        assert items[0].prediction.fault_probability == 0.9
        assert items[0].priority == Priority.CRITICAL

    def test_rank_maintenance(self):
        actions = [_action(p) for p in ("low", "critical", "medium", "high", "critical")]
        ranked = rank_maintenance(actions)
        assert [a.priority.value for a in ranked] == ["critical", "critical", "high", "medium", "low"]

    def test_recent_faults(self, make_fault, now):
        faults = [make_fault(fault_id=f"F-{i}", start_timestamp=now + timedelta(minutes=i)) for i in range(10)]
        recent = recent_faults(faults)
        assert len(recent) == 8
        assert recent[0].fault_id == "F-9"

    def test_sites_by_health(self, sites):
        assert [s.site_id for s in sites_by_health(sites)] == ["SITE-B", "SITE-A"]

    def test_site_name(self, sites):
        assert site_name(sites, "SITE-A") == "Alpha Solar"
        assert site_name(sites, "UNKNOWN") == "UNKNOWN"


class TestCyberHealth:
    @pytest.mark.parametrize("value, expected", [(30, "healthy"), (100, "warning"), (200, "critical")])
    def test_latency_status(self, value, expected):
        assert latency_status(value) == expected

    @pytest.mark.parametrize("value, expected", [(0.2, "healthy"), (1.0, "warning"), (3.0, "critical")])
    def test_packet_loss_status(self, value, expected):
        assert packet_loss_status(value) == expected

    def test_window_and_faults(self, make_readings, make_fault):
        readings = make_readings("S", "latency_ms", [500] * 10 + [20] * 50, packet_loss_pct=0.1)
        faults = [
            make_fault(fault_type="scada_latency"),
            make_fault(fault_type="unauthorized_command"),
            make_fault(fault_type="scada_latency", status=FaultStatus.RESOLVED),
            make_fault(fault_type="overvoltage"),
        ]
        health = cyber_health(readings, faults)
        assert health.sample_count == 50
        assert health.avg_latency_ms == pytest.approx(20)
        assert health.latency_status == "healthy"
        assert health.packet_loss_status == "healthy"
        assert len(health.active_cyber_faults) == 2

    def test_no_readings(self):
        health = cyber_health([], [])
        assert health.sample_count == 0
        assert health.latency_status == "healthy"


class TestFrames:
    def test_telemetry_frame_sorted(self, make_readings):
        readings = make_readings("S", "voltage_kv", [1, 2, 3])
        df = telemetry_frame(list(reversed(readings)))
        assert list(df["voltage_kv"]) == [1, 2, 3]

    def test_telemetry_frame_keeps_reading_fields(self, make_readings):
        df = telemetry_frame(make_readings("S", "latency_ms", [20, 30]))
        assert {"site_id", "breaker_status", "relay_event", "latency_ms"} <= set(df.columns)
        assert str(df["timestamp"].dt.tz) == "UTC"

    def test_telemetry_frame_empty(self):
        assert telemetry_frame([]).empty

    def test_evaluation_trend(self, rng):
        evaluations = [score([], [], rng, date(2024, 6, d)) for d in range(7, 0, -1)]
        df = evaluation_trend(evaluations)
        assert len(df) == 5
        assert df["evaluation_date"].iloc[-1] == date(2024, 6, 7)
        assert df["precision"].iloc[0] == 86
        assert df["f1"].iloc[0] == 89
