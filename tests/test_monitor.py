"""
tests/test_monitor.py
──────────────────────
End-to-end tests: telemetry → prediction → maintenance → evaluation,
driven through a VirtualClock.
"""
import pytest

from src.data.models import ActionStatus, ConfidenceLevel, Priority
from src.runtime.monitor import FleetMonitor


@pytest.fixture
def monitor(store, scheduler, rng, sites):
    m = FleetMonitor(store, scheduler=scheduler, rng=rng, sites=sites)
    yield m
    m.stop()


class TestPipeline:
    def test_overvoltage_to_critical_action(self, monitor, store, make_readings):
        for reading in make_readings("SITE-A", "voltage_kv", [126, 127, 125, 128, 124]):
            store.create("reading", reading)

        predictions = monitor.run_predictions()
        assert len(predictions) == 1
        prediction = predictions[0]
        assert prediction.predicted_fault_type == "overvoltage"
        assert prediction.fault_probability == 0.85
        assert prediction.confidence_level == ConfidenceLevel.VERY_HIGH

        action = monitor.recommend(prediction.id)
        assert action.priority == Priority.CRITICAL
        assert action.estimated_repair_cost_usd == 2500
        assert action.estimated_downtime_if_ignored_hr == 8
        assert action.triggered_by_prediction_id == prediction.id

        scheduled = monitor.update_action(action.id, "scheduled")
        assert scheduled.status == ActionStatus.SCHEDULED

    def test_periodic_cycle_every_30s(self, monitor, store, scheduler, make_readings):
        readings = make_readings("SITE-A", "voltage_kv", [130] * 6)
        for reading in readings[:5]:
            store.create("reading", reading)
        scheduler.advance(29)
        assert store.count("prediction") == 0
        scheduler.advance(1)
        assert store.count("prediction") == 1
        scheduler.advance(30)
        assert store.count("prediction") == 1
        store.create("reading", readings[5])
        scheduler.advance(30)
        assert store.count("prediction") == 2

    def test_periodic_cycle_skipped_without_telemetry(self, monitor, store, scheduler):
        scheduler.advance(90)
        assert store.count("prediction") == 0
        assert monitor.predictor.last_analysis is None

    def test_simulated_fault_is_predicted(self, monitor, store, scheduler):
        monitor.simulator.start()
        monitor.simulator.trigger_fault("overvoltage")
        scheduler.advance(30)
        predictions = store.list("prediction")
        assert predictions
        assert {p.predicted_fault_type for p in predictions} == {"overvoltage"}

    def test_evaluate(self, monitor, store, now):
        monitor.simulator.trigger_fault("inverter_overheat")
        result = monitor.evaluate()
        assert result.evaluation_date == now.date()
        assert store.count("evaluation") == 1

    def test_tick_runs_due_tasks(self, monitor, clock):
        monitor.simulator.start()
        clock.advance(3)
        assert monitor.tick() == 1
        assert monitor.simulator.state.readings_count == 1

    def test_stop(self, monitor, scheduler):
        monitor.simulator.start()
        monitor.stop()
        assert scheduler.pending() == []
