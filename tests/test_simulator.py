"""
tests/test_simulator.py
────────────────────────
Tests for the SCADA telemetry simulator and fault injection.
"""
import numpy as np
import pytest

from src.data.models import Severity
from src.data.simulator import (
    BASELINE_RANGES,
    FAULT_SCENARIOS,
    GENERIC_SYMPTOMS,
    TelemetrySimulator,
    fault_severity,
    fault_symptoms,
    generate_normal_reading,
    inject_fault,
)


@pytest.fixture
def simulator(store, sites, scheduler, rng):
    return TelemetrySimulator(store, sites, scheduler, rng=rng)


class TestGenerateNormalReading:
    def test_within_baseline(self, rng, now):
        for _ in range(20):
            reading = generate_normal_reading("SITE-A", now, rng)
            for metric, (low, high) in BASELINE_RANGES.items():
                assert low <= getattr(reading, metric) <= high
            assert reading.breaker_status == "CLOSED"
            assert reading.relay_event == "NONE"

    def test_reproducible(self, now):
        a = generate_normal_reading("S", now, np.random.default_rng(3))
        b = generate_normal_reading("S", now, np.random.default_rng(3))
        assert a.voltage_kv == b.voltage_kv


class TestInjectFault:
    def test_overrides_only_scenario_metrics(self, rng, now):
        base = generate_normal_reading("S", now, rng)
        faulty = inject_fault(base, "scada_latency", rng)
        assert 200 <= faulty.latency_ms <= 500
        assert 2 <= faulty.packet_loss_pct <= 8
        assert faulty.voltage_kv == base.voltage_kv
        assert faulty.thd_pct == base.thd_pct

    def test_overvoltage_range(self, rng, now):
        faulty = inject_fault(generate_normal_reading("S", now, rng), "overvoltage", rng)
        assert 130 <= faulty.voltage_kv <= 145

    def test_unknown_type_passes_through(self, rng, now):
        base = generate_normal_reading("S", now, rng)
        assert inject_fault(base, "unauthorized_command", rng) is base


class TestFaultMetadata:
    def test_severity(self):
        assert fault_severity("overvoltage") == Severity.HIGH
        assert fault_severity("inverter_overheat") == Severity.HIGH
        assert fault_severity("scada_latency") == Severity.HIGH
        assert fault_severity("undervoltage") == Severity.MEDIUM

    def test_symptoms(self):
        assert fault_symptoms("harmonic_spike") == [
            "THD threshold exceeded",
            "Power quality degradation",
            "Capacitor stress",
        ]
        assert fault_symptoms("something_else") == GENERIC_SYMPTOMS


class TestRunState:
    def test_reading_every_three_seconds(self, simulator, scheduler, store):
        simulator.start()
        scheduler.advance(9)
        assert simulator.state.readings_count == 3
        assert store.count("reading") == 3

    def test_pause_stops_readings(self, simulator, scheduler):
        simulator.start()
        scheduler.advance(3)
        simulator.pause()
        scheduler.advance(30)
        assert simulator.state.readings_count == 1
        assert not simulator.running

    def test_toggle(self, simulator):
        assert simulator.toggle() is True
        assert simulator.toggle() is False

    def test_start_twice_does_not_double_rate(self, simulator, scheduler):
        simulator.start()
        simulator.start()
        scheduler.advance(6)
        assert simulator.state.readings_count == 2

    def test_reset_keeps_run_state(self, simulator, scheduler):
        simulator.start()
        simulator.trigger_fault("overvoltage")
        scheduler.advance(6)
        simulator.reset()
        assert simulator.state.readings_count == 0
        assert not simulator.fault_active
        assert simulator.running

    def test_reading_site_is_from_fleet(self, simulator, sites):
        reading = simulator.generate_reading()
        assert reading.site_id in {s.site_id for s in sites}

    def test_no_sites(self, store, scheduler, rng):
        assert TelemetrySimulator(store, [], scheduler, rng=rng).generate_reading() is None


class TestFaultScenarios:
    def test_trigger_logs_fault(self, simulator, store):
        fault = simulator.trigger_fault("inverter_overheat")
        assert fault.id is not None
        assert fault.fault_type == "inverter_overheat"
        assert fault.severity == Severity.HIGH
        assert fault.trigger_condition == "Simulated inverter_overheat event"
        assert fault.fault_id.startswith("F-")
        assert store.count("fault") == 1
        assert simulator.state.countdown_s == FAULT_SCENARIOS["inverter_overheat"].duration_s

    def test_readings_carry_fault_signature(self, simulator, scheduler):
        simulator.start()
        simulator.trigger_fault("overvoltage")
        scheduler.advance(3)
        assert simulator.state.last_reading.voltage_kv >= 130

    def test_mutual_exclusion(self, simulator, store):
        simulator.trigger_fault("overvoltage")
        assert simulator.trigger_fault("undervoltage") is None
        assert simulator.state.active_fault == "overvoltage"
        assert store.count("fault") == 1

    def test_unknown_type_rejected(self, simulator):
        with pytest.raises(ValueError):
            simulator.trigger_fault("meteor_strike")

    def test_countdown_expires(self, simulator, scheduler):
        simulator.trigger_fault("harmonic_spike")
        scheduler.advance(14)
        assert simulator.state.countdown_s == 1
        assert simulator.fault_active
        scheduler.advance(1)
        assert not simulator.fault_active
        assert simulator.state.countdown_s == 0

    def test_new_scenario_after_expiry(self, simulator, scheduler):
        simulator.trigger_fault("frequency_drift")
        scheduler.advance(20)
        assert simulator.trigger_fault("undervoltage") is not None

    def test_readings_normal_after_expiry(self, simulator, scheduler):
        simulator.start()
        simulator.trigger_fault("overvoltage")
        scheduler.advance(33)
        assert simulator.state.last_reading.voltage_kv <= 124


class TestAutoFault:
    def test_fires_within_delay_window(self, simulator, scheduler):
        simulator.set_auto_fault_mode(True)
        simulator.start()
        scheduler.advance(45)
        assert simulator.state.faults_injected

    def test_requires_running(self, simulator, scheduler):
        simulator.set_auto_fault_mode(True)
        scheduler.advance(60)
        assert simulator.state.faults_injected == []

    def test_disable_cancels(self, simulator, scheduler):
        simulator.start()
        simulator.set_auto_fault_mode(True)
        simulator.set_auto_fault_mode(False)
        scheduler.advance(60)
        assert simulator.state.faults_injected == []

    def test_rearms_after_scenario(self, store, sites, scheduler, rng):
        simulator = TelemetrySimulator(store, sites, scheduler, rng=rng, auto_fault_delay_s=(1, 2))
        simulator.set_auto_fault_mode(True)
        simulator.start()
        scheduler.advance(150)
        assert len(simulator.state.faults_injected) >= 2
