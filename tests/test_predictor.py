"""
tests/test_predictor.py
────────────────────────
Tests for the prediction synthesizer.
"""
import threading
from datetime import timedelta

import pytest

from src.analytics.detectors import DETECTORS, Detector, Signal
from src.analytics.predictor import (
    GENERIC_FACTORS,
    MODEL_VERSION,
    PredictionEngine,
    classify_confidence,
    contributing_factors,
    group_by_site,
)
from src.data.models import ConfidenceLevel, TelemetryReading
from src.data.store import StoreError


class CountingDetector(Detector):
    fault_type = "counting"
    metric = "voltage_kv"

    def __init__(self):
        super().__init__()
        self.calls = 0

    def classify(self, mean):
        return None

    def evaluate(self, readings):
        self.calls += 1
        return super().evaluate(readings)


class ExplodingDetector(Detector):
    fault_type = "exploding"
    metric = "voltage_kv"

    def classify(self, mean):
        raise RuntimeError("boom")


class FixedDetector(Detector):
    metric = "voltage_kv"

    def __init__(self, fault_type, probability):
        super().__init__()
        self.fault_type = fault_type
        self.probability = probability

    def classify(self, mean):
        return Signal(self.probability, 10)


class TestConfidence:
    @pytest.mark.parametrize(
        "probability, expected",
        [
            (0.9, ConfidenceLevel.VERY_HIGH),
            (0.85, ConfidenceLevel.VERY_HIGH),
            (0.75, ConfidenceLevel.HIGH),
            (0.7, ConfidenceLevel.HIGH),
            (0.55, ConfidenceLevel.MEDIUM),
            (0.5, ConfidenceLevel.MEDIUM),
            (0.3, ConfidenceLevel.LOW),
        ],
    )
    def test_buckets(self, probability, expected):
        assert classify_confidence(probability) == expected


class TestFactors:
    def test_known_type(self):
        assert contributing_factors("overvoltage") == [
            "Rising voltage trend",
            "Grid instability detected",
            "Load imbalance",
        ]

    def test_unknown_type(self):
        assert contributing_factors("dc_instability") == GENERIC_FACTORS

    def test_returns_copy(self):
        factors = contributing_factors("overvoltage")
        factors.append("x")
        assert len(contributing_factors("overvoltage")) == 3


class TestGroupBySite:
    def test_groups(self, make_readings):
        readings = make_readings("A", "voltage_kv", [120, 121]) + make_readings("B", "voltage_kv", [119])
        grouped = group_by_site(readings)
        assert {k: len(v) for k, v in grouped.items()} == {"A": 2, "B": 1}


class TestRunCycle:
    def test_overvoltage_end_to_end(self, store, make_readings, now):
        engine = PredictionEngine(store, now=lambda: now)
        saved = engine.run_cycle(make_readings("SITE-A", "voltage_kv", [126, 127, 125, 128, 124], frequency_hz=60.0))
        assert len(saved) == 1
        p = saved[0]
        assert p.predicted_fault_type == "overvoltage"
        assert p.fault_probability == 0.85
        assert p.estimated_time_to_failure_min == 25
        assert p.confidence_level == ConfidenceLevel.VERY_HIGH
        assert p.model_version == MODEL_VERSION
        assert p.id is not None
        assert store.count("prediction") == 1

    def test_site_below_minimum_skipped(self, store, make_readings):
        engine = PredictionEngine(store)
        assert engine.run_cycle(make_readings("SITE-A", "voltage_kv", [140, 140])) == []
        assert store.count("prediction") == 0

    def test_every_detector_invoked_once_per_site(self, store, make_readings):
        counter = CountingDetector()
        engine = PredictionEngine(store, detectors=[counter])
        readings = make_readings("A", "voltage_kv", [120] * 3) + make_readings("B", "voltage_kv", [120] * 4)
        engine.run_cycle(readings)
        assert counter.calls == 2

    def test_probability_gate_is_strict(self, store, make_readings):
        engine = PredictionEngine(store, detectors=[FixedDetector("at_gate", 0.5), FixedDetector("above", 0.51)])
        saved = engine.run_cycle(make_readings("A", "voltage_kv", [120] * 3))
        assert [p.predicted_fault_type for p in saved] == ["above"]

    def test_failing_detector_does_not_stop_batch(self, store, make_readings):
        engine = PredictionEngine(store, detectors=[ExplodingDetector(), *DETECTORS])
        saved = engine.run_cycle(make_readings("A", "voltage_kv", [130] * 5, frequency_hz=60.0))
        assert [p.predicted_fault_type for p in saved] == ["overvoltage"]

    def test_store_failure_logged_and_skipped(self, store, make_readings, monkeypatch):
        def failing_create(entity, record):
            raise StoreError("disk full")

        monkeypatch.setattr(store, "create", failing_create)
        engine = PredictionEngine(store)
        assert engine.run_cycle(make_readings("A", "voltage_kv", [130] * 5, frequency_hz=60.0)) == []

    def test_cycle_bookkeeping(self, store, make_readings, now):
        engine = PredictionEngine(store, now=lambda: now)
        engine.run_cycle(make_readings("A", "voltage_kv", [130] * 5, frequency_hz=60.0))
        assert engine.last_analysis == now
        assert engine.predictions_generated == 1

    def test_reads_from_store_when_no_readings_given(self, store, make_readings):
        for r in make_readings("A", "inverter_temp_c", [90] * 5, frequency_hz=60.0, voltage_kv=120.0):
            store.create("reading", r)
        saved = PredictionEngine(store).run_cycle()
        assert [p.predicted_fault_type for p in saved] == ["inverter_overheat"]
        assert saved[0].fault_probability == 0.92


class TestRunIfTelemetry:
    def test_no_telemetry_skips(self, store):
        counter = CountingDetector()
        engine = PredictionEngine(store, detectors=[counter])
        assert engine.run_if_telemetry() == []
        assert counter.calls == 0
        assert engine.last_analysis is None

    def test_runs_with_telemetry(self, store, now):
        for i in range(3):
            store.create("reading", TelemetryReading(site_id="A", timestamp=now + timedelta(seconds=i), voltage_kv=120))
        counter = CountingDetector()
        PredictionEngine(store, detectors=[counter]).run_if_telemetry()
        assert counter.calls == 1


class TestOverlappingCycles:
    def test_concurrent_cycles_persist_once(self, store, make_readings):
        engine = PredictionEngine(store)
        readings = make_readings("S1", "voltage_kv", [126, 127, 125, 128, 124])
        barrier = threading.Barrier(2)

        def cycle():
            barrier.wait()
            engine.run_cycle(readings)

        threads = [threading.Thread(target=cycle) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.filter("prediction", {"site_id": "S1", "predicted_fault_type": "overvoltage"})) == 1

    def test_repeat_cycle_without_new_telemetry_skips(self, store, make_readings):
        engine = PredictionEngine(store)
        readings = make_readings("S1", "voltage_kv", [130] * 5)
        assert len(engine.run_cycle(readings)) == 1
        assert engine.run_cycle(readings) == []

    def test_newer_reading_reopens_site(self, store, make_readings):
        engine = PredictionEngine(store)
        readings = make_readings("S1", "voltage_kv", [130] * 6)
        engine.run_cycle(readings[:5])
        assert len(engine.run_cycle(readings)) == 1

    def test_sites_tracked_independently(self, store, make_readings):
        engine = PredictionEngine(store)
        engine.run_cycle(make_readings("S1", "voltage_kv", [130] * 5))
        saved = engine.run_cycle(make_readings("S2", "voltage_kv", [130] * 5))
        assert [p.site_id for p in saved] == ["S2"]
