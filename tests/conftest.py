"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the Grid Fault Monitor test suite.
"""
import os
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

# Use in-memory SQLite for tests
os.environ.setdefault("DATABASE_URL", ":memory:")
os.environ.setdefault("SIMULATION_SEED", "42")


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    from src.data.store import Store
    s = Store(":memory:")
    yield s
    s.close()


@pytest.fixture
def clock(now):
    from src.runtime.scheduler import VirtualClock
    return VirtualClock(start=now)


@pytest.fixture
def scheduler(clock):
    from src.runtime.scheduler import Scheduler
    return Scheduler(clock)


@pytest.fixture
def sites():
    from src.data.models import Site
    return [
        Site(site_id="SITE-A", name="Alpha Solar", capacity_mw=50.0, health_score=90.0),
        Site(site_id="SITE-B", name="Bravo Wind", site_type="wind", capacity_mw=80.0, health_score=70.0),
    ]


@pytest.fixture
def make_readings(now):
    """Build readings for one site, one per second, newest last; `values` fills `metric`."""
    from src.data.models import TelemetryReading

    def _make(site_id: str, metric: str, values: list[float], **fixed) -> list:
        return [
            TelemetryReading(site_id=site_id, timestamp=now + timedelta(seconds=i), **{metric: v}, **fixed)
            for i, v in enumerate(values)
        ]

    return _make


@pytest.fixture
def make_prediction(now):
    from src.data.models import ConfidenceLevel, Prediction

    def _make(probability: float = 0.85, fault_type: str = "overvoltage", **overrides) -> Prediction:
        fields = dict(
            site_id="SITE-A",
            timestamp=now,
            predicted_fault_type=fault_type,
            fault_probability=probability,
            estimated_time_to_failure_min=25,
            confidence_level=ConfidenceLevel.VERY_HIGH,
            contributing_factors=["Rising voltage trend", "Grid instability detected", "Load imbalance"],
            model_version="v2.4.1-rf-ensemble",
        )
        fields.update(overrides)
        return Prediction(**fields)

    return _make


@pytest.fixture
def make_fault(now):
    from src.data.models import Fault

    def _make(detected_by_ai: bool = True, **overrides) -> Fault:
        fields = dict(
            fault_id="F-1",
            site_id="SITE-A",
            fault_type="overvoltage",
            start_timestamp=now,
            detected_by_ai=detected_by_ai,
        )
        fields.update(overrides)
        return Fault(**fields)

    return _make
