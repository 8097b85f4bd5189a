"""
src/analytics/detectors.py
──────────────────────────
Rule-based fault detector bank.

Each detector averages one metric over the most recent readings of a site
(newest first, at most DEFAULT_WINDOW of them) and maps the mean to an
optional Signal through fixed thresholds:

  overvoltage        voltage_kv       mean > 124          → (0.85, 25)
  undervoltage       voltage_kv       mean < 112          → (0.78, 30)
  frequency_drift    frequency_hz     mean < 59.6 | > 60.4 → (0.72, 20)
  inverter_overheat  inverter_temp_c  mean > 80           → (0.92, 15)
                                      mean > 72           → (0.65, 45)
  scada_latency      latency_ms       mean > 150          → (0.75, 35)
  harmonic_spike     thd_pct          mean > 7            → (0.68, 40)

Thresholds and probabilities are fixed constants, not fitted values.
Detectors are pure: same window in, same Signal out.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from config.settings import settings
from src.data.models import FaultType, TelemetryReading

DEFAULT_WINDOW = settings.DETECTOR_WINDOW


@dataclass(frozen=True)
class Signal:
    probability: float
    estimated_time_to_failure_min: float


def recent_window(readings: Sequence[TelemetryReading], size: int = DEFAULT_WINDOW) -> list[TelemetryReading]:
    """The `size` most recent readings, newest first."""
    ordered = sorted(readings, key=lambda r: r.timestamp, reverse=True)
    return ordered[:size]


def window_mean(
    readings: Sequence[TelemetryReading],
    metric: str,
    default: float = 0.0,
    size: int = DEFAULT_WINDOW,
) -> float | None:
    """
    Arithmetic mean of `metric` over the recent window.

    Missing or zero values count as `default`, so a 0 Hz frequency sample
    reads as nominal. Returns None for an empty window.
    """
    window = recent_window(readings, size)
    if not window:
        return None
    return sum(getattr(r, metric) or default for r in window) / len(window)


class Detector(ABC):
    """One fault type, one averaged metric, a fixed threshold policy."""

    fault_type: str
    metric: str
    default: float = 0.0

    def __init__(self, window: int = DEFAULT_WINDOW) -> None:
        self.window = window

    def mean(self, readings: Sequence[TelemetryReading]) -> float | None:
        return window_mean(readings, self.metric, self.default, self.window)

    def evaluate(self, readings: Sequence[TelemetryReading]) -> Signal | None:
        avg = self.mean(readings)
        if avg is None:
            return None
        return self.classify(avg)

    @abstractmethod
    def classify(self, mean: float) -> Signal | None:
        """Map the window mean to a Signal, or None when nothing is wrong."""

    def __call__(self, readings: Sequence[TelemetryReading]) -> Signal | None:
        return self.evaluate(readings)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.fault_type} on {self.metric}>"


class OvervoltageDetector(Detector):
    fault_type = FaultType.OVERVOLTAGE.value
    metric = "voltage_kv"
    limit = 124.0

    def classify(self, mean: float) -> Signal | None:
        if mean > self.limit:
            return Signal(0.85, 25)
        return None


class UndervoltageDetector(Detector):
    fault_type = FaultType.UNDERVOLTAGE.value
    metric = "voltage_kv"
    limit = 112.0

    def classify(self, mean: float) -> Signal | None:
        if mean < self.limit:
            return Signal(0.78, 30)
        return None


class FrequencyDriftDetector(Detector):
    fault_type = FaultType.FREQUENCY_DRIFT.value
    metric = "frequency_hz"
    default = 60.0
    low = 59.6
    high = 60.4

    def classify(self, mean: float) -> Signal | None:
        if mean < self.low or mean > self.high:
            return Signal(0.72, 20)
        return None


class InverterOverheatDetector(Detector):
    fault_type = FaultType.INVERTER_OVERHEAT.value
    metric = "inverter_temp_c"
    critical = 80.0
    warning = 72.0

    def classify(self, mean: float) -> Signal | None:
        if mean > self.critical:
            return Signal(0.92, 15)
        if mean > self.warning:
            return Signal(0.65, 45)
        return None


class ScadaLatencyDetector(Detector):
    fault_type = FaultType.SCADA_LATENCY.value
    metric = "latency_ms"
    limit = 150.0

    def classify(self, mean: float) -> Signal | None:
        if mean > self.limit:
            return Signal(0.75, 35)
        return None


class HarmonicSpikeDetector(Detector):
    fault_type = FaultType.HARMONIC_SPIKE.value
    metric = "thd_pct"
    limit = 7.0

    def classify(self, mean: float) -> Signal | None:
        if mean > self.limit:
            return Signal(0.68, 40)
        return None


# ── Registry ──────────────────────────────────────────────────────────────────

DETECTORS: list[Detector] = [
    OvervoltageDetector(),
    UndervoltageDetector(),
    FrequencyDriftDetector(),
    InverterOverheatDetector(),
    ScadaLatencyDetector(),
    HarmonicSpikeDetector(),
]

DETECTION_RULES: dict[str, Detector] = {d.fault_type: d for d in DETECTORS}


def run_detectors(
    readings: Sequence[TelemetryReading],
    detectors: Sequence[Detector] = DETECTORS,
) -> dict[str, Signal]:
    """Evaluate every detector against one site's readings; only hits are returned."""
    hits: dict[str, Signal] = {}
    for detector in detectors:
        signal = detector.evaluate(readings)
        if signal is not None:
            hits[detector.fault_type] = signal
    return hits
