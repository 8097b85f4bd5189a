"""
src/data/simulator.py
─────────────────────
SCADA telemetry simulator for the renewable-site fleet.

Generates:
  - One TelemetryReading every READING_INTERVAL_S for a random site while running
  - Baseline metrics sampled uniformly from normal-operation ranges
  - Fault scenarios that override a subset of metrics for a fixed number of
    seconds and log a matching Fault record
  - Optional autonomous scenarios after a random 15–45 s idle delay

Design:
  - Reproducible with an injected numpy Generator (SIMULATION_SEED by default)
  - Time comes from the scheduler's clock; nothing here sleeps
  - Only one scenario at a time: activation while one is running is a no-op
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

from config.settings import settings
from src.data.models import Fault, FaultStatus, FaultType, Severity, Site, TelemetryReading
from src.data.store import Store, StoreError
from src.runtime.scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)

# ── Normal operating ranges ───────────────────────────────────────────────────

BASELINE_RANGES: dict[str, tuple[float, float]] = {
    "voltage_kv": (118.0, 124.0),
    "current_a": (280.0, 340.0),
    "frequency_hz": (59.9, 60.1),
    "power_kw": (3_500.0, 4_000.0),
    "energy_kwh": (180_000.0, 185_000.0),
    "power_factor": (0.94, 0.99),
    "inverter_temp_c": (55.0, 70.0),
    "dc_link_voltage_v": (650.0, 700.0),
    "latency_ms": (15.0, 40.0),
    "packet_loss_pct": (0.0, 0.3),
    "thd_pct": (2.0, 4.0),
    "irradiance_wm2": (800.0, 1_000.0),
}


@dataclass(frozen=True)
class FaultScenario:
    overrides: dict[str, tuple[float, float]]
    duration_s: int


FAULT_SCENARIOS: dict[str, FaultScenario] = {
    FaultType.OVERVOLTAGE.value: FaultScenario({"voltage_kv": (130.0, 145.0)}, 30),
    FaultType.UNDERVOLTAGE.value: FaultScenario({"voltage_kv": (95.0, 105.0)}, 25),
    FaultType.FREQUENCY_DRIFT.value: FaultScenario({"frequency_hz": (58.5, 59.3)}, 20),
    FaultType.HARMONIC_SPIKE.value: FaultScenario({"thd_pct": (10.0, 18.0)}, 15),
    FaultType.INVERTER_OVERHEAT.value: FaultScenario({"inverter_temp_c": (85.0, 105.0)}, 45),
    FaultType.SCADA_LATENCY.value: FaultScenario(
        {"latency_ms": (200.0, 500.0), "packet_loss_pct": (2.0, 8.0)}, 30
    ),
    FaultType.DC_INSTABILITY.value: FaultScenario({"dc_link_voltage_v": (400.0, 550.0)}, 25),
}

FAULT_SYMPTOMS: dict[str, list[str]] = {
    "overvoltage": ["Voltage spike detected", "Inverter protection triggered", "Grid instability warning"],
    "undervoltage": ["Power output drop", "Relay chatter observed", "Brownout conditions"],
    "frequency_drift": ["Frequency deviation", "Protection relay warning", "Grid sync issues"],
    "harmonic_spike": ["THD threshold exceeded", "Power quality degradation", "Capacitor stress"],
    "inverter_overheat": ["Temperature alarm", "Output derating active", "Cooling system stress"],
    "scada_latency": ["Communication delay", "Command execution lag", "Packet loss detected"],
    "dc_instability": ["DC ripple variance", "MPPT oscillation", "String imbalance"],
}
GENERIC_SYMPTOMS = ["Anomaly detected"]

HIGH_SEVERITY_TYPES = frozenset({"overvoltage", "inverter_overheat", "scada_latency"})


def fault_symptoms(fault_type: str) -> list[str]:
    return list(FAULT_SYMPTOMS.get(fault_type, GENERIC_SYMPTOMS))


def fault_severity(fault_type: str) -> Severity:
    return Severity.HIGH if fault_type in HIGH_SEVERITY_TYPES else Severity.MEDIUM


def generate_normal_reading(site_id: str, ts: datetime, rng: np.random.Generator) -> TelemetryReading:
    """One reading with every metric drawn from its baseline range."""
    metrics = {name: float(rng.uniform(low, high)) for name, (low, high) in BASELINE_RANGES.items()}
    return TelemetryReading(
        site_id=site_id,
        timestamp=ts,
        breaker_status="CLOSED",
        relay_event="NONE",
        **metrics,
    )


def inject_fault(reading: TelemetryReading, fault_type: str, rng: np.random.Generator) -> TelemetryReading:
    """Resample the scenario's metrics from their abnormal ranges. Unknown types pass through."""
    scenario = FAULT_SCENARIOS.get(fault_type)
    if scenario is None:
        return reading
    overrides = {name: float(rng.uniform(low, high)) for name, (low, high) in scenario.overrides.items()}
    return reading.model_copy(update=overrides)


# ── Simulator ─────────────────────────────────────────────────────────────────

@dataclass
class SimulatorState:
    running: bool = False
    active_fault: str | None = None
    countdown_s: int = 0
    readings_count: int = 0
    auto_fault_mode: bool = False
    last_reading: TelemetryReading | None = None
    last_fault: Fault | None = None
    faults_injected: list[str] = field(default_factory=list)


class TelemetrySimulator:
    """
    Scheduler-driven telemetry generator with fault injection.

    Tasks owned by the simulator:
      reading    every reading_interval_s while running
      countdown  every countdown_tick_s while a scenario is active
      auto-fault one-shot, armed while running + auto mode + idle
    """

    def __init__(
        self,
        store: Store,
        sites: Sequence[Site],
        scheduler: Scheduler,
        rng: np.random.Generator | None = None,
        reading_interval_s: float = settings.READING_INTERVAL_S,
        countdown_tick_s: float = settings.COUNTDOWN_TICK_S,
        auto_fault_delay_s: tuple[float, float] = (
            settings.AUTO_FAULT_MIN_DELAY_S,
            settings.AUTO_FAULT_MAX_DELAY_S,
        ),
    ) -> None:
        self.store = store
        self.sites = list(sites)
        self.scheduler = scheduler
        self.rng = rng if rng is not None else np.random.default_rng(settings.SIMULATION_SEED)
        self.reading_interval_s = reading_interval_s
        self.countdown_tick_s = countdown_tick_s
        self.auto_fault_delay_s = auto_fault_delay_s
        self.state = SimulatorState()
        self._reading_task: ScheduledTask | None = None
        self._countdown_task: ScheduledTask | None = None
        self._auto_task: ScheduledTask | None = None

    # ── Run state ─────────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def fault_active(self) -> bool:
        return self.state.active_fault is not None

    def start(self) -> None:
        if self.state.running:
            return
        self.state.running = True
        self._reading_task = self.scheduler.every(self.reading_interval_s, self.generate_reading, "reading")
        self._arm_auto_fault()
        logger.info("Simulator started (%d sites)", len(self.sites))

    def pause(self) -> None:
        if not self.state.running:
            return
        self.state.running = False
        self._cancel("_reading_task")
        self._cancel("_auto_task")
        logger.info("Simulator paused after %d readings", self.state.readings_count)

    def toggle(self) -> bool:
        if self.state.running:
            self.pause()
        else:
            self.start()
        return self.state.running

    def reset(self) -> None:
        """Zero the reading counter and clear any active scenario. Run state is kept."""
        self.state.readings_count = 0
        self._clear_scenario()
        logger.info("Simulator reset")

    def set_auto_fault_mode(self, enabled: bool) -> None:
        self.state.auto_fault_mode = bool(enabled)
        if enabled:
            self._arm_auto_fault()
        else:
            self._cancel("_auto_task")

    # ── Readings ──────────────────────────────────────────────────────────────

    def generate_reading(self) -> TelemetryReading | None:
        """Produce and persist one reading for a random site. None if nothing was stored."""
        if not self.sites:
            return None
        site = self.sites[int(self.rng.integers(len(self.sites)))]
        reading = generate_normal_reading(site.site_id, self.scheduler.clock.now(), self.rng)
        if self.state.active_fault is not None and self.state.countdown_s > 0:
            reading = inject_fault(reading, self.state.active_fault, self.rng)

        try:
            saved = self.store.create("reading", reading)
        except StoreError:
            logger.exception("Failed to save telemetry for site %s", site.site_id)
            return None

        self.state.readings_count += 1
        self.state.last_reading = saved
        return saved

    # ── Fault scenarios ───────────────────────────────────────────────────────

    def trigger_fault(self, fault_type: str) -> Fault | None:
        """
        Activate a scenario and log its Fault record.

        Returns the stored Fault, or None when the request was rejected
        (another scenario is active) or the record could not be written.

        Raises:
            ValueError: `fault_type` is not a known scenario
        """
        scenario = FAULT_SCENARIOS.get(fault_type)
        if scenario is None:
            raise ValueError(f"Unknown fault scenario: {fault_type!r}")
        if self.state.active_fault is not None:
            logger.warning(
                "Ignoring %s: %s already active (%ds left)",
                fault_type,
                self.state.active_fault,
                self.state.countdown_s,
            )
            return None

        self.state.active_fault = fault_type
        self.state.countdown_s = scenario.duration_s
        self.state.faults_injected.append(fault_type)
        self._cancel("_auto_task")
        self._countdown_task = self.scheduler.every(self.countdown_tick_s, self._tick_countdown, "countdown")
        logger.info("Fault scenario %s active for %ds", fault_type, scenario.duration_s)

        if not self.sites:
            return None
        return self._log_fault(fault_type)

    def _log_fault(self, fault_type: str) -> Fault | None:
        site = self.sites[int(self.rng.integers(len(self.sites)))]
        now = self.scheduler.clock.now()
        fault = Fault(
            fault_id=f"F-{int(now.timestamp() * 1000)}",
            site_id=site.site_id,
            fault_type=fault_type,
            severity=fault_severity(fault_type),
            status=FaultStatus.ACTIVE,
            start_timestamp=now,
            trigger_condition=f"Simulated {fault_type} event",
            observable_symptoms=fault_symptoms(fault_type),
            detected_by_ai=bool(self.rng.random() > 0.3),
        )
        try:
            saved = self.store.create("fault", fault)
        except StoreError:
            logger.exception("Failed to log %s fault for site %s", fault_type, site.site_id)
            return None
        self.state.last_fault = saved
        return saved

    def _tick_countdown(self) -> None:
        self.state.countdown_s -= 1
        if self.state.countdown_s <= 0:
            logger.info("Fault scenario %s ended", self.state.active_fault)
            self._clear_scenario()

    def _clear_scenario(self) -> None:
        self.state.active_fault = None
        self.state.countdown_s = 0
        self._cancel("_countdown_task")
        self._arm_auto_fault()

    # ── Autonomous mode ───────────────────────────────────────────────────────

    def _arm_auto_fault(self) -> None:
        if not (self.state.auto_fault_mode and self.state.running) or self.fault_active:
            return
        if self._auto_task is not None and self._auto_task.active:
            return
        low, high = self.auto_fault_delay_s
        delay = float(self.rng.uniform(low, high))
        self._auto_task = self.scheduler.once(delay, self._auto_trigger, "auto-fault")
        logger.debug("Auto fault armed in %.1fs", delay)

    def _auto_trigger(self) -> None:
        self._auto_task = None
        if not (self.state.auto_fault_mode and self.state.running) or self.fault_active:
            return
        fault_type = str(self.rng.choice(list(FAULT_SCENARIOS)))
        self.trigger_fault(fault_type)

    def _cancel(self, attr: str) -> None:
        task = getattr(self, attr)
        if task is not None:
            task.cancel()
            setattr(self, attr, None)
