"""
src/runtime/scheduler.py
────────────────────────
Cancellable recurring and one-shot tasks over an injectable clock.

  SystemClock   : wall time, used by the running dashboard
  VirtualClock  : manually advanced time, used by tests and replays

The scheduler never sleeps on its own. The owner drains it:

  scheduler.run_pending()     fire everything due at clock.time()
  scheduler.advance(seconds)  (VirtualClock only) step through each due time

Due tasks fire in due-time order, ties in registration order. A recurring
task that fell behind fires once per missed period. A task that raises is
logged and stays scheduled.
"""
from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

logger = logging.getLogger(__name__)


class SystemClock:
    def time(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now(tz=UTC)


class VirtualClock:
    """Clock that only moves when told to. `now()` is `start` + elapsed."""

    def __init__(self, start: datetime | None = None) -> None:
        self._start = start or datetime(2024, 1, 1, tzinfo=UTC)
        self._elapsed = 0.0

    def time(self) -> float:
        return self._elapsed

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed)

    def set(self, seconds: float) -> None:
        if seconds < self._elapsed:
            raise ValueError("VirtualClock cannot move backwards")
        self._elapsed = float(seconds)

    def advance(self, seconds: float) -> None:
        self.set(self._elapsed + seconds)


class ScheduledTask:
    def __init__(
        self,
        name: str,
        callback: Callable[[], object],
        next_run: float,
        interval: float | None,
    ) -> None:
        self.name = name
        self.callback = callback
        self.next_run = next_run
        self.interval = interval
        self.cancelled = False
        self.runs = 0

    @property
    def recurring(self) -> bool:
        return self.interval is not None

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        kind = f"every {self.interval}s" if self.recurring else "once"
        state = "cancelled" if self.cancelled else f"next={self.next_run:.2f}"
        return f"<ScheduledTask {self.name} {kind} {state}>"


class Scheduler:
    def __init__(self, clock: SystemClock | VirtualClock | None = None) -> None:
        self.clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._seq = itertools.count()

    # ── Registration ──────────────────────────────────────────────────────────

    def _push(self, task: ScheduledTask) -> None:
        heapq.heappush(self._queue, (task.next_run, next(self._seq), task))

    def every(self, interval: float, callback: Callable[[], object], name: str = "") -> ScheduledTask:
        """Run `callback` every `interval` seconds, first firing one interval from now."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        with self._lock:
            task = ScheduledTask(name or callback.__name__, callback, self.clock.time() + interval, interval)
            self._push(task)
        return task

    def once(self, delay: float, callback: Callable[[], object], name: str = "") -> ScheduledTask:
        """Run `callback` a single time, `delay` seconds from now."""
        if delay < 0:
            raise ValueError("delay must be non-negative")
        with self._lock:
            task = ScheduledTask(name or callback.__name__, callback, self.clock.time() + delay, None)
            self._push(task)
        return task

    # ── Execution ─────────────────────────────────────────────────────────────

    def _pop_due(self, now: float) -> ScheduledTask | None:
        while self._queue:
            due, _, task = self._queue[0]
            if task.cancelled:
                heapq.heappop(self._queue)
                continue
            if due > now:
                return None
            heapq.heappop(self._queue)
            return task
        return None

    def _fire(self, task: ScheduledTask) -> None:
        if task.recurring:
            task.next_run += task.interval
            self._push(task)
        else:
            task.cancelled = True
        task.runs += 1
        try:
            task.callback()
        except Exception:
            logger.exception("Scheduled task %s failed", task.name)

    def run_pending(self) -> int:
        """Fire every task due at the current clock time. Returns the number fired."""
        fired = 0
        with self._lock:
            now = self.clock.time()
            while (task := self._pop_due(now)) is not None:
                self._fire(task)
                fired += 1
        return fired

    def next_due(self) -> float | None:
        with self._lock:
            live = [due for due, _, task in self._queue if not task.cancelled]
        return min(live) if live else None

    def advance(self, seconds: float) -> int:
        """
        Move a VirtualClock forward, firing tasks at their own due times.

        Callbacks observe clock.time() equal to their due time, so tasks
        they register are scheduled relative to that moment.
        """
        if not isinstance(self.clock, VirtualClock):
            raise TypeError("advance() requires a VirtualClock")
        target = self.clock.time() + seconds
        fired = 0
        with self._lock:
            while (due := self.next_due()) is not None and due <= target:
                self.clock.set(max(due, self.clock.time()))
                fired += self.run_pending()
            self.clock.set(target)
            fired += self.run_pending()
        return fired

    def pending(self) -> list[ScheduledTask]:
        with self._lock:
            return [task for _, _, task in sorted(self._queue) if not task.cancelled]
