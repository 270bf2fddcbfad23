"""Simulated scan progress, decoupled from the real analysis latency."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

STATUS_IDENTIFYING = "Identifying dish..."
STATUS_ANALYZING = "Reading menu & analyzing..."
STATUS_ERROR = "Error scanning. Try again."

# (upper bound, step) pairs; progress past the last bound uses TAIL_STEP
_SCHEDULE: list[tuple[float, float]] = [(30.0, 3.0), (70.0, 1.0)]
TAIL_STEP = 0.3


class ScanPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETING = "completing"
    DONE = "done"
    ERRORED = "errored"
    CANCELLED = "cancelled"


def next_progress(value: float, ceiling: float = 95.0) -> float:
    """Advance one tick: fast early, slow near the ceiling, never past it."""
    if value >= ceiling:
        return value
    step = TAIL_STEP
    for bound, bound_step in _SCHEDULE:
        if value < bound:
            step = bound_step
            break
    return min(ceiling, value + step)


class ScanProgressController:
    """Progress indicator state machine for one scan.

    Idle -> Running -> Completing -> Done, with Errored reachable from Running
    and Cancelled reachable from Running or Completing.
    """

    def __init__(
        self,
        tick_interval: float = 0.1,
        ceiling: float = 95.0,
        completion_hold: float = 0.5,
        error_grace: float = 3.0,
        on_change: Callable[[ScanProgressController], None] | None = None,
    ) -> None:
        self._tick_interval = tick_interval
        self._ceiling = ceiling
        self._completion_hold = completion_hold
        self._error_grace = error_grace
        self._on_change = on_change
        self._task: asyncio.Task | None = None

        self.phase = ScanPhase.IDLE
        self.progress = 0.0
        self.status = STATUS_IDENTIFYING

    @property
    def percent(self) -> int:
        return min(100, round(self.progress))

    @property
    def ticking(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Enter Running and start the tick source on the current event loop."""
        if self.phase is not ScanPhase.IDLE:
            raise RuntimeError(f"Cannot start progress from {self.phase.value}")
        self.phase = ScanPhase.RUNNING
        self._task = asyncio.get_running_loop().create_task(self._run_ticks())
        self._notify()

    def tick(self) -> None:
        if self.phase is not ScanPhase.RUNNING:
            return
        self.progress = next_progress(self.progress, self._ceiling)
        self._notify()

    def set_status(self, status: str) -> None:
        if self.phase is ScanPhase.RUNNING:
            self.status = status
            self._notify()

    async def complete(self) -> bool:
        """Jump to 100%, hold briefly, then finish.

        Returns False if the scan was cancelled before or during the hold.
        """
        if self.phase is not ScanPhase.RUNNING:
            return False
        self._stop_ticks()
        self.phase = ScanPhase.COMPLETING
        self.progress = 100.0
        self._notify()

        await asyncio.sleep(self._completion_hold)
        if self.phase is not ScanPhase.COMPLETING:
            return False
        self.phase = ScanPhase.DONE
        self._notify()
        return True

    async def fail(
        self,
        status: str = STATUS_ERROR,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        """Show the error, reset progress and run ``on_cancel`` after the grace period."""
        if self.phase is not ScanPhase.RUNNING:
            return
        self._stop_ticks()
        self.phase = ScanPhase.ERRORED
        self.progress = 0.0
        self.status = status
        self._notify()

        await asyncio.sleep(self._error_grace)
        if on_cancel is not None:
            on_cancel()

    def cancel(self) -> None:
        if self.phase not in (ScanPhase.RUNNING, ScanPhase.COMPLETING):
            return
        self._stop_ticks()
        self.phase = ScanPhase.CANCELLED
        self._notify()
        logger.debug("Progress cancelled at %.1f%%", self.progress)

    async def _run_ticks(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.tick()

    def _stop_ticks(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
