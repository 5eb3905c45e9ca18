from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from prediction_tracker.config.runtime import RuntimeSettings
from prediction_tracker.entities.instrument import Instrument
from prediction_tracker.services.reconcile import ReconciliationEngine

logger = logging.getLogger(__name__)


@dataclass
class ScheduleSettings:
    enabled: bool = True
    interval_ms: int = 30_000
    min_interval_ms: int = 5_000
    max_interval_ms: int = 120_000

    @classmethod
    def from_runtime(cls, settings: RuntimeSettings) -> "ScheduleSettings":
        schedule = cls(
            enabled=settings.auto_refresh,
            min_interval_ms=settings.min_refresh_interval_ms,
            max_interval_ms=settings.max_refresh_interval_ms,
        )
        schedule.interval_ms = schedule.clamp(settings.refresh_interval_ms)
        return schedule

    def clamp(self, interval_ms: int) -> int:
        return max(self.min_interval_ms, min(int(interval_ms), self.max_interval_ms))


class RefreshScheduler:
    """Fires refresh cycles on a fixed cadence while enabled.

    Every tick starts its cycle as an independent task and does not wait for
    the previous one, so slow cycles may overlap.
    """

    def __init__(self, engine: ReconciliationEngine, schedule: ScheduleSettings | None = None):
        self.engine = engine
        self.schedule = schedule or ScheduleSettings()
        self._timer: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        if self.schedule.enabled and not self.running:
            self._timer = asyncio.create_task(self._tick_loop(self.schedule.interval_ms))
            logger.info("Auto-refresh every %dms", self.schedule.interval_ms)

    async def stop(self) -> None:
        self._cancel_timer()
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)

    def set_enabled(self, enabled: bool) -> None:
        """Turning auto-refresh off stops future ticks; in-flight cycles finish."""
        self.schedule.enabled = bool(enabled)
        if self.schedule.enabled:
            self.start()
        else:
            self._cancel_timer()
            logger.info("Auto-refresh disabled")

    def set_interval(self, interval_ms: int) -> int:
        self.schedule.interval_ms = self.schedule.clamp(interval_ms)
        if self.running:
            self._cancel_timer()
            self.start()
        return self.schedule.interval_ms

    def select_instrument(self, instrument: Instrument) -> asyncio.Task[None]:
        """Switch instruments and fire an immediate cycle outside the cadence."""
        self.engine.select(instrument)
        return self.trigger(instrument)

    def trigger(self, instrument: Instrument | None = None) -> asyncio.Task[None]:
        task = asyncio.create_task(self.engine.run_cycle(instrument or self.engine.state.instrument))
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task

    async def fetch_once(self) -> None:
        await self.engine.run_cycle(self.engine.state.instrument)

    async def _tick_loop(self, interval_ms: int) -> None:
        while True:
            await asyncio.sleep(interval_ms / 1000)
            if not self.schedule.enabled:
                return
            self.trigger()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
