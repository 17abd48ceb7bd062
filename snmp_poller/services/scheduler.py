"""
Poll scheduler.

Runs one poll cycle at a time and waits `interval` seconds between
cycles. The wait is interruptible: stop() ends it immediately.
"""

import asyncio
import enum
import logging
from typing import Optional


logger = logging.getLogger(__name__)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    WAITING = "waiting"
    STOPPED = "stopped"


class Scheduler:
    """
    Single-flight interval loop around a PollCycleExecutor.

    A new cycle starts only once the previous one has completed and the
    interval has elapsed. A stop request never interrupts a cycle in
    progress; it ends the loop once that cycle returns.
    """

    def __init__(self, executor, interval: float, max_cycles: Optional[int] = None):
        self.executor = executor
        self.interval = interval
        self.max_cycles = max_cycles
        self.state = SchedulerState.IDLE
        self.cycles = 0
        self._stop_event = asyncio.Event()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def stop(self):
        """Request the loop to end; safe to call from a signal handler."""
        if not self._stop_event.is_set():
            logger.info("Scheduler stop requested")
        self._stop_event.set()

    async def _wait_interval(self) -> bool:
        """Wait for the interval; returns True when stopped during the wait."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            return True
        except asyncio.TimeoutError:
            return False

    async def run(self):
        """Run poll cycles until stop() is called."""
        if self.state is SchedulerState.STOPPED:
            raise RuntimeError("scheduler has already been stopped")

        logger.info(f"Scheduler started, polling every {self.interval}s")
        try:
            while not self.stop_requested:
                self.state = SchedulerState.RUNNING
                try:
                    await self.executor.run_cycle()
                except Exception as e:
                    logger.error(f"Poll cycle failed: {e}", exc_info=True)
                self.cycles += 1

                if self.max_cycles is not None and self.cycles >= self.max_cycles:
                    break

                self.state = SchedulerState.WAITING
                if await self._wait_interval():
                    break
        finally:
            self.state = SchedulerState.STOPPED
            logger.info(f"Scheduler stopped after {self.cycles} cycles")
