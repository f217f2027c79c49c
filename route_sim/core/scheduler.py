"""Fixed-period tick scheduler.

This module defines the TickScheduler class, a SimPy process that calls a
tick callback every period. With a simpy.rt.RealtimeEnvironment whose factor
is 0.001 one simulation time unit is one wall-clock millisecond.
"""

import logging
from typing import Any, Callable, Generator, Optional

import simpy

logger = logging.getLogger(__name__)


class TickScheduler:
    """Periodic driver for the forwarding engine.

    Attributes:
        env: SimPy environment.
        period: Time between two ticks.
        on_tick: Callback invoked with the current time on every tick.
        ticks: Number of ticks fired since the scheduler was created.
    """

    def __init__(
        self,
        env: simpy.Environment,
        period: float,
        on_tick: Callable[[float], Any],
    ) -> None:
        if period <= 0:
            raise ValueError(f"Tick period must be positive, got {period}")
        self.env = env
        self.period = period
        self.on_tick = on_tick
        self.ticks = 0
        self._process: Optional[simpy.Process] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> simpy.Process:
        """Start ticking.

        Returns:
            The SimPy process driving the ticks.
        """
        if self._running:
            raise RuntimeError("Tick scheduler is already running")
        self._running = True
        self._process = self.env.process(self._loop())
        logger.info("Tick scheduler started (period=%s)", self.period)
        return self._process

    def stop(self) -> None:
        """Stop ticking and release the pending timer.

        Safe to call more than once, and from inside a tick callback.
        """
        if not self._running:
            return
        self._running = False
        process = self._process
        if (
            process is not None
            and process.is_alive
            and self.env.active_process is not process
        ):
            process.interrupt("stopped")
        logger.info("Tick scheduler stopped after %d ticks", self.ticks)

    def _is_current(self, process: Optional[simpy.Process]) -> bool:
        return self._running and self._process is process

    def _loop(self) -> Generator[simpy.events.Event, Any, None]:
        process = self.env.active_process
        try:
            while self._is_current(process):
                yield self.env.timeout(self.period)
                if not self._is_current(process):
                    break
                self.ticks += 1
                self.on_tick(self.env.now)
        except simpy.Interrupt:
            pass
        finally:
            # A restart may already have replaced this process.
            if self._process is process:
                self._running = False
                self._process = None
