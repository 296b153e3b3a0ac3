"""Cancellable timer abstraction.

Every delayed action in the client (reconnect retries, periodic polls,
settle and alert expiry) goes through a :class:`Scheduler`. The running
asyncio event loop satisfies the protocol as-is; tests inject a logical
clock instead so no test waits on wall-clock time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Handle returned by :meth:`Scheduler.call_later`."""

    def cancel(self) -> None:
        ...

    def cancelled(self) -> bool:
        ...


class Scheduler(Protocol):
    """Anything that can run a callback once after a delay.

    ``asyncio.AbstractEventLoop`` implements this protocol.
    """

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...


class PeriodicTimer:
    """Fixed-interval timer that re-arms itself after every tick.

    The first tick fires one full *interval* after :meth:`start`. The
    optional *gate* is evaluated at fire time: when it returns ``False``
    the tick is skipped (but the timer keeps running).
    """

    def __init__(
        self,
        scheduler: Scheduler,
        interval: float,
        callback: Callable[[], None],
        *,
        gate: Callable[[], bool] | None = None,
        name: str = "timer",
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._scheduler = scheduler
        self._interval = interval
        self._callback = callback
        self._gate = gate
        self._name = name
        self._handle: TimerHandle | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Arm the timer; a no-op when already running."""
        if self._handle is not None:
            return
        self._arm()

    def stop(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()

    def _arm(self) -> None:
        self._handle = self._scheduler.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._handle is None:
            return
        self._arm()
        if self._gate is not None and not self._gate():
            _logger.debug("%s tick skipped (gate closed)", self._name)
            return
        try:
            self._callback()
        except Exception:
            _logger.warning("%s tick failed", self._name, exc_info=True)
