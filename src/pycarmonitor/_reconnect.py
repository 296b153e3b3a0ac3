"""Fixed-delay reconnection policy.

Retries forever with a constant delay: availability over restraint. At
most one retry is ever pending; repeated loss notifications (an error is
always followed by a close) collapse onto the same timer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from pycarmonitor._timers import Scheduler, TimerHandle

_logger = logging.getLogger(__name__)


class ReconnectPhase(StrEnum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    WAITING = "waiting"


class ReconnectScheduler:
    def __init__(
        self,
        *,
        connect: Callable[[], None],
        scheduler: Scheduler,
        delay: float,
    ) -> None:
        self._connect = connect
        self._scheduler = scheduler
        self._delay = delay
        self._phase = ReconnectPhase.IDLE
        self._handle: TimerHandle | None = None
        self._enabled = False
        self._attempts = 0

    @property
    def phase(self) -> ReconnectPhase:
        return self._phase

    @property
    def pending(self) -> bool:
        """Whether a retry timer is currently scheduled."""
        return self._handle is not None

    @property
    def attempts(self) -> int:
        """Retries issued since the last successful open."""
        return self._attempts

    def start(self) -> None:
        """Enable reconnection and issue the initial connect request."""
        self._enabled = True
        self._cancel_pending()
        self._phase = ReconnectPhase.ATTEMPTING
        self._connect()

    def stop(self) -> None:
        """Cancel any pending retry and stop reacting to connection loss."""
        self._enabled = False
        self._cancel_pending()
        self._phase = ReconnectPhase.IDLE

    def on_opened(self) -> None:
        self._cancel_pending()
        self._phase = ReconnectPhase.IDLE
        self._attempts = 0

    def on_connection_lost(self) -> None:
        """Schedule a single retry unless one is already pending."""
        if not self._enabled:
            return
        if self._handle is not None:
            _logger.debug("Reconnect already scheduled; ignoring duplicate loss notification")
            return
        _logger.info("Connection lost; reconnecting in %.1fs", self._delay)
        self._phase = ReconnectPhase.WAITING
        self._handle = self._scheduler.call_later(self._delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        if not self._enabled:
            return
        self._attempts += 1
        self._phase = ReconnectPhase.ATTEMPTING
        _logger.debug("Reconnect attempt %d", self._attempts)
        self._connect()

    def _cancel_pending(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()
