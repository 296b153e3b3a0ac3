"""Periodic data refresh and keep-alive while connected."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pycarmonitor._timers import PeriodicTimer, Scheduler

_logger = logging.getLogger(__name__)


class HeartbeatScheduler:
    """Runs the poll and heartbeat timers for the lifetime of one connection.

    Both ticks are also gated on *is_connected* at fire time, so a tick that
    races a disconnect is dropped instead of hitting a dead transport.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        is_connected: Callable[[], bool],
        poll: Callable[[], None],
        ping: Callable[[], None],
        poll_interval: float,
        heartbeat_interval: float,
    ) -> None:
        self._poll_timer = PeriodicTimer(scheduler, poll_interval, poll, gate=is_connected, name="poll")
        self._heartbeat_timer = PeriodicTimer(
            scheduler, heartbeat_interval, ping, gate=is_connected, name="heartbeat"
        )

    @property
    def is_running(self) -> bool:
        return self._poll_timer.is_running or self._heartbeat_timer.is_running

    def start(self) -> None:
        _logger.debug(
            "Starting poll (every %.1fs) and heartbeat (every %.1fs) timers",
            self._poll_timer.interval,
            self._heartbeat_timer.interval,
        )
        self._poll_timer.start()
        self._heartbeat_timer.start()

    def stop(self) -> None:
        if self.is_running:
            _logger.debug("Stopping poll and heartbeat timers")
        self._poll_timer.stop()
        self._heartbeat_timer.stop()
