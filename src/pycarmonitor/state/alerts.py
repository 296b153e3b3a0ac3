"""At-most-one obstacle alert with automatic expiry."""

from __future__ import annotations

import itertools
import logging
from datetime import datetime

from pycarmonitor import _constants as const
from pycarmonitor._timers import Scheduler, TimerHandle
from pycarmonitor.models.alert import Alert
from pycarmonitor.render import Renderer

_logger = logging.getLogger(__name__)


class AlertManager:
    """Owns the single visible alert.

    Raising a new alert discards the current one (it is not queued).
    Expiry timers are bound to the alert they were created for.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        renderer: Renderer,
        ttl: float = const.ALERT_TTL_S,
    ) -> None:
        self._scheduler = scheduler
        self._renderer = renderer
        self._ttl = ttl
        self._active: Alert | None = None
        self._expiry: TimerHandle | None = None
        self._ids = itertools.count(1)

    @property
    def active(self) -> Alert | None:
        return self._active

    def raise_alert(self, device_id: int | str, raised_at: datetime) -> Alert:
        if self._active is not None:
            _logger.debug("Replacing active alert #%d", self._active.alert_id)
            self._clear()
        alert = Alert(alert_id=next(self._ids), device_id=device_id, raised_at=raised_at)
        self._active = alert
        self._expiry = self._scheduler.call_later(self._ttl, self._expire, alert.alert_id)
        self._renderer.alert_show(alert)
        return alert

    def dismiss(self) -> bool:
        """Remove the active alert now. Returns whether one was active."""
        if self._active is None:
            return False
        self._clear()
        return True

    def _expire(self, alert_id: int) -> None:
        if self._active is None or self._active.alert_id != alert_id:
            return
        self._expiry = None
        _logger.debug("Alert #%d expired", alert_id)
        self._clear()

    def _clear(self) -> None:
        expiry = self._expiry
        self._expiry = None
        if expiry is not None:
            expiry.cancel()
        self._active = None
        self._renderer.alert_dismiss()
