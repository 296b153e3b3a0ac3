"""Rendering collaborator interface.

The client never reads rendering state back; it only emits effects. Any
UI (terminal, web bridge, dashboard) plugs in by implementing
:class:`Renderer`. :class:`LoggingRenderer` is the default and writes every
effect to the ``pycarmonitor.render`` logger.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from pycarmonitor.models.alert import Alert
from pycarmonitor.models.connection import ConnectionState
from pycarmonitor.models.movement import MonitorStats, MovementRecord

_logger = logging.getLogger(__name__)

CONNECTION_STATUS_TEXT: dict[ConnectionState, str] = {
    ConnectionState.CONNECTED: "🟢 CONECTADO - Monitoreo en tiempo real",
    ConnectionState.CONNECTING: "🟡 CONECTANDO...",
    ConnectionState.DISCONNECTED: "🔴 DESCONECTADO - Reconectando...",
}

NO_DATA_TEXT = "No hay movimientos registrados"


class Renderer(Protocol):
    def connection_status_render(self, state: ConnectionState) -> None:
        ...

    def log_snapshot_render(self, records: Sequence[MovementRecord]) -> None:
        """Replace the whole log view; an empty sequence shows the no-data placeholder."""
        ...

    def log_append_render(self, record: MovementRecord) -> None:
        ...

    def log_settle_render(self, record_id: int) -> None:
        ...

    def log_clear(self) -> None:
        """Remove the no-data placeholder before the first live row."""
        ...

    def alert_show(self, alert: Alert) -> None:
        ...

    def alert_dismiss(self) -> None:
        ...

    def stats_render(self, stats: MonitorStats) -> None:
        ...


def format_record(record: MovementRecord) -> str:
    status = "Completado" if record.settled else "En ejecución"
    when = record.occurred_at.isoformat() if record.occurred_at is not None else "-"
    return f"[{record.sequence_label}] {record.display_text} | {status} | {when} | Dispositivo {record.device_id}"


class LoggingRenderer:
    """Renders every effect as a log line."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def connection_status_render(self, state: ConnectionState) -> None:
        self._logger.info("%s", CONNECTION_STATUS_TEXT.get(state, str(state)))

    def log_snapshot_render(self, records: Sequence[MovementRecord]) -> None:
        if not records:
            self._logger.info("%s", NO_DATA_TEXT)
            return
        for record in records:
            self._logger.info("%s", format_record(record))

    def log_append_render(self, record: MovementRecord) -> None:
        self._logger.info("%s", format_record(record))

    def log_settle_render(self, record_id: int) -> None:
        self._logger.debug("Movement #%d completed", record_id)

    def log_clear(self) -> None:
        self._logger.debug("Clearing no-data placeholder")

    def alert_show(self, alert: Alert) -> None:
        self._logger.warning(
            "🚨 OBSTÁCULO DETECTADO dispositivo=%s hora=%s",
            alert.device_id,
            alert.raised_at.isoformat(),
        )

    def alert_dismiss(self) -> None:
        self._logger.debug("Obstacle alert cleared")

    def stats_render(self, stats: MonitorStats) -> None:
        self._logger.debug(
            "movements=%d active=%d online=%s",
            stats.movement_count,
            stats.active_count,
            stats.connected,
        )


class NullRenderer:
    """Ignores every effect."""

    def connection_status_render(self, state: ConnectionState) -> None:
        pass

    def log_snapshot_render(self, records: Sequence[MovementRecord]) -> None:
        pass

    def log_append_render(self, record: MovementRecord) -> None:
        pass

    def log_settle_render(self, record_id: int) -> None:
        pass

    def log_clear(self) -> None:
        pass

    def alert_show(self, alert: Alert) -> None:
        pass

    def alert_dismiss(self) -> None:
        pass

    def stats_render(self, stats: MonitorStats) -> None:
        pass
