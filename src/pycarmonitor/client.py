"""High-level async client monitoring a single device."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pycarmonitor import _constants as const
from pycarmonitor._heartbeat import HeartbeatScheduler
from pycarmonitor._reconnect import ReconnectScheduler
from pycarmonitor._timers import Scheduler
from pycarmonitor._transport import Transport, TransportListener, WebSocketTransport
from pycarmonitor.config import MonitorConfig
from pycarmonitor.dispatcher import MessageDispatcher
from pycarmonitor.exceptions import MonitorError, MonitorTransportError
from pycarmonitor.models.alert import Alert
from pycarmonitor.models.connection import ConnectionState
from pycarmonitor.models.messages import (
    ConnectionAck,
    MonitoringData,
    MovementHistoryRequest,
    MovementUpdate,
    ObstacleDetected,
    OutboundMessage,
    PingRequest,
    Pong,
)
from pycarmonitor.models.movement import MonitorStats, MovementRecord
from pycarmonitor.render import LoggingRenderer, Renderer
from pycarmonitor.state.alerts import AlertManager
from pycarmonitor.state.event_log import EventLog

_logger = logging.getLogger(__name__)

TransportFactory = Callable[[MonitorConfig, aiohttp.ClientSession, TransportListener], Transport]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MonitorClient:
    """Real-time monitor for one device over a persistent WebSocket.

    Usage::

        async with MonitorClient(MonitorConfig(endpoint="wss://...")) as client:
            client.start()
            await asyncio.Event().wait()

    Everything runs on the event loop that entered the context: transport
    callbacks, timer callbacks and message handlers each run to completion
    before the next one starts.
    """

    def __init__(
        self,
        config: MonitorConfig,
        *,
        renderer: Renderer | None = None,
        session: aiohttp.ClientSession | None = None,
        scheduler: Scheduler | None = None,
        transport_factory: TransportFactory | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._renderer: Renderer = renderer or LoggingRenderer()
        self._external_session = session is not None
        self._http_session = session
        self._scheduler = scheduler
        self._transport_factory: TransportFactory = transport_factory or WebSocketTransport
        self._clock = clock
        self._transport: Transport | None = None
        self._movement_count = 0

        self._dispatcher = MessageDispatcher()
        self._dispatcher.register(const.MSG_MONITORING_DATA, MonitoringData, self._handle_monitoring_data)
        self._dispatcher.register(const.MSG_MOVEMENT_UPDATE, MovementUpdate, self._handle_movement_update)
        self._dispatcher.register(const.MSG_OBSTACLE_DETECTED, ObstacleDetected, self._handle_obstacle)
        self._dispatcher.register(const.MSG_CONNECTION, ConnectionAck, self._handle_connection_ack)
        self._dispatcher.register(const.MSG_PONG, Pong, self._handle_pong)

        # Built in __aenter__ once a scheduler (the running loop by default) exists.
        self._reconnect: ReconnectScheduler | None = None
        self._heartbeat: HeartbeatScheduler | None = None
        self._log: EventLog | None = None
        self._alerts: AlertManager | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MonitorClient:
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._build(scheduler)
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = self._transport_factory(self._config, self._http_session, _Listener(self))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    def _build(self, scheduler: Scheduler) -> None:
        cfg = self._config
        self._reconnect = ReconnectScheduler(connect=self._connect, scheduler=scheduler, delay=cfg.reconnect_delay)
        self._heartbeat = HeartbeatScheduler(
            scheduler=scheduler,
            is_connected=lambda: self.is_connected,
            poll=self.request_snapshot,
            ping=self.send_ping,
            poll_interval=cfg.poll_interval,
            heartbeat_interval=cfg.heartbeat_interval,
        )
        self._log = EventLog(
            scheduler=scheduler,
            renderer=self._renderer,
            capacity=cfg.log_capacity,
            settle_delay=cfg.settle_delay,
            clock=self._clock,
        )
        self._alerts = AlertManager(scheduler=scheduler, renderer=self._renderer, ttl=cfg.alert_ttl)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def state(self) -> ConnectionState:
        if self._transport is None:
            return ConnectionState.DISCONNECTED
        return self._transport.state

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def movements(self) -> tuple[MovementRecord, ...]:
        """Event log contents, newest first."""
        return self._require_log().records

    @property
    def alert(self) -> Alert | None:
        return self._require_alerts().active

    @property
    def stats(self) -> MonitorStats:
        return MonitorStats(
            movement_count=self._movement_count,
            active_count=self._require_log().active_count,
            connected=self.is_connected,
        )

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect is not None and self._reconnect.pending

    def start(self) -> None:
        """Connect and keep reconnecting until :meth:`stop`."""
        self._require_transport()
        _logger.info("Monitoring device %s via %s", self._config.device_id, self._config.endpoint)
        self._require_reconnect().start()

    async def stop(self) -> None:
        """Stop reconnecting, cancel periodic timers and close the connection."""
        if self._reconnect is not None:
            self._reconnect.stop()
        if self._heartbeat is not None:
            self._heartbeat.stop()
        if self._transport is not None:
            await self._transport.close()

    def request_snapshot(self) -> bool:
        """Ask the server for the device's most recent movements."""
        return self._send(MovementHistoryRequest(device_id=self._config.device_id))

    def send_ping(self) -> bool:
        return self._send(PingRequest())

    def dismiss_alert(self) -> bool:
        """Close the visible alert, as a user would. Returns whether one was visible."""
        return self._require_alerts().dismiss()

    def handle_frame(self, text: str | bytes) -> bool:
        """Feed one raw inbound frame through the dispatcher."""
        return self._dispatcher.dispatch(text)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise MonitorError("Client not initialized. Use 'async with MonitorClient(...) as client:'")
        return self._transport

    def _require_reconnect(self) -> ReconnectScheduler:
        if self._reconnect is None:
            raise MonitorError("Client not initialized. Use 'async with MonitorClient(...) as client:'")
        return self._reconnect

    def _require_log(self) -> EventLog:
        if self._log is None:
            raise MonitorError("Client not initialized. Use 'async with MonitorClient(...) as client:'")
        return self._log

    def _require_alerts(self) -> AlertManager:
        if self._alerts is None:
            raise MonitorError("Client not initialized. Use 'async with MonitorClient(...) as client:'")
        return self._alerts

    def _connect(self) -> None:
        if self._transport is not None:
            self._transport.connect()

    def _send(self, message: OutboundMessage) -> bool:
        transport = self._transport
        if transport is None:
            _logger.warning("Dropping outbound %s: client not initialized", message.type)
            return False
        return transport.send(message.to_wire())

    def _render_stats(self) -> None:
        self._renderer.stats_render(self.stats)

    # ------------------------------------------------------------------
    # Transport events
    # ------------------------------------------------------------------

    def _on_state_changed(self, state: ConnectionState) -> None:
        self._renderer.connection_status_render(state)
        if self._log is not None:
            self._render_stats()

    def _on_opened(self) -> None:
        self._require_reconnect().on_opened()
        if self._heartbeat is not None:
            self._heartbeat.start()
        self.request_snapshot()

    def _on_error(self, error: MonitorTransportError) -> None:
        _logger.warning("Transport error: %s", error)

    def _on_closed(self) -> None:
        if self._heartbeat is not None:
            self._heartbeat.stop()
        if self._reconnect is not None:
            self._reconnect.on_connection_lost()

    # ------------------------------------------------------------------
    # Message handlers
    # ------------------------------------------------------------------

    def _handle_monitoring_data(self, message: MonitoringData) -> None:
        if message.action != const.ACTION_LAST_MOVEMENTS:
            _logger.debug("Ignoring monitoring_data for action=%s", message.action)
            return
        self._require_log().replace_snapshot(message.data, device_id=self._config.device_id)
        self._movement_count = len(message.data)
        self._render_stats()

    def _handle_movement_update(self, message: MovementUpdate) -> None:
        device_id = message.device_id if message.device_id is not None else self._config.device_id
        self._require_log().append_live(
            action_code=message.operation_id,
            device_id=device_id,
            occurred_at=message.timestamp,
        )
        self._movement_count += 1
        self._render_stats()

    def _handle_obstacle(self, message: ObstacleDetected) -> None:
        device_id = message.device_id if message.device_id is not None else self._config.device_id
        raised_at = message.timestamp if message.timestamp is not None else self._clock()
        self._require_alerts().raise_alert(device_id, raised_at)

    def _handle_connection_ack(self, message: ConnectionAck) -> None:
        self._renderer.connection_status_render(self.state)

    def _handle_pong(self, message: Pong) -> None:
        pass


class _Listener:
    """Adapts transport notifications onto the client's private handlers."""

    def __init__(self, client: MonitorClient) -> None:
        self._client = client

    def on_state_changed(self, state: ConnectionState) -> None:
        self._client._on_state_changed(state)

    def on_opened(self) -> None:
        self._client._on_opened()

    def on_message(self, text: str) -> None:
        self._client.handle_frame(text)

    def on_error(self, error: MonitorTransportError) -> None:
        self._client._on_error(error)

    def on_closed(self) -> None:
        self._client._on_closed()
