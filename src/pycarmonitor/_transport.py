"""WebSocket transport session built on aiohttp."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pycarmonitor._constants import preview
from pycarmonitor.config import MonitorConfig
from pycarmonitor.exceptions import MonitorTransportError
from pycarmonitor.models.connection import ConnectionState

_logger = logging.getLogger(__name__)


class TransportListener(Protocol):
    """Receives lifecycle and inbound-frame notifications from a transport.

    All callbacks run on the event loop, one at a time, in the order the
    underlying events happened. ``on_error`` is always followed by
    ``on_closed``.
    """

    def on_state_changed(self, state: ConnectionState) -> None:
        ...

    def on_opened(self) -> None:
        ...

    def on_message(self, text: str) -> None:
        ...

    def on_error(self, error: MonitorTransportError) -> None:
        ...

    def on_closed(self) -> None:
        ...


class Transport(Protocol):
    """Structural transport interface used by :class:`MonitorClient`.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`WebSocketTransport`) concrete.
    """

    @property
    def state(self) -> ConnectionState:
        ...

    def connect(self) -> None:
        ...

    def send(self, message: Mapping[str, Any]) -> bool:
        ...

    async def close(self) -> None:
        ...


class WebSocketTransport:
    """Owns at most one WebSocket connection at a time.

    ``connect()`` only starts the connection; the outcome is reported to the
    listener. Inbound text frames are handed to ``listener.on_message`` from
    a single reader task, so the listener sees them strictly in arrival
    order. Outbound frames are queued and written by a single writer task.
    """

    def __init__(
        self,
        config: MonitorConfig,
        http_session: aiohttp.ClientSession,
        listener: TransportListener,
    ) -> None:
        self._config = config
        self._http = http_session
        self._listener = listener
        self._state = ConnectionState.DISCONNECTED
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task[None] | None = None
        self._writer: asyncio.Task[None] | None = None
        self._outbox: asyncio.Queue[str] = asyncio.Queue()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Start a connection attempt; a no-op unless disconnected."""
        if self._state is not ConnectionState.DISCONNECTED:
            _logger.debug("connect() ignored in state=%s", self._state)
            return
        self._set_state(ConnectionState.CONNECTING)
        self._reader = asyncio.get_running_loop().create_task(self._run(), name="pycarmonitor-ws-reader")

    def send(self, message: Mapping[str, Any]) -> bool:
        """Queue *message* as a JSON text frame.

        Returns ``False`` (and logs) instead of raising when there is no
        open connection or the message cannot be encoded.
        """
        if self._state is not ConnectionState.CONNECTED or self._ws is None:
            _logger.warning("Dropping outbound %s: not connected (state=%s)", message.get("type"), self._state)
            return False
        try:
            text = json.dumps(message, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError):
            _logger.warning("Dropping outbound %s: not JSON serializable", message.get("type"), exc_info=True)
            return False
        self._outbox.put_nowait(text)
        return True

    async def close(self) -> None:
        """Close the current connection, if any. Safe to call repeatedly."""
        reader = self._reader
        self._reader = None
        ws = self._ws
        if ws is not None and not ws.closed:
            with contextlib.suppress(aiohttp.ClientError, OSError, asyncio.TimeoutError):
                await ws.close()
        if reader is not None and not reader.done():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
        # Reader already finished (or never started): make sure the state is final.
        if self._state is not ConnectionState.DISCONNECTED:
            self._finish()

    # ------------------------------------------------------------------
    # Connection task
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        endpoint = self._config.endpoint
        _logger.debug("Connecting to %s", endpoint)
        try:
            async with asyncio.timeout(self._config.connect_timeout):
                ws = await self._http.ws_connect(endpoint, autoping=True)
        except asyncio.CancelledError:
            self._finish()
            raise
        except (aiohttp.ClientError, OSError, TimeoutError) as exc:
            self._fail(MonitorTransportError(f"Connection to {endpoint} failed: {exc!r}", endpoint=endpoint))
            return

        self._ws = ws
        self._outbox = asyncio.Queue()
        self._writer = asyncio.get_running_loop().create_task(self._write_loop(ws), name="pycarmonitor-ws-writer")
        self._set_state(ConnectionState.CONNECTED)
        _logger.info("Connected to %s", endpoint)
        self._notify("on_opened")

        error: MonitorTransportError | None = None
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._notify("on_message", msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    try:
                        text = msg.data.decode("utf-8")
                    except UnicodeDecodeError:
                        _logger.warning("Dropping non UTF-8 binary frame (%d bytes)", len(msg.data))
                        continue
                    self._notify("on_message", text)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    error = MonitorTransportError(f"WebSocket error: {ws.exception()}", endpoint=endpoint)
                    break
        except asyncio.CancelledError:
            self._finish()
            raise
        except (aiohttp.ClientError, OSError) as exc:
            error = MonitorTransportError(f"WebSocket read failed: {exc}", endpoint=endpoint)

        if error is not None:
            self._fail(error)
        else:
            _logger.info("Connection to %s closed (code=%s)", endpoint, ws.close_code)
            self._finish()

    async def _write_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while True:
            text = await self._outbox.get()
            try:
                await ws.send_str(text)
            except (aiohttp.ClientError, ConnectionError, RuntimeError):
                _logger.warning("WebSocket send failed", exc_info=True)
                with contextlib.suppress(aiohttp.ClientError, OSError, asyncio.TimeoutError):
                    await ws.close()
                return
            _logger.debug("Sent %s", preview(text))

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _fail(self, error: MonitorTransportError) -> None:
        _logger.warning("%s", error)
        self._teardown()
        self._set_state(ConnectionState.DISCONNECTED)
        self._notify("on_error", error)
        self._notify("on_closed")

    def _finish(self) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._teardown()
        self._set_state(ConnectionState.DISCONNECTED)
        self._notify("on_closed")

    def _teardown(self) -> None:
        writer = self._writer
        self._writer = None
        if writer is not None and not writer.done():
            writer.cancel()
        self._ws = None

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        _logger.debug("Connection state %s -> %s", self._state, state)
        self._state = state
        self._notify("on_state_changed", state)

    def _notify(self, callback: str, *args: Any) -> None:
        try:
            getattr(self._listener, callback)(*args)
        except Exception:
            _logger.exception("Transport listener %s failed", callback)
