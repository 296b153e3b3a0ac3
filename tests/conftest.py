from __future__ import annotations

import heapq
import itertools
import json
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp
import pytest

from pycarmonitor._transport import TransportListener
from pycarmonitor.config import MonitorConfig
from pycarmonitor.exceptions import MonitorTransportError
from pycarmonitor.models.connection import ConnectionState


class ManualHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self._callback = callback
        self._args = args
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def run(self) -> None:
        self.fired = True
        self._callback(*self._args)


class ManualScheduler:
    """Logical clock implementing ``call_later``; time only moves on ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self.now = when
            handle.run()
        self.now = target

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled() and not handle.fired)


class FakeTransport:
    """In-memory transport driven explicitly by tests."""

    def __init__(self, config: MonitorConfig, http_session: Any, listener: TransportListener) -> None:
        self.config = config
        self.listener = listener
        self._state = ConnectionState.DISCONNECTED
        self.sent: list[dict[str, Any]] = []
        self.connect_calls = 0
        self.close_calls = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    def connect(self) -> None:
        self.connect_calls += 1
        if self._state is not ConnectionState.DISCONNECTED:
            return
        self._set_state(ConnectionState.CONNECTING)

    def send(self, message: Mapping[str, Any]) -> bool:
        if self._state is not ConnectionState.CONNECTED:
            return False
        self.sent.append(dict(message))
        return True

    async def close(self) -> None:
        self.close_calls += 1
        self.drop()

    # Test controls -------------------------------------------------

    def open(self) -> None:
        self._set_state(ConnectionState.CONNECTED)
        self.listener.on_opened()

    def deliver(self, frame: Mapping[str, Any] | str) -> None:
        text = frame if isinstance(frame, str) else json.dumps(frame)
        self.listener.on_message(text)

    def drop(self) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._set_state(ConnectionState.DISCONNECTED)
        self.listener.on_closed()

    def fail(self, message: str = "boom") -> None:
        self._set_state(ConnectionState.DISCONNECTED)
        self.listener.on_error(MonitorTransportError(message))
        self.listener.on_closed()

    def sent_types(self) -> list[str]:
        return [str(m.get("type")) for m in self.sent]

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        self._state = state
        self.listener.on_state_changed(state)


class RecordingRenderer:
    """Collects every render effect as ``(name, payload)`` tuples."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def connection_status_render(self, state: ConnectionState) -> None:
        self.calls.append(("status", state))

    def log_snapshot_render(self, records: Any) -> None:
        self.calls.append(("snapshot", list(records)))

    def log_append_render(self, record: Any) -> None:
        self.calls.append(("append", record))

    def log_settle_render(self, record_id: int) -> None:
        self.calls.append(("settle", record_id))

    def log_clear(self) -> None:
        self.calls.append(("clear", None))

    def alert_show(self, alert: Any) -> None:
        self.calls.append(("alert_show", alert))

    def alert_dismiss(self) -> None:
        self.calls.append(("alert_dismiss", None))

    def stats_render(self, stats: Any) -> None:
        self.calls.append(("stats", stats))


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def transports() -> list[FakeTransport]:
    return []


@pytest.fixture
def transport_factory(transports: list[FakeTransport]) -> Callable[..., FakeTransport]:
    def _factory(config: MonitorConfig, http_session: aiohttp.ClientSession, listener: TransportListener) -> FakeTransport:
        transport = FakeTransport(config, http_session, listener)
        transports.append(transport)
        return transport

    return _factory
