"""Custom exception hierarchy for pycarmonitor."""

from __future__ import annotations


class MonitorError(Exception):
    """Base exception for all pycarmonitor errors."""


class MonitorConfigError(MonitorError):
    """Invalid or missing configuration."""


class MonitorTransportError(MonitorError):
    """WebSocket-level failure (connect, send, close or protocol error).

    Always non-fatal: the transport reports it to its listener, drops to
    ``disconnected`` and the reconnect scheduler takes over.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class MalformedMessageError(MonitorError):
    """Inbound frame is not JSON, not an object, or lacks a valid ``type``.

    Raised by the parsing layer only; the dispatcher drops the frame with a
    warning and never lets this escape.
    """

    def __init__(self, message: str, *, raw: str = "") -> None:
        self.raw = raw
        super().__init__(message)


class UnknownMessageTypeError(MonitorError):
    """Inbound frame carries a ``type`` with no registered handler.

    Treated as forward compatibility: the dispatcher ignores such frames.
    """

    def __init__(self, message: str, *, message_type: str = "") -> None:
        self.message_type = message_type
        super().__init__(message)
