"""pycarmonitor - Async real-time monitor for a remote-controlled device."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycarmonitor")
except PackageNotFoundError:
    __version__ = "0+local"
from pycarmonitor.client import MonitorClient
from pycarmonitor.config import MonitorConfig
from pycarmonitor.exceptions import (
    MalformedMessageError,
    MonitorConfigError,
    MonitorError,
    MonitorTransportError,
    UnknownMessageTypeError,
)
from pycarmonitor.models import (
    Alert,
    ConnectionState,
    MonitorStats,
    MovementAction,
    MovementRecord,
    describe_action,
)
from pycarmonitor.render import LoggingRenderer, NullRenderer, Renderer

__all__ = [
    "__version__",
    "Alert",
    "ConnectionState",
    "LoggingRenderer",
    "MalformedMessageError",
    "MonitorClient",
    "MonitorConfig",
    "MonitorConfigError",
    "MonitorError",
    "MonitorStats",
    "MonitorTransportError",
    "MovementAction",
    "MovementRecord",
    "NullRenderer",
    "Renderer",
    "UnknownMessageTypeError",
    "describe_action",
]
