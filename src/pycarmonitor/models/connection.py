"""Connection state enum."""

from __future__ import annotations

from enum import StrEnum


class ConnectionState(StrEnum):
    """Transport connection state.

    Owned by the transport session; every other component only reads it.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
