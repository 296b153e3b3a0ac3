"""Data models for the device monitor."""

from pycarmonitor.models._base import MonitorBaseModel, MonitorTimestamp, parse_timestamp
from pycarmonitor.models.actions import MovementAction, describe_action
from pycarmonitor.models.alert import Alert
from pycarmonitor.models.connection import ConnectionState
from pycarmonitor.models.messages import (
    ConnectionAck,
    InboundMessage,
    MonitoringData,
    MovementHistoryRequest,
    MovementUpdate,
    ObstacleDetected,
    OutboundMessage,
    PingRequest,
    Pong,
    SnapshotEntry,
)
from pycarmonitor.models.movement import MonitorStats, MovementRecord

__all__ = [
    "Alert",
    "ConnectionAck",
    "ConnectionState",
    "InboundMessage",
    "MonitorBaseModel",
    "MonitorStats",
    "MonitorTimestamp",
    "MonitoringData",
    "MovementAction",
    "MovementHistoryRequest",
    "MovementRecord",
    "MovementUpdate",
    "ObstacleDetected",
    "OutboundMessage",
    "PingRequest",
    "Pong",
    "SnapshotEntry",
    "describe_action",
    "parse_timestamp",
]
