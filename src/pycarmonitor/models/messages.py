"""Wire models for inbound and outbound frames."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from pycarmonitor import _constants as const
from pycarmonitor.models._base import MonitorBaseModel, MonitorTimestamp

# ------------------------------------------------------------------
# Inbound
# ------------------------------------------------------------------


class InboundMessage(MonitorBaseModel):
    """Any inbound frame; ``type`` is the dispatch discriminant."""

    type: str


class SnapshotEntry(MonitorBaseModel):
    """One historical movement inside a ``monitoring_data`` batch."""

    status_texto: str | None = None
    """Server label of the action (e.g. ``"Adelante"``)."""

    fecha_hora: MonitorTimestamp = None
    """When the movement happened."""

    operation_id: int | None = None


class MonitoringData(InboundMessage):
    """Response to a monitoring request, tagged with the requesting action."""

    action: str | None = None
    data: list[SnapshotEntry] = Field(default_factory=list)


class MovementUpdate(InboundMessage):
    """A movement the device is executing right now."""

    device_id: int | str | None = None
    operation_id: int | None = None
    timestamp: MonitorTimestamp = None


class ObstacleDetected(InboundMessage):
    """The device reported an obstacle in its path."""

    device_id: int | str | None = None
    timestamp: MonitorTimestamp = None


class ConnectionAck(InboundMessage):
    """Server greeting sent after the socket opens."""

    message: str | None = None


class Pong(InboundMessage):
    """Reply to a ``ping`` keep-alive."""


# ------------------------------------------------------------------
# Outbound
# ------------------------------------------------------------------


class OutboundMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    type: str

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class MovementHistoryRequest(OutboundMessage):
    """Ask the server for the device's most recent movements."""

    type: Literal["monitoring"] = const.MSG_MONITORING
    action: str = const.ACTION_LAST_MOVEMENTS
    device_id: int | str = Field(serialization_alias="deviceId")


class PingRequest(OutboundMessage):
    type: Literal["ping"] = const.MSG_PING
