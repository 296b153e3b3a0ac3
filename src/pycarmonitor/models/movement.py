"""Event log records and derived statistics."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from pycarmonitor.models.actions import describe_action


@dataclass(frozen=True, slots=True)
class MovementRecord:
    """One row of the event log.

    ``record_id`` is a stable identity assigned by the log; it survives
    reordering and is what settle timers bind to. Records are immutable:
    settling swaps in a copy with ``settled=True``.
    """

    record_id: int
    sequence_label: str
    action_code: int | None
    label: str
    occurred_at: datetime | None
    device_id: int | str
    settled: bool

    @property
    def display_text(self) -> str:
        return describe_action(self.action_code, self.label)


class MonitorStats(BaseModel):
    """Summary counters shown next to the event log."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    movement_count: int = Field(default=0, ge=0)
    """Movements seen: snapshot size plus live movements since."""

    active_count: int = Field(default=0, ge=0)
    """Unsettled (in progress) records currently in the log."""

    connected: bool = False
