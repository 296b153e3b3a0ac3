"""Bounded, newest-first log of device movements.

This is the only component allowed to change movement records. It has two
write paths:

* snapshot replace: a historical batch (oldest first, as the server sends
  it) becomes the whole log, reversed so the newest is first, every record
  already settled;
* live append: one in-progress record is prepended and settles after a
  fixed delay. The settle timer is bound to the record's identity, never
  to a position, so bursts of live movements each settle on their own.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from pycarmonitor import _constants as const
from pycarmonitor._timers import Scheduler, TimerHandle
from pycarmonitor.models.actions import MovementAction
from pycarmonitor.models.messages import SnapshotEntry
from pycarmonitor.models.movement import MovementRecord
from pycarmonitor.render import Renderer

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _resolve_code(entry: SnapshotEntry) -> int | None:
    if entry.operation_id is not None:
        return entry.operation_id
    action = MovementAction.from_label(entry.status_texto)
    return None if action is MovementAction.UNKNOWN else int(action)


class EventLog:
    def __init__(
        self,
        *,
        scheduler: Scheduler,
        renderer: Renderer,
        capacity: int = const.LOG_CAPACITY,
        settle_delay: float = const.SETTLE_DELAY_S,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._scheduler = scheduler
        self._renderer = renderer
        self._capacity = capacity
        self._settle_delay = settle_delay
        self._clock = clock
        self._records: list[MovementRecord] = []
        self._settle_handles: dict[int, TimerHandle] = {}
        self._ids = itertools.count(1)
        # Nothing received yet: the view shows the no-data placeholder.
        self._placeholder = True

    def __len__(self) -> int:
        return len(self._records)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def records(self) -> tuple[MovementRecord, ...]:
        """Current records, newest first."""
        return tuple(self._records)

    @property
    def is_placeholder(self) -> bool:
        return self._placeholder

    @property
    def active_count(self) -> int:
        return sum(1 for record in self._records if not record.settled)

    @property
    def pending_settles(self) -> int:
        return len(self._settle_handles)

    def get(self, record_id: int) -> MovementRecord | None:
        for record in self._records:
            if record.record_id == record_id:
                return record
        return None

    def replace_snapshot(
        self,
        entries: Sequence[SnapshotEntry],
        *,
        device_id: int | str,
    ) -> tuple[MovementRecord, ...]:
        """Replace the whole log with a historical batch given oldest first."""
        self._cancel_all_settles()
        newest_first = list(reversed(entries))[: self._capacity]
        self._records = [
            MovementRecord(
                record_id=next(self._ids),
                sequence_label=str(position),
                action_code=_resolve_code(entry),
                label=entry.status_texto or "",
                occurred_at=entry.fecha_hora,
                device_id=device_id,
                settled=True,
            )
            for position, entry in enumerate(newest_first, start=1)
        ]
        self._placeholder = not self._records
        _logger.debug("Snapshot replaced log: %d of %d entries kept", len(self._records), len(entries))
        snapshot = self.records
        self._renderer.log_snapshot_render(snapshot)
        return snapshot

    def append_live(
        self,
        *,
        action_code: int | None,
        device_id: int | str,
        occurred_at: datetime | None = None,
    ) -> MovementRecord:
        """Prepend an in-progress record and schedule its settle timer."""
        if self._placeholder:
            self._placeholder = False
            self._renderer.log_clear()

        action = MovementAction.from_code(action_code)
        record = MovementRecord(
            record_id=next(self._ids),
            sequence_label=const.LIVE_SEQUENCE_LABEL,
            action_code=action_code,
            label=action.label,
            occurred_at=occurred_at if occurred_at is not None else self._clock(),
            device_id=device_id,
            settled=False,
        )
        self._records.insert(0, record)
        while len(self._records) > self._capacity:
            evicted = self._records.pop()
            self._cancel_settle(evicted.record_id)
            _logger.debug("Evicted movement #%d", evicted.record_id)

        self._settle_handles[record.record_id] = self._scheduler.call_later(
            self._settle_delay, self._settle, record.record_id
        )
        self._renderer.log_append_render(record)
        return record

    def _settle(self, record_id: int) -> None:
        self._settle_handles.pop(record_id, None)
        for index, record in enumerate(self._records):
            if record.record_id == record_id:
                break
        else:
            return
        if record.settled:
            return
        self._records[index] = dataclasses.replace(record, settled=True)
        _logger.debug("Movement #%d settled", record_id)
        self._renderer.log_settle_render(record_id)

    def _cancel_settle(self, record_id: int) -> None:
        handle = self._settle_handles.pop(record_id, None)
        if handle is not None:
            handle.cancel()

    def _cancel_all_settles(self) -> None:
        for handle in self._settle_handles.values():
            handle.cancel()
        self._settle_handles.clear()
