from __future__ import annotations

import json
import logging

import pytest

from pycarmonitor.dispatcher import MessageDispatcher, parse_frame
from pycarmonitor.exceptions import MalformedMessageError, UnknownMessageTypeError
from pycarmonitor.models.messages import MovementUpdate, Pong


def _dispatcher(seen: list[object]) -> MessageDispatcher:
    dispatcher = MessageDispatcher()
    dispatcher.register("movement_update", MovementUpdate, seen.append)
    dispatcher.register("pong", Pong, seen.append)
    return dispatcher


@pytest.mark.parametrize(
    "frame",
    [
        "not json",
        "[1, 2, 3]",
        '"just a string"',
        "{}",
        '{"type": 5}',
        '{"type": "  "}',
    ],
)
def test_parse_frame_rejects_malformed(frame: str) -> None:
    with pytest.raises(MalformedMessageError) as exc_info:
        parse_frame(frame)
    assert exc_info.value.raw == frame


def test_parse_frame_accepts_bytes() -> None:
    assert parse_frame(b'{"type": "pong"}') == {"type": "pong"}


def test_dispatch_routes_validated_model() -> None:
    seen: list[object] = []
    dispatcher = _dispatcher(seen)

    handled = dispatcher.dispatch(json.dumps({"type": "movement_update", "deviceId": 1, "operationId": 2}))

    assert handled is True
    assert len(seen) == 1
    message = seen[0]
    assert isinstance(message, MovementUpdate)
    assert message.operation_id == 2


def test_dispatch_preserves_arrival_order() -> None:
    seen: list[object] = []
    dispatcher = _dispatcher(seen)

    for op in (3, 1, 2):
        dispatcher.dispatch(json.dumps({"type": "movement_update", "operationId": op}))

    assert [m.operation_id for m in seen] == [3, 1, 2]  # type: ignore[attr-defined]


def test_malformed_frame_dropped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    seen: list[object] = []
    dispatcher = _dispatcher(seen)

    with caplog.at_level(logging.WARNING, logger="pycarmonitor.dispatcher"):
        assert dispatcher.dispatch("{broken") is False

    assert seen == []
    assert "malformed" in caplog.text


def test_invalid_payload_for_known_type_is_malformed() -> None:
    seen: list[object] = []
    dispatcher = _dispatcher(seen)

    with pytest.raises(MalformedMessageError):
        dispatcher.route({"type": "movement_update", "operationId": "forward"})
    assert dispatcher.dispatch(json.dumps({"type": "movement_update", "operationId": "forward"})) is False
    assert seen == []


def test_unknown_type_ignored_without_warning(caplog: pytest.LogCaptureFixture) -> None:
    seen: list[object] = []
    dispatcher = _dispatcher(seen)

    with pytest.raises(UnknownMessageTypeError):
        dispatcher.route({"type": "battery_level"})

    with caplog.at_level(logging.DEBUG, logger="pycarmonitor.dispatcher"):
        assert dispatcher.dispatch('{"type": "battery_level", "value": 80}') is False

    assert seen == []
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_dispatcher_keeps_working_after_bad_frames() -> None:
    seen: list[object] = []
    dispatcher = _dispatcher(seen)

    dispatcher.dispatch("garbage")
    dispatcher.dispatch('{"type": "mystery"}')
    dispatcher.dispatch('{"type": "pong"}')

    assert len(seen) == 1
    assert isinstance(seen[0], Pong)


@pytest.mark.parametrize("timestamp", ["Infinity", "-Infinity", "NaN", "1e300", "1e20", '"1e300"'])
def test_out_of_range_timestamp_is_dropped(timestamp: str) -> None:
    seen: list[object] = []
    dispatcher = _dispatcher(seen)
    frame = f'{{"type": "movement_update", "deviceId": 1, "operationId": 1, "timestamp": {timestamp}}}'

    with pytest.raises(MalformedMessageError):
        dispatcher.route(json.loads(frame))
    assert dispatcher.dispatch(frame) is False
    assert seen == []
