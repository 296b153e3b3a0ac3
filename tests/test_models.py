"""Tests for wire models, timestamps and the action enumeration."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pycarmonitor.models._base import parse_timestamp
from pycarmonitor.models.actions import MovementAction, describe_action
from pycarmonitor.models.messages import (
    MonitoringData,
    MovementHistoryRequest,
    MovementUpdate,
    ObstacleDetected,
    PingRequest,
)

# ------------------------------------------------------------------
# MovementAction
# ------------------------------------------------------------------


class TestMovementAction:
    def test_lookup_by_code_and_label_agree(self) -> None:
        for action in MovementAction:
            if action is MovementAction.UNKNOWN:
                continue
            assert MovementAction.from_code(int(action)) is action
            assert MovementAction.from_label(action.label) is action

    def test_unknown_code_falls_back(self) -> None:
        assert MovementAction(99) is MovementAction.UNKNOWN
        assert MovementAction.from_code(None) is MovementAction.UNKNOWN

    def test_label_lookup_ignores_case_and_whitespace(self) -> None:
        assert MovementAction.from_label("  giro 90° DERECHA ") is MovementAction.TURN_90_RIGHT

    def test_codes_cover_one_to_fifteen(self) -> None:
        codes = sorted(int(a) for a in MovementAction if a is not MovementAction.UNKNOWN)
        assert codes == list(range(1, 16))


class TestDescribeAction:
    def test_known_code(self) -> None:
        assert describe_action(1) == "🔼 ADELANTE"

    def test_known_label(self) -> None:
        assert describe_action(label="Bajar Velocidad") == "🐢 BAJAR VELOCIDAD"

    def test_code_wins_over_label(self) -> None:
        assert describe_action(2, "Adelante") == "🔽 ATRÁS"

    def test_unknown_label_is_shown_as_received(self) -> None:
        assert describe_action(label="Bailar") == "Bailar"

    def test_unknown_code(self) -> None:
        assert describe_action(42) == "Operación 42"

    def test_nothing_known(self) -> None:
        assert describe_action() == ""


# ------------------------------------------------------------------
# Timestamps
# ------------------------------------------------------------------


class TestParseTimestamp:
    def test_iso_string_with_z(self) -> None:
        assert parse_timestamp("2025-11-20T10:15:00Z") == datetime(2025, 11, 20, 10, 15, tzinfo=UTC)

    def test_naive_iso_string_is_utc(self) -> None:
        assert parse_timestamp("2025-11-20 10:15:00") == datetime(2025, 11, 20, 10, 15, tzinfo=UTC)

    def test_epoch_seconds_and_millis(self) -> None:
        expected = datetime(2025, 1, 1, tzinfo=UTC)
        assert parse_timestamp(1735689600) == expected
        assert parse_timestamp(1735689600000) == expected
        assert parse_timestamp("1735689600000") == expected

    def test_none(self) -> None:
        assert parse_timestamp(None) is None

    @pytest.mark.parametrize(
        "value",
        ["yesterday", float("inf"), float("-inf"), float("nan"), 1e300, 1e20, "1e300", 10**400, True],
    )
    def test_garbage_raises(self, value: object) -> None:
        with pytest.raises(ValueError):
            parse_timestamp(value)


# ------------------------------------------------------------------
# Inbound
# ------------------------------------------------------------------


class TestInboundModels:
    def test_monitoring_data(self) -> None:
        msg = MonitoringData.model_validate(
            {
                "type": "monitoring_data",
                "action": "get_last_10_movements",
                "data": [
                    {"status_texto": "Adelante", "fecha_hora": "2025-11-20T10:15:00Z"},
                    {"status_texto": "Detener", "fecha_hora": "2025-11-20T10:16:00Z", "operationId": 3},
                ],
            }
        )
        assert msg.action == "get_last_10_movements"
        assert [e.status_texto for e in msg.data] == ["Adelante", "Detener"]
        assert msg.data[0].operation_id is None
        assert msg.data[1].operation_id == 3
        assert msg.data[1].fecha_hora == datetime(2025, 11, 20, 10, 16, tzinfo=UTC)

    def test_monitoring_data_null_batch_is_empty(self) -> None:
        msg = MonitoringData.model_validate({"type": "monitoring_data", "action": "x", "data": None})
        assert msg.data == []

    def test_movement_update_camel_case(self) -> None:
        msg = MovementUpdate.model_validate(
            {"type": "movement_update", "deviceId": 1, "operationId": 4, "timestamp": 1735689600000}
        )
        assert msg.device_id == 1
        assert msg.operation_id == 4
        assert msg.timestamp == datetime(2025, 1, 1, tzinfo=UTC)
        assert msg.raw["operationId"] == 4

    def test_obstacle_without_timestamp(self) -> None:
        msg = ObstacleDetected.model_validate({"type": "obstacle_detected", "deviceId": "car-7"})
        assert msg.device_id == "car-7"
        assert msg.timestamp is None

    def test_bad_timestamp_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            ObstacleDetected.model_validate({"type": "obstacle_detected", "timestamp": "soon"})


# ------------------------------------------------------------------
# Outbound
# ------------------------------------------------------------------


class TestOutboundModels:
    def test_history_request_wire_shape(self) -> None:
        assert MovementHistoryRequest(device_id=1).to_wire() == {
            "type": "monitoring",
            "action": "get_last_10_movements",
            "deviceId": 1,
        }

    def test_ping_wire_shape(self) -> None:
        assert PingRequest().to_wire() == {"type": "ping"}
