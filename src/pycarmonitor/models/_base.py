"""Base model for inbound telemetry frames.

Every inbound model inherits from :class:`MonitorBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase wire keys (``deviceId``,
  ``operationId``) map automatically to snake_case fields, while
  ``populate_by_name`` keeps the server's snake_case keys
  (``status_texto``, ``fecha_hora``) working.
* A ``model_validator(mode="before")`` that strips ``None`` and empty
  string values so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 100_000_000_000


def parse_timestamp(value: Any) -> datetime | None:
    """Convert a wire timestamp to a UTC-aware datetime.

    Accepts ISO-8601 strings (``"2025-11-20T10:15:00Z"``), epoch seconds or
    epoch milliseconds (as numbers or numeric strings), and datetimes.
    Naive values are assumed to be UTC. Returns ``None`` for ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, bool):
        raise ValueError(f"invalid timestamp: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        try:
            value = float(text)
        except ValueError:
            parsed = datetime.fromisoformat(text)
            return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        try:
            ts = float(value)
            if not math.isfinite(ts):
                raise ValueError("not finite")
            if abs(ts) >= _MS_THRESHOLD:
                ts /= 1000.0
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"invalid timestamp: {value!r}") from exc
    raise ValueError(f"invalid timestamp: {value!r}")


MonitorTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and epoch numbers to UTC datetimes."""


class MonitorBaseModel(BaseModel):
    """Base for inbound telemetry models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original frame dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop ``None``/empty-string values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        # Keep the caller's raw= when constructing directly with kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
