"""Inbound frame parsing and routing by message type.

Frames are handled synchronously and to completion, one at a time, in
the order the transport delivers them. A bad frame never takes the
dispatcher down: malformed frames are dropped with a warning and unknown
message types are ignored so newer servers can add types freely.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from pycarmonitor._constants import preview
from pycarmonitor.exceptions import MalformedMessageError, UnknownMessageTypeError

_logger = logging.getLogger(__name__)


def parse_frame(text: str | bytes) -> dict[str, Any]:
    """Decode a text frame into a JSON object with a string ``type``.

    Raises
    ------
    MalformedMessageError
        If the frame is not JSON, not an object, or has no usable ``type``.
    """
    raw = text.decode("utf-8", errors="replace") if isinstance(text, bytes) else text
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedMessageError(f"Frame is not valid JSON: {exc}", raw=raw) from exc
    if not isinstance(parsed, dict):
        raise MalformedMessageError(f"Frame is {type(parsed).__name__}, expected an object", raw=raw)
    message_type = parsed.get("type")
    if not isinstance(message_type, str) or not message_type.strip():
        raise MalformedMessageError("Frame has no 'type' discriminant", raw=raw)
    return parsed


@dataclass(frozen=True, slots=True)
class _Route:
    model: type[BaseModel]
    handler: Callable[[Any], None]


class MessageDispatcher:
    """Routes parsed frames to the handler registered for their ``type``."""

    def __init__(self) -> None:
        self._routes: dict[str, _Route] = {}

    def register(self, message_type: str, model: type[BaseModel], handler: Callable[[Any], None]) -> None:
        """Bind *message_type* to a pydantic *model* and a *handler*.

        The handler receives the validated model instance.
        """
        self._routes[message_type] = _Route(model=model, handler=handler)

    @property
    def message_types(self) -> frozenset[str]:
        return frozenset(self._routes)

    def route(self, payload: dict[str, Any]) -> None:
        """Validate and route an already-parsed frame.

        Raises
        ------
        UnknownMessageTypeError
            If no handler is registered for the frame's type.
        MalformedMessageError
            If the frame does not match the registered model.
        """
        message_type = str(payload.get("type", ""))
        route = self._routes.get(message_type)
        if route is None:
            raise UnknownMessageTypeError(f"No handler for type {message_type!r}", message_type=message_type)
        try:
            message = route.model.model_validate(payload)
        except ValidationError as exc:
            raise MalformedMessageError(
                f"Invalid {message_type} frame: {exc.error_count()} validation error(s)",
                raw=json.dumps(payload, default=str),
            ) from exc
        route.handler(message)

    def dispatch(self, text: str | bytes) -> bool:
        """Parse and route one inbound frame.

        Returns ``True`` when a handler ran. Malformed frames and unknown
        types return ``False`` and are never raised.
        """
        try:
            payload = parse_frame(text)
            _logger.debug("Received %s frame", payload["type"])
            self.route(payload)
        except UnknownMessageTypeError as exc:
            _logger.debug("Ignoring frame with unknown type %r", exc.message_type)
            return False
        except MalformedMessageError as exc:
            _logger.warning("Dropping malformed frame: %s raw=%s", exc, preview(exc.raw))
            return False
        return True
