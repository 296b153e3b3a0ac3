"""Canonical movement action enumeration.

A single table keyed by the server's operation code carries both the
label the server stores (``status_texto``) and the display text shown to
operators, so lookups by code and by label can never drift apart.
"""

from __future__ import annotations

import enum


class MovementAction(enum.IntEnum):
    """Device movement actions, keyed by ``operationId``.

    Values without a mapped member resolve to ``UNKNOWN`` instead of
    raising ``ValueError``.
    """

    label: str
    display_text: str

    def __new__(cls, code: int, label: str = "", display_text: str = "") -> MovementAction:
        obj = int.__new__(cls, code)
        obj._value_ = code
        obj.label = label
        obj.display_text = display_text
        return obj

    UNKNOWN = -1, "", ""
    FORWARD = 1, "Adelante", "🔼 ADELANTE"
    BACKWARD = 2, "Atrás", "🔽 ATRÁS"
    STOP = 3, "Detener", "⏹️ DETENER"
    FORWARD_RIGHT = 4, "Vuelta adelante derecha", "↪️ VUELTA ADELANTE DER"
    FORWARD_LEFT = 5, "Vuelta adelante izquierda", "↩️ VUELTA ADELANTE IZQ"
    BACKWARD_RIGHT = 6, "Vuelta atrás derecha", "↘️ VUELTA ATRÁS DER"
    BACKWARD_LEFT = 7, "Vuelta atrás izquierda", "↙️ VUELTA ATRÁS IZQ"
    TURN_90_RIGHT = 8, "Giro 90° derecha", "➡️ GIRO 90° DER"
    TURN_90_LEFT = 9, "Giro 90° izquierda", "⬅️ GIRO 90° IZQ"
    SPIN_360_RIGHT = 10, "Giro 360° derecha", "🔁 GIRO 360° DER"
    SPIN_360_LEFT = 11, "Giro 360° izquierda", "🔄 GIRO 360° IZQ"
    SPEED_UP = 12, "Subir Velocidad", "⚡ SUBIR VELOCIDAD"
    SLOW_DOWN = 13, "Bajar Velocidad", "🐢 BAJAR VELOCIDAD"
    SAVE_SEQUENCE = 14, "Guardar Movimiento", "💾 GUARDAR MOVIMIENTO"
    REPLAY_SEQUENCE = 15, "Replicar Movimiento", "▶️ REPLICAR MOVIMIENTO"

    @classmethod
    def _missing_(cls, value: object) -> MovementAction:
        return cls.UNKNOWN

    @classmethod
    def from_code(cls, code: int | None) -> MovementAction:
        if code is None:
            return cls.UNKNOWN
        return cls(code)

    @classmethod
    def from_label(cls, label: str | None) -> MovementAction:
        """Resolve a server label, ignoring case and surrounding whitespace."""
        if not label:
            return cls.UNKNOWN
        return _BY_LABEL.get(label.strip().casefold(), cls.UNKNOWN)


_BY_LABEL: dict[str, MovementAction] = {
    member.label.casefold(): member for member in MovementAction if member is not MovementAction.UNKNOWN
}


def describe_action(code: int | None = None, label: str | None = None) -> str:
    """Display text for an action given its code and/or server label.

    Known codes win over labels. Unknown labels are shown as received and
    unknown codes as ``"Operación <code>"``.
    """
    action = MovementAction.from_code(code)
    if action is MovementAction.UNKNOWN:
        action = MovementAction.from_label(label)
    if action is not MovementAction.UNKNOWN:
        return action.display_text
    if label:
        return label
    if code is not None:
        return f"Operación {code}"
    return ""
