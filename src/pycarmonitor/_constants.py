"""Internal constants shared across the library."""

DEFAULT_ENDPOINT = "wss://fickly-exorcismal-glen.ngrok-free.dev"
DEFAULT_DEVICE_ID = 1

# ------------------------------------------------------------------
# Wire protocol discriminants
# ------------------------------------------------------------------

MSG_MONITORING = "monitoring"
MSG_PING = "ping"
MSG_MONITORING_DATA = "monitoring_data"
MSG_MOVEMENT_UPDATE = "movement_update"
MSG_OBSTACLE_DETECTED = "obstacle_detected"
MSG_CONNECTION = "connection"
MSG_PONG = "pong"

ACTION_LAST_MOVEMENTS = "get_last_10_movements"

# ------------------------------------------------------------------
# Timing and sizing defaults (seconds / entries)
# ------------------------------------------------------------------

POLL_INTERVAL_S: float = 10.0
HEARTBEAT_INTERVAL_S: float = 30.0
RECONNECT_DELAY_S: float = 5.0
SETTLE_DELAY_S: float = 3.0
ALERT_TTL_S: float = 5.0
CONNECT_TIMEOUT_S: float = 10.0
LOG_CAPACITY: int = 15
HISTORY_SIZE: int = 10

LIVE_SEQUENCE_LABEL = "Nuevo"

# Raw frames longer than this are cut in log lines.
LOG_PREVIEW_CHARS = 200


def preview(text: str, limit: int = LOG_PREVIEW_CHARS) -> str:
    """Return *text* truncated for a log line."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}…<truncated>"
