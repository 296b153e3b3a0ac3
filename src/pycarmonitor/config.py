"""Client configuration for pycarmonitor."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pycarmonitor import _constants as const
from pycarmonitor.exceptions import MonitorConfigError


@dataclasses.dataclass(frozen=True)
class MonitorConfig:
    """Client configuration.

    Parameters
    ----------
    endpoint : str
        WebSocket URL of the telemetry server.
    device_id : int or str
        Identifier of the single monitored device. Sent with every
        movement history request.
    poll_interval : float
        Seconds between movement history refreshes while connected.
    heartbeat_interval : float
        Seconds between ``ping`` keep-alive frames while connected.
    reconnect_delay : float
        Fixed delay in seconds before a reconnection attempt. Retries
        never back off and never give up.
    settle_delay : float
        Seconds a live movement stays "in progress" before it settles.
    alert_ttl : float
        Seconds an obstacle alert stays visible unless dismissed or replaced.
    log_capacity : int
        Maximum number of movements kept in the event log.
    history_size : int
        Number of historical movements the server returns per request.
    connect_timeout : float
        Seconds allowed for the WebSocket handshake.
    """

    endpoint: str = const.DEFAULT_ENDPOINT
    device_id: int | str = const.DEFAULT_DEVICE_ID
    poll_interval: float = const.POLL_INTERVAL_S
    heartbeat_interval: float = const.HEARTBEAT_INTERVAL_S
    reconnect_delay: float = const.RECONNECT_DELAY_S
    settle_delay: float = const.SETTLE_DELAY_S
    alert_ttl: float = const.ALERT_TTL_S
    log_capacity: int = const.LOG_CAPACITY
    history_size: int = const.HISTORY_SIZE
    connect_timeout: float = const.CONNECT_TIMEOUT_S

    def __post_init__(self) -> None:
        if not self.endpoint or not self.endpoint.strip():
            raise MonitorConfigError("endpoint must be non-empty")
        if not self.endpoint.startswith(("ws://", "wss://", "http://", "https://")):
            raise MonitorConfigError(f"endpoint must be a ws:// or wss:// URL, got {self.endpoint!r}")
        for name in (
            "poll_interval",
            "heartbeat_interval",
            "reconnect_delay",
            "settle_delay",
            "alert_ttl",
            "connect_timeout",
        ):
            if getattr(self, name) <= 0:
                raise MonitorConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.log_capacity < 1:
            raise MonitorConfigError(f"log_capacity must be at least 1, got {self.log_capacity}")
        if self.history_size < 1:
            raise MonitorConfigError(f"history_size must be at least 1, got {self.history_size}")

    @classmethod
    def from_env(cls, **overrides: Any) -> MonitorConfig:
        """Create configuration from environment variables.

        Reads ``MONITOR_ENDPOINT``, ``MONITOR_DEVICE_ID`` and the optional
        ``MONITOR_*`` timing variables. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        MonitorConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        endpoint = env.get("MONITOR_ENDPOINT")
        if endpoint is not None:
            config_kwargs["endpoint"] = endpoint

        device_env = env.get("MONITOR_DEVICE_ID")
        if device_env is not None:
            device_env = device_env.strip()
            config_kwargs["device_id"] = int(device_env) if device_env.isdigit() else device_env

        _ENV_FLOAT_MAP = {
            "MONITOR_POLL_INTERVAL": "poll_interval",
            "MONITOR_HEARTBEAT_INTERVAL": "heartbeat_interval",
            "MONITOR_RECONNECT_DELAY": "reconnect_delay",
            "MONITOR_SETTLE_DELAY": "settle_delay",
            "MONITOR_ALERT_TTL": "alert_ttl",
            "MONITOR_CONNECT_TIMEOUT": "connect_timeout",
        }
        _ENV_INT_MAP = {
            "MONITOR_LOG_CAPACITY": "log_capacity",
            "MONITOR_HISTORY_SIZE": "history_size",
        }
        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)
            for env_key, field_name in _ENV_INT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = int(val)
        except ValueError as exc:
            raise MonitorConfigError(f"Invalid numeric environment value: {exc}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
