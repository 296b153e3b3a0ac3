"""Obstacle alert model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Alert(BaseModel):
    """An active obstacle alert.

    ``alert_id`` identifies this instance so a stale expiry timer can never
    remove the alert that replaced it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    alert_id: int
    device_id: int | str
    raised_at: datetime
