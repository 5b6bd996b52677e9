"""Health check response models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["healthy"]
    version: str
    timestamp: datetime


class ReadinessResponse(BaseModel):
    """Readiness, including whether the registry answered a catalog request."""

    status: Literal["ready", "unavailable"]
    version: str
    timestamp: datetime
    registry_url: str
    registry_instances: int | None = None
    detail: str | None = None
