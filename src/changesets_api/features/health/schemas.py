"""Schemas for the health endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from changesets_api.common.schema import BaseSchema


class HealthComponentStatus(BaseSchema):
    name: str
    status: Literal["available", "degraded", "unavailable"]
    detail: str | None = None


class HealthCheckResponse(BaseSchema):
    status: Literal["ok", "error"]
    timestamp: datetime
    components: list[HealthComponentStatus]


__all__ = ["HealthCheckResponse", "HealthComponentStatus"]
