"""Core type definitions shared across all thaihousing modules."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    """Health check response for any service."""

    service: str
    healthy: bool
    latency_ms: float | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class Province(BaseModel):
    """A province the dashboard can display."""

    id: str
    name: str
    name_th: str = ""
    latitude: float
    longitude: float
    zoom: int = 10
    grid_file: str | None = None
