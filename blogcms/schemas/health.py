"""Liveness and readiness payloads."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness: always ok while the process serves requests."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"]


class ReadinessResponse(BaseModel):
    status: Literal["ready", "not_ready"]
    database: Literal["connected", "disconnected"]
