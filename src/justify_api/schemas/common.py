"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned inside ``detail`` for every failed request."""

    error: str = Field(..., description="Human-readable error message")
    kind: str = Field(..., description="Machine-readable error category")
    reason: str | None = Field(None, description="Authentication failure reason, if any")
    errors: list[str] | None = Field(None, description="All validation problems found")


class QuotaExceededResponse(ErrorResponse):
    """Error body returned when a justification would exceed the word quota."""

    current_usage: int
    limit: int
    requested: int
    remaining_words: int
    reset_at: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    uptime_seconds: float
