"""Schemas for justification health and usage reporting."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LimiterStatsOut(BaseModel):
    active_tokens: int
    total_records: int
    total_words: int
    daily_limit: int

    model_config = ConfigDict(from_attributes=True)


class UsageStatsOut(BaseModel):
    total_words: int
    record_count: int
    oldest_record: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class JustifyHealthResponse(BaseModel):
    status: str
    module: str
    stats: LimiterStatsOut
    timestamp: str


class CallerUsage(BaseModel):
    email: str
    usage: UsageStatsOut
    daily_limit: int


class JustifyStatsResponse(BaseModel):
    """Quota usage of the authenticated caller plus global limiter stats."""

    user: CallerUsage
    global_stats: LimiterStatsOut = Field(..., alias="global")
    timestamp: str

    model_config = ConfigDict(populate_by_name=True)


class ServiceStatsOut(BaseModel):
    active_tokens: int
    active_identities: int
    total_words_in_window: int

    model_config = ConfigDict(from_attributes=True)
