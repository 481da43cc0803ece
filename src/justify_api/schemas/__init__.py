"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ErrorResponse, HealthResponse, QuotaExceededResponse
from .justify import (
    JustifyHealthResponse,
    JustifyStatsResponse,
    LimiterStatsOut,
    ServiceStatsOut,
    UsageStatsOut,
)
from .token import AuthHealthResponse, RegistryStatsOut, TokenRequest, TokenResponse

__all__ = [
    "ErrorResponse", "HealthResponse", "QuotaExceededResponse",
    "JustifyHealthResponse", "JustifyStatsResponse", "LimiterStatsOut",
    "ServiceStatsOut", "UsageStatsOut",
    "AuthHealthResponse", "RegistryStatsOut", "TokenRequest", "TokenResponse",
]
