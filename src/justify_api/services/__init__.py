# src/justify_api/services/__init__.py
"""Business logic services for the Justify API."""

from .justify_service import JustifyService
from .rate_limiter import RateLimiter
from .sweeper import PeriodicSweeper
from .token_issuer import TokenIssuer
from .token_registry import TokenRegistry

__all__ = [
    "JustifyService",
    "PeriodicSweeper",
    "RateLimiter",
    "TokenIssuer",
    "TokenRegistry",
]
