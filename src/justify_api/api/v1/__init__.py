# src/justify_api/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import auth_router, justify_router, system_router

__all__ = [
    "auth_router",
    "justify_router",
    "system_router",
]
