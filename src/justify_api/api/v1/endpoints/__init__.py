# src/justify_api/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .justify import router as justify_router
from .system import router as system_router

__all__ = [
    "auth_router",
    "justify_router",
    "system_router",
]
