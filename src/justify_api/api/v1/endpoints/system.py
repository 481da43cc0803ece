"""System and transparency endpoints for the Justify API."""

from __future__ import annotations

from fastapi import APIRouter

from justify_api.api.v1.dependencies import JustifyServiceDep
from justify_api.schemas.justify import ServiceStatsOut

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config(service: JustifyServiceDep) -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes the issuer tag and anything else that helps forge tokens.
    """
    config = service.config
    return {
        "app": {
            "name": config.app_name,
            "version": config.app_version,
            "debug": config.debug,
        },
        "justify": {
            "line_width": service.line_width,
            "max_text_length": config.max_text_length,
        },
        "rate_limit": {
            "daily_word_limit": service.limiter.daily_limit,
            "window_seconds": int(service.limiter.window.total_seconds()),
        },
        "tokens": {
            "ttl_seconds": int(service.registry.ttl.total_seconds()),
            "max_per_identity": service.registry.max_tokens_per_identity,
        },
    }


@router.get("/stats", response_model=ServiceStatsOut)
async def get_stats(service: JustifyServiceDep) -> ServiceStatsOut:
    """Return aggregate token and usage counts. Read-only."""
    return ServiceStatsOut.model_validate(service.stats())
