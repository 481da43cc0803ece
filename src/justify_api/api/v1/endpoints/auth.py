# src/justify_api/api/v1/endpoints/auth.py
"""Token issuance endpoints for the Justify API."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

from justify_api.api.v1.dependencies import JustifyServiceDep, raise_service_error
from justify_api.core.errors import Err
from justify_api.schemas.common import ErrorResponse
from justify_api.schemas.token import (
    AuthHealthResponse,
    RegistryStatsOut,
    TokenRequest,
    TokenResponse,
)

router = APIRouter(tags=["authentication"])


@router.post(
    "/token",
    response_model=TokenResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_token(payload: TokenRequest, service: JustifyServiceDep) -> TokenResponse:
    """Issue a bearer token bound to the submitted email.

    Up to five tokens may be live per email; issuing another evicts the
    oldest one.

    Args:
        payload: Request body holding the email
        service: Orchestration service owned by the application

    Returns:
        The newly issued token
    """
    result = service.issue_token(payload.email)
    if isinstance(result, Err):
        raise_service_error(result.error)
    return TokenResponse(token=result.value.token)


@router.get("/auth/health", response_model=AuthHealthResponse)
async def auth_health(service: JustifyServiceDep) -> AuthHealthResponse:
    """Report token registry counts."""
    stats = service.registry.stats()
    return AuthHealthResponse(
        status="healthy",
        module="auth",
        stats=RegistryStatsOut(
            total_tokens=stats.total_tokens,
            unique_identities=stats.unique_identities,
            valid_tokens=stats.valid_tokens,
        ),
        timestamp=datetime.now(UTC).isoformat(),
    )
