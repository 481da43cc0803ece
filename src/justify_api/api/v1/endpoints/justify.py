# src/justify_api/api/v1/endpoints/justify.py
"""Text justification endpoints with per-token word quotas."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from justify_api.api.v1.dependencies import (
    BearerTokenDep,
    CurrentCallerDep,
    JustifyServiceDep,
    raise_service_error,
)
from justify_api.core.errors import Err
from justify_api.schemas.common import ErrorResponse, QuotaExceededResponse
from justify_api.schemas.justify import (
    CallerUsage,
    JustifyHealthResponse,
    JustifyStatsResponse,
    LimiterStatsOut,
    UsageStatsOut,
)

router = APIRouter(tags=["text processing"])


@router.post(
    "/justify",
    response_class=PlainTextResponse,
    responses={
        200: {"content": {"text/plain": {}}, "description": "Justified text"},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        402: {"model": QuotaExceededResponse},
        500: {"model": ErrorResponse},
    },
)
async def justify_text(
    request: Request,
    token: BearerTokenDep,
    service: JustifyServiceDep,
) -> PlainTextResponse:
    """Justify a plain-text body to the configured line width.

    Every line but the last is padded with extra inter-word spaces to reach
    exactly the line width. Each token may justify a limited number of words
    per sliding 24 hour window; the remaining quota is reported in the
    ``X-Words-Used``, ``X-Remaining-Words`` and ``X-Reset-At`` headers.

    Args:
        request: Raw request, read as UTF-8 text
        token: Bearer token from the Authorization header
        service: Orchestration service owned by the application

    Returns:
        The justified text as ``text/plain``
    """
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Request body must be UTF-8 text", "kind": "validation_error"},
        ) from err

    result = service.justify_text(token, text)
    if isinstance(result, Err):
        raise_service_error(result.error)

    outcome = result.value
    return PlainTextResponse(outcome.justified_text, headers=outcome.headers())


@router.get("/justify/health", response_model=JustifyHealthResponse)
async def justify_health(service: JustifyServiceDep) -> JustifyHealthResponse:
    """Report aggregate word usage across all tokens."""
    return JustifyHealthResponse(
        status="healthy",
        module="justify",
        stats=LimiterStatsOut.model_validate(service.limiter.global_stats()),
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/justify/stats", response_model=JustifyStatsResponse)
async def justify_stats(
    caller: CurrentCallerDep, service: JustifyServiceDep
) -> JustifyStatsResponse:
    """Return the authenticated caller's usage alongside global usage."""
    return JustifyStatsResponse(
        user=CallerUsage(
            email=caller.email,
            usage=UsageStatsOut.model_validate(service.usage_for(caller.token)),
            daily_limit=service.limiter.daily_limit,
        ),
        global_stats=LimiterStatsOut.model_validate(service.limiter.global_stats()),
        timestamp=datetime.now(UTC).isoformat(),
    )
