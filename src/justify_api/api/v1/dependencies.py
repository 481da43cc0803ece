"""Shared API dependencies for authentication and service access."""

from dataclasses import dataclass
from typing import Annotated, NoReturn, cast

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from justify_api.core.errors import Err, ErrorKind, ServiceError
from justify_api.services.justify_service import JustifyService

# HTTP Bearer scheme; missing credentials are reported by the service layer
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedCaller:
    """Bearer token together with the identity it resolved to."""

    token: str
    email: str


def raise_service_error(error: ServiceError) -> NoReturn:
    """Translate a core service error into an HTTP error response.

    Args:
        error: The failure returned by a core operation

    Raises:
        HTTPException: Always, with the status mapped from the error kind
    """
    headers = {"WWW-Authenticate": "Bearer"} if error.kind is ErrorKind.AUTH else None
    raise HTTPException(status_code=error.status_code, detail=error.to_payload(), headers=headers)


def get_justify_service(request: Request) -> JustifyService:
    """Return the service instance owned by the running application."""
    return request.app.state.justify_service


JustifyServiceDep = Annotated[JustifyService, Depends(get_justify_service)]


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Extract the raw bearer token, or None when the header is absent or not Bearer."""
    if credentials is None:
        return None
    return credentials.credentials


BearerTokenDep = Annotated[str | None, Depends(get_bearer_token)]


def get_current_caller(token: BearerTokenDep, service: JustifyServiceDep) -> AuthenticatedCaller:
    """Authenticate the bearer token of the current request.

    Raises:
        HTTPException: 401 if the token is missing, malformed, unknown,
            expired or revoked
    """
    result = service.authenticate(token)
    if isinstance(result, Err):
        raise_service_error(result.error)
    return AuthenticatedCaller(token=cast(str, token), email=result.value)


CurrentCallerDep = Annotated[AuthenticatedCaller, Depends(get_current_caller)]
