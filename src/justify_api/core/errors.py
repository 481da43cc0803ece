"""Error kinds and explicit result types shared by the core services.

Expected outcomes such as bad input, an expired token or an exhausted quota
are returned as ``Err`` values. Only unexpected faults are raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Top-level failure categories surfaced to callers."""

    VALIDATION = "validation_error"
    AUTH = "auth_error"
    QUOTA_EXCEEDED = "quota_exceeded"
    INTERNAL = "internal_error"


class AuthReason(str, Enum):
    """Why a bearer token was rejected."""

    MISSING = "missing"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    REVOKED = "revoked"


# HTTP status used by the API layer for each error kind.
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.QUOTA_EXCEEDED: 402,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class ServiceError:
    """Description of a failed core operation."""

    kind: ErrorKind
    message: str
    reason: AuthReason | None = None
    errors: tuple[str, ...] = ()
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable body for API responses."""
        payload: dict[str, Any] = {"error": self.message, "kind": self.kind.value}
        if self.reason is not None:
            payload["reason"] = self.reason.value
        if self.errors:
            payload["errors"] = list(self.errors)
        if self.details:
            payload.update(self.details)
        return payload


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result wrapping a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed result wrapping a :class:`ServiceError`."""

    error: ServiceError

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err


def validation_error(message: str, errors: list[str] | None = None) -> Err:
    return Err(
        ServiceError(
            kind=ErrorKind.VALIDATION,
            message=message,
            errors=tuple(errors or [message]),
        )
    )


def auth_error(reason: AuthReason, message: str) -> Err:
    return Err(ServiceError(kind=ErrorKind.AUTH, message=message, reason=reason))


def internal_error(message: str = "Internal server error") -> Err:
    return Err(ServiceError(kind=ErrorKind.INTERNAL, message=message))


class InvalidWidthError(ValueError):
    """Raised when a justification width is not a positive integer."""
