"""Schemas for token issuance."""

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """Request body for ``POST /token``."""

    email: str = Field(..., description="Email address the token is bound to")


class TokenResponse(BaseModel):
    """Freshly issued bearer token."""

    token: str = Field(..., description="64-character alphanumeric bearer token")


class RegistryStatsOut(BaseModel):
    total_tokens: int
    unique_identities: int
    valid_tokens: int


class AuthHealthResponse(BaseModel):
    status: str
    module: str
    stats: RegistryStatsOut
    timestamp: str
