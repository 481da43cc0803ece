"""Request orchestration for token issuance and text justification.

``JustifyService`` composes the issuer, registry, limiter and justifier.
Every public operation returns an explicit ``Ok``/``Err`` result; unexpected
faults are logged here and turned into an opaque internal error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Final, cast

from pydantic import EmailStr, TypeAdapter, ValidationError

from justify_api.core.errors import (
    AuthReason,
    Err,
    InvalidWidthError,
    Ok,
    Result,
    auth_error,
    internal_error,
    validation_error,
)
from justify_api.core.log import mask_token
from justify_api.core.settings import Settings, settings
from justify_api.services.justifier import count_words, justify
from justify_api.services.rate_limiter import RateLimiter, UsageStats, quota_exceeded
from justify_api.services.token_issuer import TokenIssuer
from justify_api.services.token_registry import TokenRegistry

logger = logging.getLogger(__name__)

_EMAIL_ADAPTER: Final = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class IssuedToken:
    email: str
    token: str


@dataclass(frozen=True)
class JustifyOutcome:
    """Justified text plus the caller's quota after this request."""

    justified_text: str
    words_used: int
    remaining_words: int
    reset_at: datetime

    def headers(self) -> dict[str, str]:
        return {
            "X-Words-Used": str(self.words_used),
            "X-Remaining-Words": str(self.remaining_words),
            "X-Reset-At": self.reset_at.isoformat(),
        }


@dataclass(frozen=True)
class ServiceStats:
    active_tokens: int
    active_identities: int
    total_words_in_window: int


def _is_bare_email(email: str) -> bool:
    try:
        normalized = _EMAIL_ADAPTER.validate_python(email)
    except ValidationError:
        return False
    # EmailStr also accepts "Name <addr>"; the identity must be the address itself.
    return normalized.casefold() == email.casefold()


def validate_email(email: object, max_length: int) -> list[str]:
    """Return every validation problem with ``email`` (empty when valid)."""
    if not isinstance(email, str) or not email:
        return ["Email is required"]
    errors: list[str] = []
    if not _is_bare_email(email):
        errors.append("Invalid email format")
    if len(email) > max_length:
        errors.append("Email too long")
    return errors


def validate_text(text: object, max_length: int) -> list[str]:
    """Return every validation problem with a justification body."""
    if not isinstance(text, str):
        return ["Request body must be plain text"]
    if not text:
        return ["Text cannot be empty"]
    if len(text) > max_length:
        return [f"Text too long (max {max_length} characters)"]
    return []


class JustifyService:
    """Compose the core services behind the HTTP endpoints."""

    def __init__(
        self,
        *,
        issuer: TokenIssuer | None = None,
        registry: TokenRegistry | None = None,
        limiter: RateLimiter | None = None,
        config: Settings | None = None,
    ) -> None:
        self.config = config or settings
        self.issuer = issuer or TokenIssuer(self.config.token_issuer)
        self.registry = registry or TokenRegistry(
            ttl=timedelta(seconds=self.config.token_ttl_seconds),
            max_tokens_per_identity=self.config.max_tokens_per_identity,
            sweep_interval_seconds=self.config.token_sweep_interval_seconds,
        )
        self.limiter = limiter or RateLimiter(
            self.config.daily_word_limit,
            timedelta(seconds=self.config.rate_limit_window_seconds),
            sweep_interval_seconds=self.config.usage_sweep_interval_seconds,
        )

    @property
    def line_width(self) -> int:
        return self.config.line_width

    async def start(self) -> None:
        """Start the background sweepers owned by the registry and limiter."""
        await self.registry.start()
        await self.limiter.start()

    async def stop(self) -> None:
        await self.registry.stop()
        await self.limiter.stop()

    def issue_token(self, email: str) -> Result[IssuedToken]:
        """Validate ``email``, mint a token and register it."""
        errors = validate_email(email, self.config.max_email_length)
        if errors:
            return validation_error(errors[0], errors)
        try:
            token, metadata = self.issuer.create_token_with_metadata(email)
            stored = self.registry.store(token, email, metadata)
        except Exception:
            logger.exception("Token generation failed")
            return internal_error()
        if isinstance(stored, Err):
            return stored

        logger.info("Token generated successfully for email: %s", email)
        return Ok(IssuedToken(email=email, token=token))

    def is_well_formed(self, token: str | None) -> bool:
        return self.issuer.validate_format(token)

    def authenticate(self, token: str | None) -> Result[str]:
        """Resolve a bearer token to the identity it is bound to."""
        if not token:
            return auth_error(AuthReason.MISSING, "Missing or invalid authorization header")
        if not self.is_well_formed(token):
            return auth_error(AuthReason.MALFORMED, "Invalid token format")

        try:
            retrieved = self.registry.retrieve(token)
        except Exception:
            logger.exception("Token lookup failed")
            return internal_error()
        if isinstance(retrieved, Err):
            logger.warning(
                "Token validation failed for %s: %s", mask_token(token), retrieved.error.message
            )
            return retrieved
        return Ok(retrieved.value.email)

    def justify_text(self, token: str | None, text: str) -> Result[JustifyOutcome]:
        """Authenticate, enforce the word quota and justify ``text``.

        Usage is only recorded once the text has been justified; a request
        rejected at any step records nothing.
        """
        identity = self.authenticate(token)
        if isinstance(identity, Err):
            return identity
        bearer = cast(str, token)

        errors = validate_text(text, self.config.max_text_length)
        if errors:
            return validation_error(errors[0], errors)
        try:
            word_count = count_words(text)
            check = self.limiter.check_limit(bearer, word_count)
            if not check.allowed:
                return quota_exceeded(check)

            justified = justify(text, self.line_width)
            consumed = self.limiter.consume_words(bearer, word_count)
        except InvalidWidthError as err:
            return validation_error(str(err))
        except Exception:
            logger.exception("Text justification failed")
            return internal_error()
        if isinstance(consumed, Err):
            return consumed

        quota = consumed.value
        logger.info(
            "Text justified for %s - %d words used, %d remaining",
            identity.value,
            word_count,
            quota.remaining_words,
        )
        return Ok(
            JustifyOutcome(
                justified_text=justified,
                words_used=word_count,
                remaining_words=quota.remaining_words,
                reset_at=quota.reset_at,
            )
        )

    def usage_for(self, token: str) -> UsageStats:
        return self.limiter.usage_stats(token)

    def stats(self) -> ServiceStats:
        """Aggregate counts for health endpoints. Read-only."""
        registry_stats = self.registry.stats()
        limiter_stats = self.limiter.global_stats()
        return ServiceStats(
            active_tokens=registry_stats.valid_tokens,
            active_identities=registry_stats.unique_identities,
            total_words_in_window=limiter_stats.total_words,
        )
