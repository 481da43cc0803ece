"""In-memory bearer token registry with TTL expiry and per-identity caps."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from itertools import count
from threading import Lock

from justify_api.core.errors import AuthReason, Ok, Result, auth_error, internal_error
from justify_api.core.log import mask_token
from justify_api.core.settings import settings
from justify_api.services.sweeper import PeriodicSweeper
from justify_api.services.token_issuer import TokenMetadata
from justify_api.utils.time import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass
class _StoredToken:
    email: str
    created_at: datetime
    last_used: datetime
    sequence: int
    issued_by: str | None = None
    is_valid: bool = True


@dataclass(frozen=True)
class TokenRecord:
    """Read-only snapshot of a stored token."""

    token: str
    email: str
    created_at: datetime
    last_used: datetime
    is_valid: bool
    issued_by: str | None


@dataclass(frozen=True)
class RegistryStats:
    total_tokens: int
    unique_identities: int
    valid_tokens: int


class TokenRegistry:
    """Own token records and the identity index.

    Every public method runs under a single lock so concurrent store, revoke
    and sweep calls never interleave partially.
    """

    def __init__(
        self,
        *,
        ttl: timedelta | None = None,
        max_tokens_per_identity: int | None = None,
        sweep_interval_seconds: float | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._ttl = ttl if ttl is not None else timedelta(seconds=settings.token_ttl_seconds)
        self._max_tokens = (
            max_tokens_per_identity
            if max_tokens_per_identity is not None
            else settings.max_tokens_per_identity
        )
        if self._max_tokens < 1:
            raise ValueError("max_tokens_per_identity must be at least 1")
        self._clock = clock
        self._tokens: dict[str, _StoredToken] = {}
        self._email_to_tokens: dict[str, set[str]] = {}
        self._lock = Lock()
        self._sequence = count()
        self.sweeper = PeriodicSweeper(
            "token-registry",
            self.sweep,
            sweep_interval_seconds
            if sweep_interval_seconds is not None
            else settings.token_sweep_interval_seconds,
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def max_tokens_per_identity(self) -> int:
        return self._max_tokens

    async def start(self) -> None:
        await self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()

    def store(
        self, token: str, email: str, metadata: TokenMetadata | None = None
    ) -> Result[None]:
        """Register ``token`` for ``email``, evicting the oldest token at the cap.

        Creation and expiry times come from the registry clock; ``metadata``
        only contributes the issuer tag.
        """
        with self._lock:
            if token in self._tokens:
                logger.error("Refusing to store duplicate token %s", mask_token(token))
                return internal_error("Token storage failed")

            now = self._clock()
            self._revoke_expired_for_email(email, now)
            live = self._email_to_tokens.get(email, set())
            while len(live) >= self._max_tokens:
                oldest = self._oldest_token_for_email(email)
                if oldest is None:
                    break
                self._revoke_locked(oldest)
                logger.debug("Evicted oldest token %s for %s", mask_token(oldest), email)
                live = self._email_to_tokens.get(email, set())

            self._tokens[token] = _StoredToken(
                email=email,
                created_at=now,
                last_used=now,
                sequence=next(self._sequence),
                issued_by=metadata.issued_by if metadata is not None else None,
            )
            self._email_to_tokens.setdefault(email, set()).add(token)

        logger.debug("Token stored for email: %s", email)
        return Ok(None)

    def retrieve(self, token: str) -> Result[TokenRecord]:
        """Return the record for a usable token and refresh its last use time."""
        with self._lock:
            stored = self._tokens.get(token)
            if stored is None:
                return auth_error(AuthReason.NOT_FOUND, "Token not found")
            if not stored.is_valid:
                return auth_error(AuthReason.REVOKED, "Token is invalid")

            now = self._clock()
            if self._is_expired(stored, now):
                self._revoke_locked(token)
                return auth_error(AuthReason.EXPIRED, "Token has expired")

            stored.last_used = now
            return Ok(self._snapshot(token, stored))

    def revoke(self, token: str) -> bool:
        """Mark ``token`` revoked. Returns False if it was unknown or already revoked."""
        with self._lock:
            return self._revoke_locked(token)

    def revoke_all(self, email: str) -> int:
        """Revoke every live token bound to ``email``."""
        with self._lock:
            tokens = list(self._email_to_tokens.get(email, ()))
            revoked = sum(1 for token in tokens if self._revoke_locked(token))
        if revoked:
            logger.info("Revoked %d tokens for %s", revoked, email)
        return revoked

    def sweep(self) -> int:
        """Delete revoked and expired records. Returns the number removed."""
        now = self._clock()
        with self._lock:
            stale = [
                token
                for token, stored in self._tokens.items()
                if not stored.is_valid or self._is_expired(stored, now)
            ]
            for token in stale:
                stored = self._tokens.pop(token)
                self._discard_from_index(stored.email, token)
        if stale:
            logger.debug("Cleaned up %d expired tokens", len(stale))
        return len(stale)

    def stats(self) -> RegistryStats:
        """Return aggregate counts without side effects."""
        now = self._clock()
        with self._lock:
            valid = sum(
                1
                for stored in self._tokens.values()
                if stored.is_valid and not self._is_expired(stored, now)
            )
            return RegistryStats(
                total_tokens=len(self._tokens),
                unique_identities=len(self._email_to_tokens),
                valid_tokens=valid,
            )

    def tokens_for(self, email: str) -> frozenset[str]:
        """Return the live tokens currently indexed for ``email``."""
        with self._lock:
            return frozenset(self._email_to_tokens.get(email, ()))

    def _is_expired(self, stored: _StoredToken, now: datetime) -> bool:
        return now - stored.created_at >= self._ttl

    def _revoke_locked(self, token: str) -> bool:
        stored = self._tokens.get(token)
        if stored is None or not stored.is_valid:
            return False
        stored.is_valid = False
        self._discard_from_index(stored.email, token)
        logger.debug("Token %s revoked for email: %s", mask_token(token), stored.email)
        return True

    def _revoke_expired_for_email(self, email: str, now: datetime) -> None:
        for token in list(self._email_to_tokens.get(email, ())):
            if self._is_expired(self._tokens[token], now):
                self._revoke_locked(token)

    def _discard_from_index(self, email: str, token: str) -> None:
        tokens = self._email_to_tokens.get(email)
        if tokens is None:
            return
        tokens.discard(token)
        if not tokens:
            del self._email_to_tokens[email]

    def _oldest_token_for_email(self, email: str) -> str | None:
        tokens = self._email_to_tokens.get(email)
        if not tokens:
            return None
        return min(
            tokens,
            key=lambda token: (self._tokens[token].created_at, self._tokens[token].sequence),
        )

    @staticmethod
    def _snapshot(token: str, stored: _StoredToken) -> TokenRecord:
        return TokenRecord(
            token=token,
            email=stored.email,
            created_at=stored.created_at,
            last_used=stored.last_used,
            is_valid=stored.is_valid,
            issued_by=stored.issued_by,
        )

