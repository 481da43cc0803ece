"""Opaque bearer token generation."""

from __future__ import annotations

import re
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Final

from justify_api.core.settings import settings
from justify_api.utils.hash import blake3_hexdigest
from justify_api.utils.time import Clock, utcnow

TOKEN_LENGTH: Final[int] = 64
TOKEN_ALPHABET: Final[str] = string.ascii_letters + string.digits
RANDOM_BYTES: Final[int] = 32
_TOKEN_PATTERN = re.compile(rf"^[A-Za-z0-9]{{{TOKEN_LENGTH}}}$")
_DISALLOWED = re.compile(r"[^A-Za-z0-9]")


@dataclass(frozen=True)
class TokenMetadata:
    """Identity binding recorded alongside a freshly issued token."""

    email: str
    created_at: datetime
    last_used: datetime
    issued_by: str


class TokenIssuer:
    """Derive unique, unpredictable tokens bound to an identity."""

    def __init__(self, issuer: str | None = None, *, clock: Clock = utcnow) -> None:
        self._issuer = issuer or settings.token_issuer
        self._clock = clock

    @property
    def issuer(self) -> str:
        return self._issuer

    def issue(self, identity: str) -> str:
        """Return a new 64-character alphanumeric token for ``identity``.

        The leading random component comes from :mod:`secrets`; the trailing
        signature is a BLAKE3 digest over the identity hash, issue time, that
        random component and the issuer tag.
        """
        random_part = secrets.token_urlsafe(RANDOM_BYTES)
        identity_hash = blake3_hexdigest(identity.encode())
        timestamp = str(time.time_ns())
        signature = blake3_hexdigest(
            f"{identity_hash}:{timestamp}:{random_part}:{self._issuer}".encode()
        )
        token = _DISALLOWED.sub("", f"{random_part}{signature}")[:TOKEN_LENGTH]
        while len(token) < TOKEN_LENGTH:
            token += secrets.choice(TOKEN_ALPHABET)
        return token

    @staticmethod
    def validate_format(token: str | None) -> bool:
        """Return True if ``token`` has the right length and alphabet."""
        if not isinstance(token, str):
            return False
        return _TOKEN_PATTERN.fullmatch(token) is not None

    def create_metadata(self, identity: str) -> TokenMetadata:
        now = self._clock()
        return TokenMetadata(email=identity, created_at=now, last_used=now, issued_by=self._issuer)

    def create_token_with_metadata(self, identity: str) -> tuple[str, TokenMetadata]:
        """Issue a token and the metadata describing its binding."""
        return self.issue(identity), self.create_metadata(identity)
