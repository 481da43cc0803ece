# tests/test_core.py
import logging

import pytest
from pydantic import ValidationError

from justify_api.core.errors import (
    STATUS_BY_KIND,
    AuthReason,
    ErrorKind,
    ServiceError,
    auth_error,
    internal_error,
)
from justify_api.core.log import configure_logging, mask_token
from justify_api.core.settings import Settings
from justify_api.utils.hash import blake3_hexdigest


def test_settings_defaults() -> None:
    config = Settings()
    assert config.line_width == 80
    assert config.daily_word_limit == 80_000
    assert config.rate_limit_window_seconds == 86_400
    assert config.token_ttl_seconds == 86_400
    assert config.max_tokens_per_identity == 5
    assert config.api_prefix == "/api"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINE_WIDTH", "40")
    monkeypatch.setenv("DAILY_WORD_LIMIT", "1000")
    config = Settings()
    assert config.line_width == 40
    assert config.daily_word_limit == 1000


def test_settings_reject_invalid_width(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINE_WIDTH", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_status_mapping() -> None:
    assert STATUS_BY_KIND == {
        ErrorKind.VALIDATION: 400,
        ErrorKind.AUTH: 401,
        ErrorKind.QUOTA_EXCEEDED: 402,
        ErrorKind.INTERNAL: 500,
    }
    assert internal_error().error.to_payload() == {
        "error": "Internal server error",
        "kind": "internal_error",
    }


def test_payload_merges_details() -> None:
    error = ServiceError(kind=ErrorKind.QUOTA_EXCEEDED, message="over", details={"limit": 5})
    assert error.to_payload() == {"error": "over", "kind": "quota_exceeded", "limit": 5}
    assert auth_error(AuthReason.MISSING, "no").error.to_payload()["reason"] == "missing"


def test_configure_logging_is_idempotent() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("WARNING")
        configure_logging("WARNING")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

        configure_logging("bogus")
        assert root.level == logging.INFO

        configure_logging("WARNING", debug=True)
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_mask_token() -> None:
    assert mask_token("abcdefghijklmnop") == "abcdefgh..."
    assert mask_token("") == "<empty>"


def test_blake3_hexdigest() -> None:
    digest = blake3_hexdigest(b"hello")
    assert len(digest) == 64
    assert digest == blake3_hexdigest(b"hello")
    assert digest != blake3_hexdigest(b"hello!")
