"""Application settings and configuration.

This module defines all configuration options for the Justify API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Justify API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    enable_request_logging: bool = Field(default=True, alias="ENABLE_REQUEST_LOGGING")

    # Text justification
    line_width: int = Field(default=80, ge=1, alias="LINE_WIDTH")
    max_text_length: int = Field(default=100_000, ge=1, alias="MAX_TEXT_LENGTH")

    # Word quota (sliding window)
    daily_word_limit: int = Field(default=80_000, ge=0, alias="DAILY_WORD_LIMIT")
    rate_limit_window_seconds: int = Field(
        default=24 * 60 * 60,
        gt=0,
        alias="RATE_LIMIT_WINDOW_SECONDS",
    )
    usage_sweep_interval_seconds: float = Field(
        default=4 * 60 * 60,
        gt=0,
        alias="USAGE_SWEEP_INTERVAL_SECONDS",
    )

    # Token issuance and storage
    token_issuer: str = Field(default="justify-api", alias="TOKEN_ISSUER")
    token_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0, alias="TOKEN_TTL_SECONDS")
    max_tokens_per_identity: int = Field(default=5, ge=1, alias="MAX_TOKENS_PER_IDENTITY")
    max_email_length: int = Field(default=100, ge=3, alias="MAX_EMAIL_LENGTH")
    token_sweep_interval_seconds: float = Field(
        default=60 * 60,
        gt=0,
        alias="TOKEN_SWEEP_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
