# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from justify_api.core.settings import Settings
from justify_api.main import create_app
from justify_api.services.justify_service import JustifyService
from justify_api.services.rate_limiter import RateLimiter
from justify_api.services.token_issuer import TokenIssuer
from justify_api.services.token_registry import TokenRegistry

TEST_EMAIL = "a@b.com"
START_TIME = datetime(2025, 10, 25, 12, 0, tzinfo=UTC)


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def test_settings() -> Settings:
    """Provide settings with the production defaults and quiet request logs."""
    return Settings(enable_request_logging=False)


@pytest.fixture()
def issuer(test_settings: Settings, clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(test_settings.token_issuer, clock=clock)


@pytest.fixture()
def registry(clock: FakeClock) -> TokenRegistry:
    return TokenRegistry(ttl=timedelta(hours=24), max_tokens_per_identity=5, clock=clock)


@pytest.fixture()
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(80_000, timedelta(hours=24), clock=clock)


@pytest.fixture()
def service(
    issuer: TokenIssuer,
    registry: TokenRegistry,
    limiter: RateLimiter,
    test_settings: Settings,
) -> JustifyService:
    return JustifyService(
        issuer=issuer,
        registry=registry,
        limiter=limiter,
        config=test_settings,
    )


@pytest.fixture()
def app(service: JustifyService) -> FastAPI:
    return create_app(service)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_token(client: TestClient) -> str:
    """Return a freshly issued token for the primary test identity."""
    response = client.post("/api/token", json={"email": TEST_EMAIL})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture()
def auth_headers(auth_token: str) -> dict[str, str]:
    """Return authorization headers for the primary test identity."""
    return {"Authorization": f"Bearer {auth_token}"}
