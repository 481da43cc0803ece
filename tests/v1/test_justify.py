"""Tests for the justification endpoints."""

from datetime import datetime, timedelta

from fastapi import status
from fastapi.testclient import TestClient

from justify_api.main import create_app
from justify_api.services.justify_service import JustifyService
from justify_api.services.rate_limiter import RateLimiter

from tests.conftest import TEST_EMAIL, FakeClock


def test_justify_single_word(client: TestClient, auth_headers: dict[str, str]) -> None:
    r = client.post("/api/justify", content="Hello", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "Hello" + " " * 75
    assert r.headers["X-Words-Used"] == "1"
    assert r.headers["X-Remaining-Words"] == "79999"


def test_justify_paragraph(client: TestClient, auth_headers: dict[str, str]) -> None:
    text = " ".join(["lorem ipsum dolor sit amet"] * 20)
    r = client.post("/api/justify", content=text, headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    lines = r.text.split("\n")
    assert len(lines) > 1
    assert all(len(line) == 80 for line in lines[:-1])
    assert r.text.split() == text.split()
    assert r.headers["X-Words-Used"] == "100"


def test_justify_reports_reset_time(
    client: TestClient, auth_headers: dict[str, str], clock: FakeClock
) -> None:
    r = client.post("/api/justify", content="one two", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    reset_at = datetime.fromisoformat(r.headers["X-Reset-At"])
    assert reset_at == clock.now + timedelta(hours=24)


def test_justify_accepts_unicode(client: TestClient, auth_headers: dict[str, str]) -> None:
    text = "Le cœur a ses raisons que la raison ne connaît point."
    r = client.post(
        "/api/justify",
        content=text.encode("utf-8"),
        headers={**auth_headers, "Content-Type": "text/plain; charset=utf-8"},
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.text.split() == text.split()


def test_justify_without_token(client: TestClient) -> None:
    r = client.post("/api/justify", content="Hello")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.headers["WWW-Authenticate"] == "Bearer"
    detail = r.json()["detail"]
    assert detail["kind"] == "auth_error"
    assert detail["reason"] == "missing"


def test_justify_with_non_bearer_scheme(client: TestClient, auth_token: str) -> None:
    r = client.post(
        "/api/justify", content="Hello", headers={"Authorization": f"Token {auth_token}"}
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["detail"]["reason"] == "missing"


def test_justify_with_malformed_token(client: TestClient) -> None:
    r = client.post("/api/justify", content="Hello", headers={"Authorization": "Bearer abc"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["detail"]["reason"] == "malformed"


def test_justify_with_unknown_token(client: TestClient) -> None:
    r = client.post(
        "/api/justify", content="Hello", headers={"Authorization": "Bearer " + "a" * 64}
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["detail"]["reason"] == "not_found"


def test_justify_with_expired_token(
    client: TestClient, auth_headers: dict[str, str], clock: FakeClock
) -> None:
    clock.advance(hours=25)
    r = client.post("/api/justify", content="Hello", headers=auth_headers)
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["detail"]["reason"] == "expired"


def test_justify_empty_body(client: TestClient, auth_headers: dict[str, str]) -> None:
    r = client.post("/api/justify", content=b"", headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["detail"]["error"] == "Text cannot be empty"


def test_justify_body_too_long(client: TestClient, auth_headers: dict[str, str]) -> None:
    r = client.post("/api/justify", content="a" * 100_001, headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert "Text too long" in r.json()["detail"]["error"]


def test_justify_invalid_utf8(client: TestClient, auth_headers: dict[str, str]) -> None:
    r = client.post("/api/justify", content=b"\xff\xfe\xfa", headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["detail"]["kind"] == "validation_error"


def test_justify_quota_exceeded(
    client: TestClient,
    auth_token: str,
    auth_headers: dict[str, str],
    service: JustifyService,
) -> None:
    service.limiter.record_usage(auth_token, 79_999)

    r = client.post("/api/justify", content="two words", headers=auth_headers)
    assert r.status_code == status.HTTP_402_PAYMENT_REQUIRED
    detail = r.json()["detail"]
    assert detail["kind"] == "quota_exceeded"
    assert detail["current_usage"] == 79_999
    assert detail["limit"] == 80_000
    assert detail["requested"] == 2
    assert detail["remaining_words"] == 1
    assert "reset_at" in detail

    r = client.post("/api/justify", content="one", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.headers["X-Remaining-Words"] == "0"


def test_quota_is_per_token(clock: FakeClock, issuer, registry, test_settings) -> None:
    small = JustifyService(
        issuer=issuer,
        registry=registry,
        limiter=RateLimiter(3, timedelta(hours=24), clock=clock),
        config=test_settings,
    )
    with TestClient(create_app(small)) as client:
        first = client.post("/api/token", json={"email": TEST_EMAIL}).json()["token"]
        second = client.post("/api/token", json={"email": TEST_EMAIL}).json()["token"]

        r = client.post(
            "/api/justify", content="a b c", headers={"Authorization": f"Bearer {first}"}
        )
        assert r.status_code == status.HTTP_200_OK
        r = client.post("/api/justify", content="d", headers={"Authorization": f"Bearer {first}"})
        assert r.status_code == status.HTTP_402_PAYMENT_REQUIRED
        r = client.post(
            "/api/justify", content="a b c", headers={"Authorization": f"Bearer {second}"}
        )
        assert r.status_code == status.HTTP_200_OK


def test_internal_errors_are_opaque(app, service: JustifyService, mocker) -> None:
    token = service.issue_token(TEST_EMAIL).value
    mocker.patch(
        "justify_api.services.justify_service.justify", side_effect=RuntimeError("secret detail")
    )
    with TestClient(app, raise_server_exceptions=False) as client:
        r = client.post(
            "/api/justify", content="Hello", headers={"Authorization": f"Bearer {token.token}"}
        )
    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert r.json()["detail"] == {"error": "Internal server error", "kind": "internal_error"}


def test_justify_health(client: TestClient, auth_headers: dict[str, str]) -> None:
    client.post("/api/justify", content="one two three", headers=auth_headers)

    r = client.get("/api/justify/health")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["module"] == "justify"
    assert data["stats"] == {
        "active_tokens": 1,
        "total_records": 1,
        "total_words": 3,
        "daily_limit": 80_000,
    }


def test_justify_stats(client: TestClient, auth_headers: dict[str, str]) -> None:
    client.post("/api/justify", content="one two three", headers=auth_headers)
    client.post("/api/justify", content="four", headers=auth_headers)

    r = client.get("/api/justify/stats", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["user"]["email"] == TEST_EMAIL
    assert data["user"]["daily_limit"] == 80_000
    assert data["user"]["usage"]["total_words"] == 4
    assert data["user"]["usage"]["record_count"] == 2
    assert data["global"]["total_words"] == 4


def test_justify_stats_requires_token(client: TestClient) -> None:
    r = client.get("/api/justify/stats")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
