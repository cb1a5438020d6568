"""Tests for the rate limiting FastAPI dependency."""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from app.core.config import settings
from app.core.rate_limit import (
    HOT_TOPIC_CREATE,
    VOTE,
    build_rate_limit_key,
    client_address,
    get_policy,
    get_rate_limiter,
    rate_limited,
)


def _request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = ("10.0.0.9", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    if client is not None:
        scope["client"] = client
    return Request(scope)


class TestKeyBuilding:
    def test_user_id_wins_over_address(self) -> None:
        request = _request({"X-Forwarded-For": "1.2.3.4"})
        assert build_rate_limit_key(VOTE, request, "user-1") == "vote:user:user-1"

    def test_first_forwarded_address(self) -> None:
        request = _request({"X-Forwarded-For": "1.2.3.4, 10.0.0.1"})
        assert build_rate_limit_key(VOTE, request, None) == "vote:ip:1.2.3.4"

    def test_real_ip_header(self) -> None:
        request = _request({"X-Real-IP": "5.6.7.8"})
        assert client_address(request) == "5.6.7.8"

    def test_socket_address_fallback(self) -> None:
        assert client_address(_request()) == "10.0.0.9"

    def test_unknown_without_any_source(self) -> None:
        assert client_address(_request(client=None)) == "unknown"

    def test_actions_do_not_share_keys(self) -> None:
        request = _request()
        assert build_rate_limit_key(VOTE, request, "u") != build_rate_limit_key(HOT_TOPIC_CREATE, request, "u")


def test_policies_come_from_settings(monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_hot_topic_create_requests", 7)

    policy = get_policy(HOT_TOPIC_CREATE)
    assert policy.max_requests == 7
    assert policy.window_seconds == settings.app.rate_limit_hot_topic_create_window_seconds


def test_unknown_action_fails_fast() -> None:
    with pytest.raises(KeyError):
        rate_limited("nope")


@pytest.fixture
def limited_app(limiter, monkeypatch) -> FastAPI:
    monkeypatch.setattr(settings.app, "rate_limit_vote_requests", 2)
    monkeypatch.setattr(settings.app, "rate_limit_vote_window_seconds", 60)

    app = FastAPI()
    app.dependency_overrides[get_rate_limiter] = lambda: limiter

    @app.post("/act", dependencies=[Depends(rate_limited(VOTE))])
    async def act() -> dict:
        return {"ok": True}

    return app


def test_allowed_responses_carry_remaining(limited_app) -> None:
    client = TestClient(limited_app)

    resp = client.post("/act", headers={"X-User-Id": "u1"})

    assert resp.status_code == 200
    assert resp.headers["X-RateLimit-Limit"] == "2"
    assert resp.headers["X-RateLimit-Remaining"] == "1"


def test_blocked_response_has_retry_headers(limited_app, clock) -> None:
    client = TestClient(limited_app)
    for _ in range(2):
        assert client.post("/act", headers={"X-User-Id": "u1"}).status_code == 200

    clock.advance(15)
    resp = client.post("/act", headers={"X-User-Id": "u1"})

    assert resp.status_code == 429
    assert resp.json()["detail"] == "Too many requests. Please try again later."
    assert resp.headers["Retry-After"] == "45"
    assert resp.headers["X-RateLimit-Limit"] == "2"
    assert resp.headers["X-RateLimit-Remaining"] == "0"
    assert resp.headers["X-RateLimit-Reset"] == str(int(clock.now - 15 + 60))


def test_other_users_unaffected(limited_app) -> None:
    client = TestClient(limited_app)
    for _ in range(3):
        client.post("/act", headers={"X-User-Id": "u1"})

    assert client.post("/act", headers={"X-User-Id": "u2"}).status_code == 200


def test_retry_after_sent_without_ratelimit_headers(limited_app, monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_include_headers", False)
    client = TestClient(limited_app)
    for _ in range(2):
        client.post("/act", headers={"X-User-Id": "u1"})

    resp = client.post("/act", headers={"X-User-Id": "u1"})

    assert resp.status_code == 429
    assert "Retry-After" in resp.headers
    assert "X-RateLimit-Limit" not in resp.headers


def test_disabled_limiting_lets_everything_through(limited_app, limiter, monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_enabled", False)
    client = TestClient(limited_app)

    for _ in range(5):
        assert client.post("/act", headers={"X-User-Id": "u1"}).status_code == 200
    assert limiter.size() == 0
