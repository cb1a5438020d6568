from __future__ import annotations


def test_preserves_incoming_request_id_header(client):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_error_body_carries_request_id(client):
    resp = client.get("/v1/matches/missing", headers={"X-Request-ID": "req-404"})

    assert resp.status_code == 404
    assert resp.json()["error"]["request_id"] == "req-404"
    assert resp.headers["X-Request-ID"] == "req-404"


def test_health_reports_store_sizes(client, cache, limiter):
    cache.set("summary:default", {}, ttl_seconds=60)

    body = client.get("/health").json()

    assert body == {"status": "ok", "cache_entries": 1, "rate_limit_keys": 0}


def test_openapi_documents_auth_schemes(client):
    schema = client.get("/openapi.json").json()

    schemes = schema["components"]["securitySchemes"]
    assert schemes["UserId"]["name"] == "X-User-Id"
    assert schemes["CronSecret"]["name"] == "X-Cron-Secret"
    assert schema["paths"]["/v1/rooms/{room_id}/votes"]["post"]["security"] == [{"UserId": []}]
    assert schema["paths"]["/v1/rooms/{room_id}/summary"]["get"]["security"] == []
