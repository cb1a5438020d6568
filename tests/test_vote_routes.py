"""Integration tests for stance votes, vote threads and room summaries."""

import pytest

from app.core.cache_keys import summary_key, votes_key
from app.core.config import settings

USER = {"X-User-Id": "user-1"}


def _vote(client, stance="support", comment="Great pressing", room="default", headers=USER):
    return client.post(f"/v1/rooms/{room}/votes", json={"stance": stance, "comment": comment}, headers=headers)


class TestSubmitVote:
    def test_accepts_vote(self, client, store) -> None:
        resp = _vote(client, comment="  Great pressing  ")

        assert resp.status_code == 200
        body = resp.json()
        assert body["accepted"] is True
        assert body["roomId"] == "default"
        assert body["receivedAt"]
        assert resp.headers["X-RateLimit-Remaining"] == "9"

    def test_eleventh_vote_in_a_minute_is_throttled(self, client, clock) -> None:
        for _ in range(10):
            assert _vote(client).status_code == 200

        blocked = _vote(client)
        assert blocked.status_code == 429
        assert int(blocked.headers["Retry-After"]) >= 1

        clock.advance(61)
        assert _vote(client).status_code == 200

    def test_limits_are_per_user(self, client) -> None:
        for _ in range(10):
            _vote(client)

        assert _vote(client, headers={"X-User-Id": "user-2"}).status_code == 200

    def test_requires_user(self, client) -> None:
        resp = _vote(client, headers={})

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Unauthorized"

    def test_unauthenticated_request_does_not_use_budget(self, client, limiter) -> None:
        _vote(client, headers={})

        assert limiter.size() == 0

    def test_anonymous_votes_limited_by_address(self, client, limiter, monkeypatch) -> None:
        monkeypatch.setattr(settings.app, "allow_anonymous_votes", True)
        headers = {"X-Forwarded-For": "203.0.113.7"}

        for _ in range(10):
            assert _vote(client, headers=headers).status_code == 200
        assert _vote(client, headers=headers).status_code == 429
        assert _vote(client, headers={"X-Forwarded-For": "203.0.113.8"}).status_code == 200

    def test_comment_too_long(self, client) -> None:
        resp = _vote(client, comment="x" * 301)

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "comment_too_long"

    def test_comment_at_limit_is_accepted(self, client) -> None:
        assert _vote(client, comment="x" * 300).status_code == 200

    def test_unknown_stance_is_rejected(self, client) -> None:
        assert _vote(client, stance="maybe").status_code == 422


class TestInvalidation:
    def test_vote_drops_summary_and_room_threads(self, client, cache) -> None:
        cache.set(summary_key("default"), {"stale": True}, ttl_seconds=300)
        cache.set(votes_key("default", "support"), {"stale": True}, ttl_seconds=120)
        cache.set(votes_key("default", topic="press", limit=20), {"stale": True}, ttl_seconds=120)
        cache.set(votes_key("default10", "support"), {"other": True}, ttl_seconds=120)
        cache.set(summary_key("other"), {"other": True}, ttl_seconds=300)

        assert _vote(client).status_code == 200

        assert cache.get(summary_key("default")) is None
        assert cache.get(votes_key("default", "support")) is None
        assert cache.get(votes_key("default", topic="press", limit=20)) is None
        assert cache.get(votes_key("default10", "support")) == {"other": True}
        assert cache.get(summary_key("other")) == {"other": True}

    def test_thread_shows_new_vote_after_write(self, client) -> None:
        first = client.get("/v1/rooms/default/threads")
        assert first.headers["X-Cache"] == "MISS"
        assert first.json()["items"] == []

        assert client.get("/v1/rooms/default/threads").headers["X-Cache"] == "HIT"

        _vote(client, comment="Keeper had a great game")

        after = client.get("/v1/rooms/default/threads")
        assert after.headers["X-Cache"] == "MISS"
        assert [item["comment"] for item in after.json()["items"]] == ["Keeper had a great game"]


class TestThreads:
    @pytest.fixture(autouse=True)
    def _seed(self, store) -> None:
        store._tables["votes"] = [
            {"id": "v1", "room_id": "default", "stance": "support", "comment": "Pressing was relentless",
             "user_id": "a", "created_at": "2026-01-01T10:00:00.000000+00:00"},
            {"id": "v2", "room_id": "default", "stance": "oppose", "comment": "Press conference was a mess",
             "user_id": "b", "created_at": "2026-01-01T10:01:00.000000+00:00"},
            {"id": "v3", "room_id": "default", "stance": "neutral", "comment": "VAR took forever",
             "user_id": "c", "created_at": "2026-01-01T10:02:00.000000+00:00"},
            {"id": "v4", "room_id": "other", "stance": "support", "comment": "Pressing",
             "user_id": "d", "created_at": "2026-01-01T10:03:00.000000+00:00"},
        ]

    def test_newest_first_for_room(self, client) -> None:
        body = client.get("/v1/rooms/default/threads").json()

        assert body["roomId"] == "default"
        assert [item["id"] for item in body["items"]] == ["v3", "v2", "v1"]
        assert "userId" not in body["items"][0]

    def test_filter_by_stance(self, client) -> None:
        body = client.get("/v1/rooms/default/threads", params={"stance": "oppose"}).json()

        assert body["stance"] == "oppose"
        assert [item["id"] for item in body["items"]] == ["v2"]

    def test_keyword_filter_is_case_insensitive(self, client) -> None:
        body = client.get("/v1/rooms/default/threads", params={"topic": "PRESS"}).json()

        assert [item["id"] for item in body["items"]] == ["v2", "v1"]

    def test_subtopic_takes_precedence(self, client) -> None:
        body = client.get(
            "/v1/rooms/default/threads",
            params={"topic": "press", "subtopic": "conference"},
        ).json()

        assert [item["id"] for item in body["items"]] == ["v2"]

    def test_limit(self, client) -> None:
        body = client.get("/v1/rooms/default/threads", params={"limit": 1}).json()

        assert [item["id"] for item in body["items"]] == ["v3"]

    def test_variants_are_cached_separately(self, client) -> None:
        assert client.get("/v1/rooms/default/threads", params={"stance": "support"}).headers["X-Cache"] == "MISS"
        assert client.get("/v1/rooms/default/threads", params={"stance": "oppose"}).headers["X-Cache"] == "MISS"
        assert client.get("/v1/rooms/default/threads", params={"stance": "support"}).headers["X-Cache"] == "HIT"

    def test_default_page_uses_plain_key(self, client, cache) -> None:
        client.get("/v1/rooms/default/threads")
        client.get("/v1/rooms/default/threads", params={"stance": "support"})
        client.get("/v1/rooms/default/threads", params={"limit": 20})

        assert cache.get(votes_key("default")) is not None
        assert cache.get(votes_key("default", "support")) is not None
        assert cache.get(votes_key("default", limit=20)) is not None
        assert client.get("/v1/rooms/default/threads", params={"limit": 50}).headers["X-Cache"] == "HIT"

    def test_cached_thread_expires(self, client, clock) -> None:
        client.get("/v1/rooms/default/threads")

        clock.advance(121)
        assert client.get("/v1/rooms/default/threads").headers["X-Cache"] == "MISS"


class TestSummaryRoute:
    def test_placeholder_before_first_snapshot(self, client) -> None:
        resp = client.get("/v1/rooms/default/summary")

        assert resp.status_code == 200
        body = resp.json()
        assert body["roomId"] == "default"
        assert body["topics"] == []
        assert resp.headers["X-Cache"] == "MISS"
        assert resp.headers["Cache-Control"] == "public, max-age=300, stale-while-revalidate=60"
        assert resp.headers["X-Updated-At"] == body["updatedAt"]

    def test_second_read_is_a_hit(self, client) -> None:
        client.get("/v1/rooms/default/summary")

        assert client.get("/v1/rooms/default/summary").headers["X-Cache"] == "HIT"

    def test_latest_live_snapshot_is_served(self, client, store) -> None:
        topic = {
            "id": "t1",
            "title": "Pressing",
            "counts": {"support": 2, "oppose": 1, "neutral": 0},
            "supportSummary": "Fans loved it.",
            "opposeSummary": "Too risky.",
            "neutralSummary": "",
        }
        store._tables["summaries"] = [
            {"id": "s1", "room_id": "default", "snapshot": "live", "created_at": "2026-01-01T09:00:00+00:00",
             "payload": {"matchLabel": "Old", "batchPolicy": "p", "topics": []}},
            {"id": "s2", "room_id": "default", "snapshot": "live", "created_at": "2026-01-01T10:00:00+00:00",
             "payload": {"matchLabel": "A vs B", "batchPolicy": "p", "topics": [topic]}},
        ]

        body = client.get("/v1/rooms/default/summary").json()

        assert body["matchLabel"] == "A vs B"
        assert body["updatedAt"] == "2026-01-01T10:00:00+00:00"
        assert body["topics"][0]["counts"]["support"] == 2
