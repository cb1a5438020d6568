"""Cache key builders and TTL policy for route responses.

Keys are ``<namespace>:<scope>[:<scope>...]``. Scope values are
percent-encoded so they can never contain the ``:`` delimiter; a prefix such
as ``votes:room1:`` therefore matches every variant for room1 and nothing
for room10 or for another namespace.

Example:
    >>> votes_key("default", "support")
    'votes:default:support'
    >>> votes_key("default", topic="press")
    'votes:default:all:t=press'
"""

from __future__ import annotations

from urllib.parse import quote

DELIMITER = ":"

SUMMARY = "summary"
VOTES = "votes"
MATCH = "match"
HOT_TOPICS = "hot_topics"


class CacheTTL:
    """Time-to-live per namespace, in seconds."""

    SUMMARY = 5 * 60
    VOTES = 2 * 60
    MATCH = 60
    HOT_TOPICS = 30


def _segment(value: str | int) -> str:
    return quote(str(value), safe="-_.~=")


def _join(namespace: str, *scopes: str | int) -> str:
    return DELIMITER.join([namespace, *(_segment(scope) for scope in scopes)])


def summary_key(room_id: str) -> str:
    return _join(SUMMARY, room_id)


def votes_key(
    room_id: str,
    stance: str | None = None,
    *,
    topic: str | None = None,
    subtopic: str | None = None,
    limit: int | None = None,
) -> str:
    """Build the key of one cached vote-thread page.

    Filters that are not set are left out, so the unfiltered page for a
    stance is exactly ``votes:<room>:<stance>``. VoteService passes limit
    only for non-default page sizes.
    """
    scopes: list[str | int] = [room_id, stance or "all"]
    if topic:
        scopes.append(f"t={topic}")
    if subtopic:
        scopes.append(f"s={subtopic}")
    if limit is not None:
        scopes.append(f"n={limit}")
    return _join(VOTES, *scopes)


def votes_room_prefix(room_id: str) -> str:
    """Prefix shared by every cached vote-thread variant of a room."""
    return _join(VOTES, room_id) + DELIMITER


def match_key(match_id: str) -> str:
    return _join(MATCH, match_id)


def hot_topics_key(room_id: str) -> str:
    return _join(HOT_TOPICS, room_id)
