"""Shared FastAPI dependencies.

The cache, store and LLM client are process-wide and created lazily on first
use. Routes never touch the module globals directly; they receive instances
through Depends(), which tests replace via ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from app.adapters.cache.base import AbstractCache
from app.adapters.cache.in_memory import InMemoryTTLCache
from app.adapters.llm.base import AbstractLLMClient
from app.adapters.llm.factory import create_llm_client
from app.adapters.store.base import AbstractStore
from app.adapters.store.in_memory import InMemoryStore
from app.core.errors import ValidationAppError
from app.services.hot_topic_service import HotTopicService
from app.services.match_service import MatchService
from app.services.summary_service import SummaryService
from app.services.vote_service import VoteService

logger = logging.getLogger(__name__)

_cache: AbstractCache | None = None
_store: AbstractStore | None = None
_llm_client: AbstractLLMClient | None = None


def get_cache() -> AbstractCache:
    global _cache

    if _cache is None:
        _cache = InMemoryTTLCache()
    return _cache


def get_store() -> AbstractStore:
    global _store

    if _store is None:
        _store = InMemoryStore()
    return _store


def get_llm_client() -> AbstractLLMClient | None:
    """Return the LLM client, or None when the provider isn't configured.

    Summaries are optional: reads still work without a provider, only the
    summarize job fails.
    """
    global _llm_client

    if _llm_client is None:
        try:
            _llm_client = create_llm_client()
        except ValidationAppError as exc:
            logger.warning("llm.unavailable", extra={"error_code": exc.code})
            return None
    return _llm_client


CacheDep = Annotated[AbstractCache, Depends(get_cache)]
StoreDep = Annotated[AbstractStore, Depends(get_store)]


def get_vote_service(store: StoreDep, cache: CacheDep) -> VoteService:
    return VoteService(store=store, cache=cache)


def get_summary_service(
    store: StoreDep,
    cache: CacheDep,
    llm: Annotated[AbstractLLMClient | None, Depends(get_llm_client)],
) -> SummaryService:
    return SummaryService(store=store, cache=cache, llm=llm)


def get_hot_topic_service(store: StoreDep, cache: CacheDep) -> HotTopicService:
    return HotTopicService(store=store, cache=cache)


def get_match_service(store: StoreDep, cache: CacheDep) -> MatchService:
    return MatchService(store=store, cache=cache)
