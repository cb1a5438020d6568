"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It points settings at the testing environment before anything imports them.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

# Set default env vars that all tests might need
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.adapters.cache.in_memory import InMemoryTTLCache
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.adapters.store.in_memory import InMemoryStore
from app.api.deps import get_cache, get_llm_client, get_store
from app.core.app_factory import create_app
from app.core.rate_limit import get_rate_limiter


class FakeClock:
    """Manually advanced time source for TTL and window tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLLM:
    """LLM double returning a canned completion and recording prompts."""

    def __init__(self, output: str = "", error: Exception | None = None) -> None:
        self.output = output
        self.error = error
        self.prompts: list[str] = []

    async def generate_text(self, prompt: str, *, system: str | None = None, **kwargs) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryTTLCache:
    return InMemoryTTLCache(clock=clock)


@pytest.fixture
def limiter(clock: FakeClock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(clock=clock)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def app(
    cache: InMemoryTTLCache,
    limiter: InMemoryFixedWindowRateLimiter,
    store: InMemoryStore,
    llm: FakeLLM,
) -> FastAPI:
    """App instance wired to fresh in-memory collaborators."""
    application = create_app()
    application.dependency_overrides[get_cache] = lambda: cache
    application.dependency_overrides[get_rate_limiter] = lambda: limiter
    application.dependency_overrides[get_store] = lambda: store
    application.dependency_overrides[get_llm_client] = lambda: llm
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
