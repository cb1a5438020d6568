"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_secrets():
    """Ensure SensitiveDataFilter redacts API keys and the cron secret."""

    logger, stream = _capture("test_redaction")

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "cron_secret": "cron-pass",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "sk-secret-123" not in output
    assert "cron-pass" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_user_text():
    """Ensure vote comments, reasons and raw model output are redacted."""

    logger, stream = _capture("test_user_text_redaction")

    logger.info(
        "vote_event",
        extra={
            "comment": "The referee was bribed, email me at fan@example.com",
            "reason": "Keeper is injured",
            "raw_output": "```json {...}",
            "room_id": "default",
        },
    )

    output = stream.getvalue()

    assert "fan@example.com" not in output
    assert "Keeper is injured" not in output
    assert "```json" not in output
    assert "default" in output


def test_sensitive_filter_allows_safe_fields():
    """Verify safe fields pass through unmodified."""

    logger, stream = _capture("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "route": "/v1/rooms/default/summary",
            "status": 200,
            "duration_ms": 150.5,
            "cache": "HIT",
        },
    )

    data = json.loads(stream.getvalue())

    assert data["route"] == "/v1/rooms/default/summary"
    assert data["status"] == 200
    assert data["cache"] == "HIT"
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts():
    """Ensure nested sensitive fields are redacted."""

    logger, stream = _capture("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "x-user-id": "user-42",
                "x-cron-secret": "cron-pass",
                "user-agent": "pytest",
            },
        },
    )

    output = stream.getvalue()

    assert "user-42" not in output
    assert "cron-pass" not in output
    assert "pytest" in output


def test_request_id_is_attached():
    logger, stream = _capture("test_request_id")

    set_request_id("req-123")
    try:
        logger.info("with_id")
    finally:
        clear_request_id()
    logger.info("without_id")

    first, second = (json.loads(line) for line in stream.getvalue().splitlines())
    assert first["request_id"] == "req-123"
    assert second.get("request_id") is None


def test_hash_identifier_is_stable_and_short():
    assert hash_identifier("vote:user:u1") == hash_identifier("vote:user:u1")
    assert hash_identifier("vote:user:u1") != hash_identifier("vote:user:u2")
    assert len(hash_identifier("anything")) == 16
