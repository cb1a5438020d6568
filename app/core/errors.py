"""Application-level exception types.

Domain errors raised by services and adapters. The global exception handlers
map each subclass to an HTTP status so route handlers stay thin.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    max_chars: int
    actual_chars: int
    allowed: list[str]
    room_id: str
    topic_id: str
    match_id: str
    table: str
    model: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when a request payload or config value is invalid."""


class AuthenticationAppError(AppError):
    """Raised when the caller is not authenticated for the operation."""


class NotFoundAppError(AppError):
    """Raised when a match, room or hot topic does not exist."""


class LLMAppError(AppError):
    """Raised when summarization via the LLM provider fails."""


class StoreAppError(AppError):
    """Raised when the backing store rejects a read or write."""
