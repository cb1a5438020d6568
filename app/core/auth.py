"""Caller identity and job authorization.

Sign-in is handled by an upstream identity provider; requests reach this
service with the authenticated user id in a trusted header (``X-User-Id``
by default, see APP_USER_ID_HEADER). Scheduled jobs authenticate with a
shared cron secret instead.
"""

from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Query, Request, status

from app.core.config import settings
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def get_current_user_id(request: Request) -> str | None:
    """Return the authenticated user id, or None for anonymous callers."""

    value = request.headers.get(settings.app.user_id_header, "").strip()
    return value or None


def require_user(
    user_id: Annotated[str | None, Depends(get_current_user_id)],
) -> str:
    """Dependency for routes that only authenticated users may call.

    Raises:
        HTTPException: 401 Unauthorized when no user id is present.
    """
    if not user_id:
        logger.warning("auth.missing_user", extra={"header": settings.app.user_id_header})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return user_id


def voter_identity(
    user_id: Annotated[str | None, Depends(get_current_user_id)],
) -> str | None:
    """Identity for stance votes; anonymous votes are allowed only when enabled."""

    if user_id or settings.app.allow_anonymous_votes:
        return user_id
    return require_user(user_id)


def validate_cron_secret(provided: str | None) -> None:
    """Check a job caller's secret against APP_CRON_SECRET.

    No secret configured means jobs are open (local development).

    Raises:
        AuthenticationAppError: If a secret is configured and doesn't match.
    """
    expected = settings.app.cron_secret
    if not expected:
        return

    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning(
            "cron_secret_validation_failed",
            extra={
                "secret_present": bool(provided),
                "secret_hash": hash_identifier(provided) if provided else None,
            },
        )
        raise AuthenticationAppError(
            code="invalid_cron_secret",
            message="Unauthorized",
        )


async def verify_cron_secret(
    x_cron_secret: Annotated[str | None, Header(alias="X-Cron-Secret")] = None,
    secret: Annotated[str | None, Query()] = None,
) -> None:
    """FastAPI dependency guarding /v1/jobs/* routes.

    The secret may arrive as the X-Cron-Secret header or the ``secret``
    query parameter (for schedulers that can't set headers).

    Raises:
        HTTPException: 401 Unauthorized on a missing or wrong secret.
    """
    try:
        validate_cron_secret(x_cron_secret or secret)
    except AuthenticationAppError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
        ) from exc
