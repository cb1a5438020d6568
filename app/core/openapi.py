"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- Security schemes for the forwarded user id (``X-User-Id``) and the cron
  secret (``X-Cron-Secret``), applied per operation

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from app.core.config import settings

TAGS_METADATA = [
    {"name": "Rooms", "description": "Stance votes, vote threads and AI summaries per room."},
    {"name": "Hot Topics", "description": "User-proposed yes/no questions ranked by velocity."},
    {"name": "Matches", "description": "Match lookups."},
    {"name": "Jobs", "description": "Scheduled maintenance jobs (cron secret required)."},
    {"name": "Health", "description": "Liveness checks."},
]


def _security_for(path: str, method: str) -> list[dict[str, list]]:
    if "/jobs/" in path:
        return [{"CronSecret": []}]
    if method == "post":
        return [{"UserId": []}]
    return []


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and security schemes.

    Write routes are documented as requiring the forwarded user id, jobs as
    requiring the cron secret, and read routes as public.
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "UserId",
            {
                "type": "apiKey",
                "in": "header",
                "name": settings.app.user_id_header,
                "description": "User id forwarded by the upstream identity provider.",
            },
        )
        security_schemes.setdefault(
            "CronSecret",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-Cron-Secret",
                "description": "Shared secret for scheduled jobs.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            for method, method_obj in methods.items():
                if isinstance(method_obj, dict):
                    method_obj["security"] = _security_for(path, method)

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
