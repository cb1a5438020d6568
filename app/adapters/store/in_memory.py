"""In-memory table store.

Used when no external store is configured and throughout the test-suite.
Rows are copied on the way in and out so callers can't mutate stored state.
No method awaits between reading and writing a table, so operations are
atomic on the event loop.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Sequence

from app.adapters.store.base import AbstractStore, Row
from app.core.errors import StoreAppError


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _matches(
    row: Row,
    eq: dict[str, Any] | None,
    gte: tuple[str, Any] | None,
    ilike: tuple[str, str] | None,
) -> bool:
    if eq and any(row.get(column) != value for column, value in eq.items()):
        return False
    if gte is not None:
        column, value = gte
        if row.get(column) is None or row[column] < value:
            return False
    if ilike is not None:
        column, text = ilike
        if text.lower() not in str(row.get(column) or "").lower():
            return False
    return True


class InMemoryStore(AbstractStore):
    """Dict-of-lists store keyed by table name."""

    def __init__(self, tables: dict[str, list[Row]] | None = None) -> None:
        self._tables: dict[str, list[Row]] = copy.deepcopy(tables) if tables else {}

    async def select(
        self,
        table: str,
        *,
        eq: dict[str, Any] | None = None,
        gte: tuple[str, Any] | None = None,
        ilike: tuple[str, str] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        rows = [row for row in self._tables.get(table, []) if _matches(row, eq, gte, ilike)]

        if order_by is not None:
            # Rows missing the column sort last in either direction.
            present = [row for row in rows if row.get(order_by) is not None]
            missing = [row for row in rows if row.get(order_by) is None]
            present.sort(key=lambda row: row[order_by], reverse=descending)
            rows = present + missing
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def insert(self, table: str, row: Row) -> Row:
        stored = copy.deepcopy(row)
        stored.setdefault("id", uuid.uuid4().hex)
        stored.setdefault("created_at", utc_now_iso())
        self._tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    async def upsert(self, table: str, row: Row, *, on_conflict: Sequence[str]) -> Row:
        if not on_conflict or any(column not in row for column in on_conflict):
            raise StoreAppError(
                code="store_invalid_upsert",
                message="Upsert row must carry every conflict column",
                details={"table": table},
            )

        rows = self._tables.setdefault(table, [])
        for existing in rows:
            if all(existing.get(column) == row.get(column) for column in on_conflict):
                existing.update(copy.deepcopy(row))
                existing["updated_at"] = utc_now_iso()
                return copy.deepcopy(existing)

        return await self.insert(table, row)

    async def update(self, table: str, values: Row, *, eq: dict[str, Any]) -> int:
        changed = 0
        for row in self._tables.get(table, []):
            if _matches(row, eq, None, None):
                row.update(copy.deepcopy(values))
                changed += 1
        return changed
