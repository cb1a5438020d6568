"""Backing store interface.

Persistence lives outside this service (a managed relational store). The
services only need a handful of table operations, modelled here so the
concrete client can be swapped without touching business logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

Row = dict[str, Any]


class AbstractStore(ABC):
    """Minimal table-oriented store used by the services.

    Implementations raise StoreAppError when the underlying store fails.
    """

    @abstractmethod
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
        """Return rows matching every given filter.

        Args:
            table: Table name.
            eq: Column/value pairs that must be equal.
            gte: (column, value) that must satisfy ``row[column] >= value``.
            ilike: (column, text) for a case-insensitive substring match.
            order_by: Column to sort by.
            descending: Sort direction.
            limit: Maximum number of rows.
        """
        raise NotImplementedError

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """Insert a row and return it with generated columns filled in."""
        raise NotImplementedError

    @abstractmethod
    async def upsert(self, table: str, row: Row, *, on_conflict: Sequence[str]) -> Row:
        """Insert a row, or update the existing row sharing the on_conflict columns."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, table: str, values: Row, *, eq: dict[str, Any]) -> int:
        """Update rows matching eq and return how many changed."""
        raise NotImplementedError
