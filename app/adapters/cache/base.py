"""Cache interfaces."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Callable


class AbstractCache(ABC):
    """Key/value cache with per-entry time-to-live.

    A miss is reported as ``None``; no operation raises for unknown keys.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None if missing/expired."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store value under key for ttl_seconds, replacing any previous value."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""
        raise NotImplementedError

    @abstractmethod
    def invalidate_where(self, predicate: Callable[[str], bool]) -> int:
        """Remove every key for which predicate(key) is true.

        Returns:
            Number of entries removed.
        """
        raise NotImplementedError

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix."""
        return self.invalidate_where(lambda key: key.startswith(prefix))

    def invalidate_pattern(self, pattern: str | re.Pattern[str]) -> int:
        """Remove every key matched by a regular expression (``re.search``)."""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.invalidate_where(lambda key: regex.search(key) is not None)

    @abstractmethod
    def cleanup(self) -> int:
        """Drop all expired entries and return how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def size(self) -> int:
        """Return the number of stored entries, expired ones included."""
        raise NotImplementedError
