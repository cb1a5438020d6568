"""Backing store adapters (external table store behind a small interface)."""

from app.adapters.store.base import AbstractStore, Row
from app.adapters.store.in_memory import InMemoryStore

__all__ = ["AbstractStore", "InMemoryStore", "Row"]
