"""Concrete key-value storage adapters."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import select

from ..models.kv import StoredItem
from .database import SessionFactory


class InMemoryStorage:
    """Dict-backed storage for tests and hosts without persistence."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)

    def clear(self) -> None:
        self._items.clear()


class SQLModelKeyValueStorage:
    """Storage adapter persisting one ``StoredItem`` row per key."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    def _get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            item = session.exec(select(StoredItem).where(StoredItem.key == key)).first()
            return item.value if item else None

    def _set(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            item = session.exec(select(StoredItem).where(StoredItem.key == key)).first()
            if item:
                item.value = value
                item.updated_at = datetime.now(timezone.utc)
            else:
                item = StoredItem(key=key, value=value)
            session.add(item)

    def _remove(self, key: str) -> None:
        with self.session_factory() as session:
            item = session.exec(select(StoredItem).where(StoredItem.key == key)).first()
            if item:
                session.delete(item)


__all__ = ["InMemoryStorage", "SQLModelKeyValueStorage"]
