"""Key-value rows backing the persistent storage adapter."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredItem(SQLModel, table=True):
    """One serialized blob per storage key."""

    __tablename__: ClassVar[str] = "stored_item"

    key: str = Field(primary_key=True, max_length=128)
    # Blobs such as the notification history exceed VARCHAR limits
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
