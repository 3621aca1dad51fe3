"""Key-value storage port."""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStorage(Protocol):
    """Asynchronous string storage the notification core is written against.

    Every method may raise; callers decide whether a failure is fail-soft.
    """

    async def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or ``None`` when the key is absent."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def remove_item(self, key: str) -> None:
        """Delete ``key``; removing a missing key is not an error."""
        ...
