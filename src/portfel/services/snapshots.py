"""Persistence of the last-reported portfolio valuation."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Iterable, Optional

from ..domain.storage import KeyValueStorage
from ..keys import LAST_REPORT_SNAPSHOT_KEY
from ..logging_config import get_logger
from ..models.position import Position
from ..models.report import PortfolioSnapshot, SnapshotPosition
from .calculations import calculate_pnl, calculate_pnl_percent

logger = get_logger("snapshots")


def build_snapshot(
    positions: Iterable[Position], *, total_value: float, timestamp: datetime
) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        timestamp=timestamp,
        total_value=total_value,
        positions={
            pos.symbol: SnapshotPosition(
                quantity=pos.quantity,
                current_price=pos.current_price,
                pnl=calculate_pnl(pos),
                pnl_percent=calculate_pnl_percent(pos),
            )
            for pos in positions
        },
    )


class SnapshotStore:
    """Holds exactly one snapshot, overwritten on every save."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    async def load_snapshot(self) -> Optional[PortfolioSnapshot]:
        """Return the stored snapshot; missing or corrupted data yields ``None``."""
        try:
            data = await self.storage.get_item(LAST_REPORT_SNAPSHOT_KEY)
            if not data:
                return None
            return PortfolioSnapshot.from_dict(json.loads(data))
        except Exception as exc:
            logger.error(f"Failed to get last snapshot: {exc}", exc_info=True)
            return None

    async def save_snapshot(self, snapshot: PortfolioSnapshot) -> bool:
        try:
            await self.storage.set_item(LAST_REPORT_SNAPSHOT_KEY, json.dumps(snapshot.to_dict()))
            return True
        except Exception as exc:
            logger.error(f"Failed to save portfolio snapshot: {exc}", exc_info=True)
            return False

    async def clear_snapshot(self) -> bool:
        try:
            await self.storage.remove_item(LAST_REPORT_SNAPSHOT_KEY)
            return True
        except Exception as exc:
            logger.error(f"Failed to clear snapshot: {exc}", exc_info=True)
            return False
