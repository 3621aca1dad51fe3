"""Persistence for the user's positions (one position per symbol)."""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, Iterable, Optional

from ..domain.storage import KeyValueStorage
from ..keys import PORTFOLIO_KEY
from ..logging_config import get_logger
from ..models.position import Position

logger = get_logger("portfolio_store")


class PortfolioStore:
    """Reads and writes the whole position list as a single JSON blob."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    async def load_portfolio(self) -> list[Position]:
        """Return stored positions; missing or corrupted data yields ``[]``."""
        try:
            data = await self.storage.get_item(PORTFOLIO_KEY)
            if not data:
                return []
            parsed = json.loads(data)
            if not isinstance(parsed, list):
                logger.error("Invalid portfolio data format")
                return []
            return [Position.from_dict(item) for item in parsed]
        except Exception as exc:
            logger.error(f"Failed to load portfolio: {exc}", exc_info=True)
            return []

    async def save_portfolio(self, positions: Iterable[Position]) -> bool:
        try:
            serialized = json.dumps([pos.to_dict() for pos in positions])
            await self.storage.set_item(PORTFOLIO_KEY, serialized)
            return True
        except Exception as exc:
            logger.error(f"Failed to save portfolio: {exc}", exc_info=True)
            return False

    async def add_position(self, position: Position) -> bool:
        """Add a position, merging into an existing one with the same symbol.

        A merge sums quantities, recomputes the weighted average purchase
        price, takes the newer current price and keeps the earlier purchase
        date.
        """
        positions = await self.load_portfolio()
        for index, existing in enumerate(positions):
            if existing.symbol != position.symbol:
                continue
            total_quantity = existing.quantity + position.quantity
            total_cost = (
                existing.purchase_price * existing.quantity
                + position.purchase_price * position.quantity
            )
            positions[index] = replace(
                existing,
                quantity=total_quantity,
                purchase_price=total_cost / total_quantity,
                current_price=position.current_price,
                purchase_date=min(existing.purchase_date, position.purchase_date),
            )
            break
        else:
            positions.append(position)
        return await self.save_portfolio(positions)

    async def remove_position(self, symbol: str) -> bool:
        positions = await self.load_portfolio()
        return await self.save_portfolio(p for p in positions if p.symbol != symbol)

    async def update_position(self, symbol: str, **updates: Any) -> bool:
        """Apply field updates (e.g. ``current_price=61.5``) to one position."""
        if "symbol" in updates:
            raise ValueError("The symbol of a position cannot be changed")
        positions = await self.load_portfolio()
        for index, existing in enumerate(positions):
            if existing.symbol == symbol:
                positions[index] = replace(existing, **updates)
                return await self.save_portfolio(positions)
        logger.error(f"Position {symbol} not found")
        return False

    async def get_position(self, symbol: str) -> Optional[Position]:
        positions = await self.load_portfolio()
        return next((p for p in positions if p.symbol == symbol), None)

    async def clear_portfolio(self) -> bool:
        try:
            await self.storage.remove_item(PORTFOLIO_KEY)
            return True
        except Exception as exc:
            logger.error(f"Failed to clear portfolio: {exc}", exc_info=True)
            return False

    async def import_positions(self, positions: Iterable[Position]) -> tuple[int, list[str]]:
        """Add each position in turn; returns ``(imported, errors)``."""
        imported = 0
        errors: list[str] = []
        for position in positions:
            if await self.add_position(position):
                imported += 1
            else:
                errors.append(f"Failed to import {position.symbol}")
        return imported, errors


__all__ = ["PortfolioStore"]
