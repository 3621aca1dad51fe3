"""Portfolio position models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if "T" in text:
        # Payloads written by the mobile app carry a full ISO timestamp
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


@dataclass(slots=True)
class Position:
    """A single stock holding; the symbol is its identity within a portfolio."""

    symbol: str
    quantity: int
    purchase_price: float
    current_price: float
    purchase_date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "quantity": self.quantity,
            "purchasePrice": self.purchase_price,
            "currentPrice": self.current_price,
            "purchaseDate": self.purchase_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Position":
        return cls(
            symbol=str(data["symbol"]),
            quantity=int(data["quantity"]),
            purchase_price=float(data["purchasePrice"]),
            current_price=float(data["currentPrice"]),
            purchase_date=_parse_date(data["purchaseDate"]),
        )


@dataclass(slots=True)
class PortfolioSummary:
    """Aggregate valuation of a list of positions."""

    total_value: float
    total_cost: float
    total_pnl: float
    total_pnl_percent: float
    positions: list[Position] = field(default_factory=list)
