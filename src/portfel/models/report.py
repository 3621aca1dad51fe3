"""Portfolio report, history and snapshot models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Mapping, Optional

from .notifications import NotificationType, parse_timestamp

ReportPeriod = Literal["daily", "weekly"]


@dataclass(frozen=True, slots=True)
class TopMover:
    symbol: str
    change_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {"symbol": self.symbol, "changePercent": self.change_percent}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TopMover":
        return cls(symbol=str(data["symbol"]), change_percent=float(data["changePercent"]))


@dataclass(frozen=True, slots=True)
class ReportSummary:
    total_value: float
    total_cost: float
    total_pnl: float
    total_pnl_percent: float
    position_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalValue": self.total_value,
            "totalCost": self.total_cost,
            "totalPnL": self.total_pnl,
            "totalPnLPercent": self.total_pnl_percent,
            "positionCount": self.position_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReportSummary":
        return cls(
            total_value=float(data["totalValue"]),
            total_cost=float(data["totalCost"]),
            total_pnl=float(data["totalPnL"]),
            total_pnl_percent=float(data["totalPnLPercent"]),
            position_count=int(data["positionCount"]),
        )


@dataclass(frozen=True, slots=True)
class ReportChanges:
    """Deltas against the previous snapshot; movers are omitted when absent."""

    value_change: float
    value_change_percent: float
    top_gainer: Optional[TopMover] = None
    top_loser: Optional[TopMover] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "valueChange": self.value_change,
            "valueChangePercent": self.value_change_percent,
        }
        if self.top_gainer is not None:
            payload["topGainer"] = self.top_gainer.to_dict()
        if self.top_loser is not None:
            payload["topLoser"] = self.top_loser.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReportChanges":
        gainer = data.get("topGainer")
        loser = data.get("topLoser")
        return cls(
            value_change=float(data["valueChange"]),
            value_change_percent=float(data["valueChangePercent"]),
            top_gainer=TopMover.from_dict(gainer) if gainer else None,
            top_loser=TopMover.from_dict(loser) if loser else None,
        )


@dataclass(frozen=True, slots=True)
class PositionDetail:
    symbol: str
    quantity: int
    current_price: float
    pnl: float
    pnl_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "quantity": self.quantity,
            "currentPrice": self.current_price,
            "pnl": self.pnl,
            "pnlPercent": self.pnl_percent,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PositionDetail":
        return cls(
            symbol=str(data["symbol"]),
            quantity=int(data["quantity"]),
            current_price=float(data["currentPrice"]),
            pnl=float(data["pnl"]),
            pnl_percent=float(data["pnlPercent"]),
        )


@dataclass(frozen=True, slots=True)
class PortfolioReport:
    """Summary-plus-delta for the portfolio at one point in time.

    ``positions`` is ``None`` when per-position detail was not requested, and
    an empty list when it was requested for an empty portfolio.
    """

    id: str
    generated_at: datetime
    period: ReportPeriod
    summary: ReportSummary
    changes: ReportChanges
    positions: Optional[list[PositionDetail]] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "generatedAt": self.generated_at.isoformat(),
            "period": self.period,
            "summary": self.summary.to_dict(),
            "changes": self.changes.to_dict(),
        }
        if self.positions is not None:
            payload["positions"] = [detail.to_dict() for detail in self.positions]
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PortfolioReport":
        raw_positions = data.get("positions")
        return cls(
            id=str(data["id"]),
            generated_at=parse_timestamp(data["generatedAt"]),
            period=data["period"],
            summary=ReportSummary.from_dict(data["summary"]),
            changes=ReportChanges.from_dict(data["changes"]),
            positions=(
                [PositionDetail.from_dict(item) for item in raw_positions]
                if raw_positions is not None
                else None
            ),
        )


@dataclass(slots=True)
class NotificationHistoryEntry:
    """A report that was sent as a notification; ``opened`` flips on tap."""

    id: str
    sent_at: datetime
    type: NotificationType
    report: PortfolioReport
    opened: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sentAt": self.sent_at.isoformat(),
            "type": self.type,
            "report": self.report.to_dict(),
            "opened": self.opened,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NotificationHistoryEntry":
        return cls(
            id=str(data["id"]),
            sent_at=parse_timestamp(data["sentAt"]),
            type=data["type"],
            report=PortfolioReport.from_dict(data["report"]),
            opened=bool(data.get("opened", False)),
        )


@dataclass(slots=True)
class SnapshotPosition:
    quantity: int
    current_price: float
    pnl: float
    pnl_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "quantity": self.quantity,
            "currentPrice": self.current_price,
            "pnl": self.pnl,
            "pnlPercent": self.pnl_percent,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SnapshotPosition":
        return cls(
            quantity=int(data["quantity"]),
            current_price=float(data["currentPrice"]),
            pnl=float(data["pnl"]),
            pnl_percent=float(data["pnlPercent"]),
        )


@dataclass(slots=True)
class PortfolioSnapshot:
    """Portfolio valuation as of the most recent report generation."""

    timestamp: datetime
    total_value: float
    positions: dict[str, SnapshotPosition] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "totalValue": self.total_value,
            "positions": {symbol: pos.to_dict() for symbol, pos in self.positions.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PortfolioSnapshot":
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            total_value=float(data["totalValue"]),
            positions={
                str(symbol): SnapshotPosition.from_dict(pos)
                for symbol, pos in data.get("positions", {}).items()
            },
        )
