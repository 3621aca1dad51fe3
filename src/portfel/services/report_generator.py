"""Portfolio report generation with change tracking and notification history."""

from __future__ import annotations

import json
import time
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence
from uuid import uuid4

from ..domain.storage import KeyValueStorage
from ..keys import NOTIFICATION_HISTORY_KEY
from ..logging_config import get_logger
from ..models.notifications import NotificationType
from ..models.position import PortfolioSummary, Position
from ..models.report import (
    NotificationHistoryEntry,
    PortfolioReport,
    PortfolioSnapshot,
    PositionDetail,
    ReportChanges,
    ReportPeriod,
    ReportSummary,
    TopMover,
)
from .calculations import calculate_pnl, calculate_pnl_percent, calculate_portfolio_summary
from .snapshots import SnapshotStore, build_snapshot

logger = get_logger("report_generator")

MAX_HISTORY_ENTRIES = 100


def _unique_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{uuid4().hex[:9]}"


def _signed(value: float) -> str:
    value += 0.0  # normalise -0.0
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}"


def format_currency(value: float) -> str:
    return f"{_signed(value)} PLN"


def format_percent(value: float) -> str:
    return f"{_signed(value)}%"


def format_notification_body(report: PortfolioReport) -> str:
    """Render a report as notification text, one fact per line.

    The first line prints the total value with a sign as if it were a delta;
    existing notifications look like this, so it is kept.
    """

    summary = report.summary
    changes = report.changes
    lines = [
        f"Portfolio: {format_currency(summary.total_value)} ({format_percent(summary.total_pnl_percent)})"
    ]
    if changes.value_change != 0:
        lines.append(
            f"Change: {format_currency(changes.value_change)} "
            f"({format_percent(changes.value_change_percent)})"
        )
    if changes.top_gainer is not None:
        lines.append(
            f"Top gainer: {changes.top_gainer.symbol} {format_percent(changes.top_gainer.change_percent)}"
        )
    if changes.top_loser is not None:
        lines.append(
            f"Top loser: {changes.top_loser.symbol} {format_percent(changes.top_loser.change_percent)}"
        )
    return "\n".join(lines)


def find_top_movers(
    positions: Iterable[Position], snapshot: PortfolioSnapshot
) -> tuple[Optional[TopMover], Optional[TopMover]]:
    """Return ``(top_gainer, top_loser)`` by price change since the snapshot.

    Symbols missing from the snapshot are new and never count as movers, and
    neither do symbols whose snapshot price was zero. The gainer must have
    risen and the loser must have fallen.
    """

    movers: list[TopMover] = []
    for position in positions:
        previous = snapshot.positions.get(position.symbol)
        if previous is None or previous.current_price == 0:
            continue
        change = (position.current_price - previous.current_price) / previous.current_price * 100
        movers.append(TopMover(symbol=position.symbol, change_percent=change))

    if not movers:
        return None, None

    movers.sort(key=lambda mover: mover.change_percent, reverse=True)
    top, bottom = movers[0], movers[-1]
    return (
        top if top.change_percent > 0 else None,
        bottom if bottom.change_percent < 0 else None,
    )


def calculate_changes(
    positions: Sequence[Position],
    summary: PortfolioSummary,
    snapshot: Optional[PortfolioSnapshot],
) -> ReportChanges:
    if snapshot is None:
        return ReportChanges(value_change=0.0, value_change_percent=0.0)

    value_change = summary.total_value - snapshot.total_value
    value_change_percent = (
        value_change / snapshot.total_value * 100 if snapshot.total_value > 0 else 0.0
    )
    top_gainer, top_loser = find_top_movers(positions, snapshot)
    return ReportChanges(
        value_change=value_change,
        value_change_percent=value_change_percent,
        top_gainer=top_gainer,
        top_loser=top_loser,
    )


class ReportGenerator:
    """Creates portfolio reports and keeps the notification history.

    Each ``generate_report`` call diffs against the snapshot written by the
    previous call and then overwrites it, so results depend on call order.
    Concurrent calls are not serialized; the last snapshot write wins. The
    generator holds no loop-bound state and may be driven from any event loop.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        snapshots: Optional[SnapshotStore] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.snapshots = snapshots or SnapshotStore(storage)
        self.clock = clock

    async def generate_report(
        self,
        positions: Sequence[Position],
        period: ReportPeriod,
        include_positions: bool = True,
    ) -> PortfolioReport:
        positions = list(positions)
        summary = calculate_portfolio_summary(positions)

        last_snapshot = await self.snapshots.load_snapshot()
        changes = calculate_changes(positions, summary, last_snapshot)
        generated_at = self.clock()

        report = PortfolioReport(
            id=_unique_id("report"),
            generated_at=generated_at,
            period=period,
            summary=ReportSummary(
                total_value=summary.total_value,
                total_cost=summary.total_cost,
                total_pnl=summary.total_pnl,
                total_pnl_percent=summary.total_pnl_percent,
                position_count=len(positions),
            ),
            changes=changes,
            positions=(
                [
                    PositionDetail(
                        symbol=pos.symbol,
                        quantity=pos.quantity,
                        current_price=pos.current_price,
                        pnl=calculate_pnl(pos),
                        pnl_percent=calculate_pnl_percent(pos),
                    )
                    for pos in positions
                ]
                if include_positions
                else None
            ),
        )

        await self._save_snapshot(positions, summary, generated_at)

        logger.info(
            "Generated portfolio report",
            extra={"report_id": report.id, "period": period, "positions": len(positions)},
        )
        return report

    async def _save_snapshot(
        self, positions: Sequence[Position], summary: PortfolioSummary, timestamp: datetime
    ) -> None:
        try:
            snapshot = build_snapshot(positions, total_value=summary.total_value, timestamp=timestamp)
        except ValueError as exc:
            logger.error(f"Failed to build portfolio snapshot: {exc}", exc_info=True)
            return
        await self.snapshots.save_snapshot(snapshot)

    def format_notification_body(self, report: PortfolioReport) -> str:
        return format_notification_body(report)

    async def clear_snapshot(self) -> bool:
        return await self.snapshots.clear_snapshot()

    # -- history -----------------------------------------------------------

    async def save_to_history(
        self, report: PortfolioReport, notification_type: NotificationType
    ) -> bool:
        """Prepend a history entry, keeping the newest ``MAX_HISTORY_ENTRIES``."""
        try:
            history = await self.get_history()
            entry = NotificationHistoryEntry(
                id=_unique_id("history"),
                sent_at=self.clock(),
                type=notification_type,
                report=report,
                opened=False,
            )
            history.insert(0, entry)
            await self._write_history(history[:MAX_HISTORY_ENTRIES])
            return True
        except Exception as exc:
            logger.error(f"Failed to save to notification history: {exc}", exc_info=True)
            return False

    async def get_history(self, limit: Optional[int] = None) -> list[NotificationHistoryEntry]:
        """Return entries newest first; corrupted data yields ``[]``."""
        try:
            data = await self.storage.get_item(NOTIFICATION_HISTORY_KEY)
            if not data:
                return []
            parsed = json.loads(data)
            if not isinstance(parsed, list):
                return []
            history = [NotificationHistoryEntry.from_dict(item) for item in parsed]
            return history[:limit] if limit else history
        except Exception as exc:
            logger.error(f"Failed to get notification history: {exc}", exc_info=True)
            return []

    async def mark_as_opened(self, notification_id: str) -> bool:
        try:
            history = await self.get_history()
            entry = next((item for item in history if item.id == notification_id), None)
            if entry is None:
                return False
            entry.opened = True
            await self._write_history(history)
            return True
        except Exception as exc:
            logger.error(f"Failed to mark notification as opened: {exc}", exc_info=True)
            return False

    async def clear_history(self) -> bool:
        try:
            await self.storage.remove_item(NOTIFICATION_HISTORY_KEY)
            return True
        except Exception as exc:
            logger.error(f"Failed to clear notification history: {exc}", exc_info=True)
            return False

    async def _write_history(self, history: Iterable[NotificationHistoryEntry]) -> None:
        serialized = json.dumps([entry.to_dict() for entry in history])
        await self.storage.set_item(NOTIFICATION_HISTORY_KEY, serialized)


__all__ = [
    "MAX_HISTORY_ENTRIES",
    "ReportGenerator",
    "calculate_changes",
    "find_top_movers",
    "format_currency",
    "format_notification_body",
    "format_percent",
]
