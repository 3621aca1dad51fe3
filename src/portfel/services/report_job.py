"""Runs the report pipeline when a report alarm fires."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..domain.notifications import AlarmRequest
from ..logging_config import get_logger
from ..models.notifications import NOTIFICATION_TYPES, NotificationType
from ..models.report import PortfolioReport
from .notification_settings import NotificationSettingsStore
from .portfolio_store import PortfolioStore
from .report_generator import ReportGenerator

logger = get_logger("report_job")

Presenter = Callable[[str, str], None]

REPORT_TITLES: dict[str, str] = {
    "daily_report": "Portfolio Daily Report",
    "weekly_report": "Portfolio Weekly Report",
}


def log_presenter(title: str, body: str) -> None:
    """Default presenter for hosts without a toast/notification widget."""
    logger.info(f"{title}\n{body}")


@dataclass(frozen=True)
class DispatchResult:
    report: PortfolioReport
    body: str
    recorded: bool
    delivered: bool


class ReportDispatcher:
    """Generates, records and presents one report per fired alarm.

    Reports produced during quiet hours are still written to history but not
    handed to the presenter.
    """

    def __init__(
        self,
        generator: ReportGenerator,
        settings_store: NotificationSettingsStore,
        portfolio_store: PortfolioStore,
        *,
        presenter: Optional[Presenter] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.generator = generator
        self.settings_store = settings_store
        self.portfolio_store = portfolio_store
        self.presenter = presenter or log_presenter
        self.clock = clock

    async def run(self, notification_type: NotificationType) -> DispatchResult:
        settings = await self.settings_store.load_settings()
        positions = await self.portfolio_store.load_portfolio()
        period = "weekly" if notification_type == "weekly_report" else "daily"

        report = await self.generator.generate_report(
            positions, period, settings.include_positions
        )
        recorded = await self.generator.save_to_history(report, notification_type)
        body = self.generator.format_notification_body(report)

        if self.settings_store.is_quiet_hours(settings, self.clock()):
            logger.info(f"Quiet hours active; {notification_type} not presented")
            return DispatchResult(report=report, body=body, recorded=recorded, delivered=False)

        self.presenter(REPORT_TITLES[notification_type], body)
        return DispatchResult(report=report, body=body, recorded=recorded, delivered=True)

    def handle_alarm(self, request: AlarmRequest) -> Optional[DispatchResult]:
        """Synchronous entry point for alarms fired on a scheduler thread."""
        notification_type = request.data.get("type")
        if notification_type not in NOTIFICATION_TYPES:
            logger.info(f"Ignoring alarm without a report type: {request.title}")
            return None
        return asyncio.run(self.run(notification_type))


__all__ = ["DispatchResult", "Presenter", "ReportDispatcher", "log_presenter"]
