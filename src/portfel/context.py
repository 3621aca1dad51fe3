"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .config import BaseConfig
from .domain.notifications import NotificationCapability
from .domain.storage import KeyValueStorage
from .infra.database import SessionFactory, bootstrap_database
from .infra.notifications import APSchedulerNotificationCapability, NullNotificationCapability
from .infra.storage import SQLModelKeyValueStorage
from .logging_config import get_logger
from .services.notification_settings import NotificationSettingsStore
from .services.portfolio_store import PortfolioStore
from .services.report_generator import ReportGenerator
from .services.report_job import Presenter, ReportDispatcher
from .services.scheduler import NotificationScheduler

logger = get_logger("context")


@dataclass
class AppContext:
    """Explicitly wired services sharing one storage and one capability."""

    config: BaseConfig
    storage: KeyValueStorage
    capability: NotificationCapability
    portfolio_store: PortfolioStore
    settings_store: NotificationSettingsStore
    report_generator: ReportGenerator
    scheduler: NotificationScheduler
    dispatcher: ReportDispatcher
    session_factory: Optional[SessionFactory] = None

    async def start(self) -> None:
        """Prepare channels, start in-process alarms and re-arm saved settings."""
        await self.scheduler.setup_channel()
        if isinstance(self.capability, APSchedulerNotificationCapability):
            self.capability.start()
        settings = await self.settings_store.load_settings()
        await self.scheduler.schedule_notifications(settings)

    def stop(self) -> None:
        if isinstance(self.capability, APSchedulerNotificationCapability):
            self.capability.stop()

    async def apply_notification_settings(self, updates: Mapping[str, Any]) -> bool:
        """Persist settings changes and reschedule alarms to match them."""
        if not await self.settings_store.update_settings(updates):
            return False
        settings = await self.settings_store.load_settings()
        return await self.scheduler.schedule_notifications(settings)


def create_capability(config: BaseConfig, dispatcher: ReportDispatcher) -> NotificationCapability:
    """Pick the notification capability named by ``config.NOTIFICATIONS``."""

    if config.NOTIFICATIONS == "apscheduler":
        return APSchedulerNotificationCapability(on_fire=dispatcher.handle_alarm)
    return NullNotificationCapability()


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    storage: Optional[KeyValueStorage] = None,
    capability: Optional[NotificationCapability] = None,
    presenter: Optional[Presenter] = None,
) -> AppContext:
    """Create and wire the application context."""

    if config is None:
        config = BaseConfig()

    session_factory: Optional[SessionFactory] = None
    if storage is None:
        _, session_factory = bootstrap_database(config)
        storage = SQLModelKeyValueStorage(session_factory)

    portfolio_store = PortfolioStore(storage)
    settings_store = NotificationSettingsStore(storage, timezone=config.TIMEZONE)
    report_generator = ReportGenerator(storage)
    dispatcher = ReportDispatcher(
        report_generator,
        settings_store,
        portfolio_store,
        presenter=presenter,
    )

    if capability is None:
        capability = create_capability(config, dispatcher)
    scheduler = NotificationScheduler(storage, capability)

    logger.info(
        "Application context created",
        extra={"capability": type(capability).__name__, "storage": type(storage).__name__},
    )
    return AppContext(
        config=config,
        storage=storage,
        capability=capability,
        portfolio_store=portfolio_store,
        settings_store=settings_store,
        report_generator=report_generator,
        scheduler=scheduler,
        dispatcher=dispatcher,
        session_factory=session_factory,
    )
