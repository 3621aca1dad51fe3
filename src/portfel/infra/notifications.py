"""Notification capabilities selected by the host at startup."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import uuid4

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from ..domain.notifications import (
    AlarmRequest,
    DailyTrigger,
    IntervalTrigger,
    PermissionStatus,
    WeeklyTrigger,
)
from ..exceptions import CapabilityUnavailableError
from ..logging_config import get_logger
from ..models.notifications import NotificationChannel

logger = get_logger("notifications")

AlarmHandler = Callable[[AlarmRequest], None]

# WeeklyTrigger.weekday is 1-7 starting on Sunday
APS_DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


class NullNotificationCapability:
    """Capability for hosts with no local-notification support."""

    available = False
    supports_channels = False

    async def get_permission_status(self) -> PermissionStatus:
        return "denied"

    async def request_permission(self) -> PermissionStatus:
        return "denied"

    async def schedule_alarm(self, request: AlarmRequest) -> str:
        raise CapabilityUnavailableError("Local notifications are not available on this host")

    async def cancel_alarm(self, alarm_id: str) -> None:
        return None

    async def cancel_all_alarms(self) -> None:
        return None

    async def create_channel(self, channel: NotificationChannel) -> None:
        return None


class APSchedulerNotificationCapability:
    """Arms alarms as APScheduler jobs inside the desktop process.

    When an alarm fires the injected ``on_fire`` handler receives the original
    request. Desktop hosts have no OS permission prompt, so permission is a
    flag owned by the host.
    """

    available = True
    supports_channels = False

    def __init__(
        self,
        on_fire: Optional[AlarmHandler] = None,
        *,
        permission: PermissionStatus = "granted",
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self.on_fire = on_fire
        self.permission = permission
        self.scheduler = scheduler or BackgroundScheduler()

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler.running:
            logger.warning("Notification scheduler already running")
            return
        self.scheduler.start()
        logger.info("Notification scheduler started")

    def stop(self) -> None:
        """Stop the background scheduler without waiting for running alarms."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Notification scheduler stopped")

    async def get_permission_status(self) -> PermissionStatus:
        return self.permission

    async def request_permission(self) -> PermissionStatus:
        if self.permission == "undetermined":
            self.permission = "granted"
        return self.permission

    async def schedule_alarm(self, request: AlarmRequest) -> str:
        alarm_id = uuid4().hex
        self.scheduler.add_job(
            func=self._fire,
            trigger=self._build_trigger(request),
            args=[request],
            id=alarm_id,
            name=request.title,
            replace_existing=True,
        )
        logger.info(f"Armed alarm {alarm_id}: {request.title}")
        return alarm_id

    async def cancel_alarm(self, alarm_id: str) -> None:
        # Unknown ids raise JobLookupError for the caller to report
        self.scheduler.remove_job(alarm_id)
        logger.info(f"Cancelled alarm {alarm_id}")

    async def cancel_all_alarms(self) -> None:
        self.scheduler.remove_all_jobs()
        logger.info("Cancelled all alarms")

    async def create_channel(self, channel: NotificationChannel) -> None:
        return None

    def alarm_ids(self) -> list[str]:
        return [job.id for job in self.scheduler.get_jobs()]

    @staticmethod
    def _build_trigger(request: AlarmRequest):
        trigger = request.trigger
        if isinstance(trigger, IntervalTrigger):
            return DateTrigger(run_date=datetime.now() + timedelta(seconds=trigger.seconds))
        if isinstance(trigger, DailyTrigger):
            return CronTrigger(hour=trigger.hour, minute=trigger.minute)
        if isinstance(trigger, WeeklyTrigger):
            return CronTrigger(
                day_of_week=APS_DAY_NAMES[trigger.weekday - 1],
                hour=trigger.hour,
                minute=trigger.minute,
            )
        raise ValueError(f"Unsupported alarm trigger: {trigger!r}")

    def _fire(self, request: AlarmRequest) -> None:
        if self.on_fire is None:
            logger.info(f"Alarm fired with no handler: {request.title}")
            return
        try:
            self.on_fire(request)
        except Exception as exc:
            logger.error(f"Alarm handler failed: {exc}", exc_info=True)


__all__ = ["APSchedulerNotificationCapability", "NullNotificationCapability"]
