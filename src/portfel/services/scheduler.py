"""Scheduling of recurring portfolio report notifications.

Rescheduling is always cancel-everything-then-schedule; alarms are never
updated in place. Expected failures (no capability, no permission, storage
errors) are logged and reported as ``None``/``False``.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..domain.notifications import (
    AlarmRequest,
    AlarmTrigger,
    DailyTrigger,
    IntervalTrigger,
    NotificationCapability,
    WeeklyTrigger,
)
from ..domain.storage import KeyValueStorage
from ..keys import SCHEDULED_NOTIFICATIONS_KEY
from ..logging_config import get_logger
from ..models.notifications import (
    DayOfWeek,
    NotificationChannel,
    NotificationSettings,
    NotificationType,
    ScheduledNotification,
)

logger = get_logger("scheduler")

REPORT_CHANNEL_ID = "portfolio-reports"
REPORT_CHANNEL = NotificationChannel(
    id=REPORT_CHANNEL_ID,
    name="Portfolio Reports",
    description="Daily and weekly portfolio performance reports",
    importance="default",
    vibration_pattern=[0, 250, 250, 250],
    light_color="#2563EB",
)
TEST_NOTIFICATION_DELAY_SECONDS = 1

# Sunday-first numbering; alarm triggers use the same order shifted to 1-7
DAY_TO_NUMBER: dict[str, int] = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}


def calculate_daily_trigger(hour: int, minute: int, now: Optional[datetime] = None) -> datetime:
    """Next ``hour:minute`` today if still ahead, otherwise tomorrow."""

    now = now or datetime.now()
    trigger = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if trigger <= now:
        trigger += timedelta(days=1)
    return trigger


def calculate_weekly_trigger(
    day: DayOfWeek, hour: int, minute: int, now: Optional[datetime] = None
) -> datetime:
    """Next strictly-future occurrence of ``day`` at ``hour:minute``."""

    now = now or datetime.now()
    target_day = DAY_TO_NUMBER[day]
    current_day = (now.weekday() + 1) % 7
    trigger = now.replace(hour=hour, minute=minute, second=0, microsecond=0)

    days_until_target = target_day - current_day
    if days_until_target < 0 or (days_until_target == 0 and trigger <= now):
        days_until_target += 7
    return trigger + timedelta(days=days_until_target)


class NotificationScheduler:
    """Arms report alarms through the injected capability and records them."""

    def __init__(
        self,
        storage: KeyValueStorage,
        capability: NotificationCapability,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.capability = capability
        self.clock = clock

    async def setup_channel(self) -> None:
        """Create the report channel on platforms that group notifications."""
        if not self.capability.available or not self.capability.supports_channels:
            return
        try:
            await self.capability.create_channel(REPORT_CHANNEL)
        except Exception as exc:
            logger.error(f"Failed to set up notification channel: {exc}", exc_info=True)

    # -- permissions -------------------------------------------------------

    async def request_permissions(self) -> bool:
        if not self.capability.available:
            return False
        try:
            status = await self.capability.get_permission_status()
            if status != "granted":
                status = await self.capability.request_permission()
            return status == "granted"
        except Exception as exc:
            logger.error(f"Failed to request notification permissions: {exc}", exc_info=True)
            return False

    async def has_permissions(self) -> bool:
        if not self.capability.available:
            return False
        try:
            return await self.capability.get_permission_status() == "granted"
        except Exception as exc:
            logger.error(f"Failed to check notification permissions: {exc}", exc_info=True)
            return False

    # -- trigger math ------------------------------------------------------

    def calculate_daily_trigger(self, hour: int, minute: int) -> datetime:
        return calculate_daily_trigger(hour, minute, self.clock())

    def calculate_weekly_trigger(self, day: DayOfWeek, hour: int, minute: int) -> datetime:
        return calculate_weekly_trigger(day, hour, minute, self.clock())

    # -- scheduling --------------------------------------------------------

    async def schedule_daily_notification(
        self, settings: NotificationSettings
    ) -> Optional[ScheduledNotification]:
        if not self.capability.available:
            return None
        if not await self.has_permissions():
            logger.error("Notification permissions not granted")
            return None

        hour, minute = settings.time.hour, settings.time.minute
        return await self._schedule_report(
            notification_type="daily_report",
            title="Portfolio Daily Report",
            body="Your daily portfolio performance report is ready",
            trigger=DailyTrigger(hour=hour, minute=minute),
            next_trigger=self.calculate_daily_trigger(hour, minute),
        )

    async def schedule_weekly_notification(
        self, settings: NotificationSettings
    ) -> Optional[ScheduledNotification]:
        if not self.capability.available:
            return None
        if not await self.has_permissions():
            logger.error("Notification permissions not granted")
            return None
        if not settings.weekly_day:
            logger.error("Weekly day not specified")
            return None

        day = settings.weekly_day
        hour, minute = settings.time.hour, settings.time.minute
        return await self._schedule_report(
            notification_type="weekly_report",
            title="Portfolio Weekly Report",
            body="Your weekly portfolio performance report is ready",
            trigger=WeeklyTrigger(weekday=DAY_TO_NUMBER[day] + 1, hour=hour, minute=minute),
            next_trigger=self.calculate_weekly_trigger(day, hour, minute),
        )

    async def _schedule_report(
        self,
        *,
        notification_type: NotificationType,
        title: str,
        body: str,
        trigger: AlarmTrigger,
        next_trigger: datetime,
    ) -> Optional[ScheduledNotification]:
        try:
            alarm_id = await self.capability.schedule_alarm(
                self._build_request(title, body, trigger, {"type": notification_type})
            )
        except Exception as exc:
            logger.error(f"Failed to schedule {notification_type} notification: {exc}", exc_info=True)
            return None

        scheduled = ScheduledNotification(
            id=alarm_id,
            type=notification_type,
            scheduled_for=self.clock(),
            next_trigger=next_trigger,
        )
        await self._save_scheduled_notification(scheduled)
        logger.info(
            f"Scheduled {notification_type} notification",
            extra={"alarm_id": alarm_id, "next_trigger": next_trigger.isoformat()},
        )
        return scheduled

    async def schedule_notifications(self, settings: NotificationSettings) -> bool:
        """Reset all alarms, then arm the one matching ``settings``."""
        try:
            await self.cancel_all_notifications()

            if not settings.enabled or settings.frequency == "off":
                return True
            if settings.frequency == "daily":
                return await self.schedule_daily_notification(settings) is not None
            if settings.frequency == "weekly":
                return await self.schedule_weekly_notification(settings) is not None
            return True
        except Exception as exc:
            logger.error(f"Failed to schedule notifications: {exc}", exc_info=True)
            return False

    # -- cancellation ------------------------------------------------------

    async def cancel_all_notifications(self) -> bool:
        if not self.capability.available:
            return True
        try:
            await self.capability.cancel_all_alarms()
            await self._clear_scheduled_notifications()
            return True
        except Exception as exc:
            logger.error(f"Failed to cancel notifications: {exc}", exc_info=True)
            return False

    async def cancel_notification(self, notification_id: str) -> bool:
        """Cancel one alarm.

        The locally stored metadata list is left untouched; only
        ``cancel_all_notifications`` clears it.
        """
        if not self.capability.available:
            return True
        try:
            await self.capability.cancel_alarm(notification_id)
            return True
        except Exception as exc:
            logger.error(f"Failed to cancel notification: {exc}", exc_info=True)
            return False

    # -- metadata ----------------------------------------------------------

    async def get_scheduled_notifications(self) -> list[ScheduledNotification]:
        try:
            data = await self.storage.get_item(SCHEDULED_NOTIFICATIONS_KEY)
            if not data:
                return []
            parsed = json.loads(data)
            if not isinstance(parsed, list):
                return []
            return [ScheduledNotification.from_dict(item) for item in parsed]
        except Exception as exc:
            logger.error(f"Failed to get scheduled notifications: {exc}", exc_info=True)
            return []

    async def _save_scheduled_notification(self, notification: ScheduledNotification) -> None:
        try:
            existing = await self.get_scheduled_notifications()
            existing.append(notification)
            await self.storage.set_item(
                SCHEDULED_NOTIFICATIONS_KEY,
                json.dumps([item.to_dict() for item in existing]),
            )
        except Exception as exc:
            logger.error(f"Failed to save scheduled notification: {exc}", exc_info=True)

    async def _clear_scheduled_notifications(self) -> None:
        try:
            await self.storage.remove_item(SCHEDULED_NOTIFICATIONS_KEY)
        except Exception as exc:
            logger.error(f"Failed to clear scheduled notifications: {exc}", exc_info=True)

    # -- test notification -------------------------------------------------

    async def send_test_notification(self) -> bool:
        """Fire a one-shot notification about a second from now."""
        if not self.capability.available:
            return False
        if not await self.has_permissions():
            logger.error("Notification permissions not granted")
            return False
        try:
            await self.capability.schedule_alarm(
                self._build_request(
                    "Test Notification",
                    "This is a test notification from Portfel GPW Advisor",
                    IntervalTrigger(seconds=TEST_NOTIFICATION_DELAY_SECONDS),
                    {"type": "test"},
                )
            )
            return True
        except Exception as exc:
            logger.error(f"Failed to send test notification: {exc}", exc_info=True)
            return False

    def _build_request(
        self, title: str, body: str, trigger: AlarmTrigger, data: dict
    ) -> AlarmRequest:
        return AlarmRequest(
            title=title,
            body=body,
            trigger=trigger,
            data=data,
            channel_id=REPORT_CHANNEL_ID if self.capability.supports_channels else None,
        )


__all__ = [
    "DAY_TO_NUMBER",
    "NotificationScheduler",
    "REPORT_CHANNEL",
    "REPORT_CHANNEL_ID",
    "calculate_daily_trigger",
    "calculate_weekly_trigger",
]
