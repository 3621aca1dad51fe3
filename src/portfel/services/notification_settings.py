"""Persistence of notification preferences, plus the quiet-hours predicate."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Mapping, Optional

from ..domain.storage import KeyValueStorage
from ..keys import NOTIFICATION_SETTINGS_KEY
from ..logging_config import get_logger
from ..models.notifications import NotificationSettings, NotificationTime, QuietHours

logger = get_logger("notification_settings")

DEFAULT_TIMEZONE = "Europe/Warsaw"


def default_notification_settings(timezone: str = DEFAULT_TIMEZONE) -> NotificationSettings:
    return NotificationSettings(
        enabled=False,
        frequency="off",
        time=NotificationTime(hour=18, minute=0),
        weekly_day="monday",
        include_positions=True,
        quiet_hours=QuietHours(
            enabled=False,
            start=NotificationTime(hour=22, minute=0),
            end=NotificationTime(hour=8, minute=0),
        ),
        timezone=timezone,
    )


def _merge(defaults: Mapping[str, Any], stored: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay ``stored`` on ``defaults``, recursing into nested objects."""

    merged = dict(defaults)
    for key, value in stored.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def is_quiet_hours(settings: NotificationSettings, current_time: Optional[datetime] = None) -> bool:
    """Whether ``current_time`` (default: now) falls in the quiet window.

    The window includes its start minute and excludes its end minute. A
    start after the end spans midnight; equal start and end means no window.
    """

    quiet = settings.quiet_hours
    if not quiet.enabled:
        return False

    now = current_time or datetime.now()
    current = now.hour * 60 + now.minute
    start = quiet.start.minute_of_day
    end = quiet.end.minute_of_day

    if start > end:
        return current >= start or current < end
    return start <= current < end


class NotificationSettingsStore:
    """Loads settings merged over defaults so older payloads keep working."""

    def __init__(self, storage: KeyValueStorage, *, timezone: str = DEFAULT_TIMEZONE):
        self.storage = storage
        self.timezone = timezone

    @property
    def defaults(self) -> NotificationSettings:
        return default_notification_settings(self.timezone)

    async def load_settings(self) -> NotificationSettings:
        try:
            data = await self.storage.get_item(NOTIFICATION_SETTINGS_KEY)
            if not data:
                return self.defaults
            parsed = json.loads(data)
            if not isinstance(parsed, Mapping):
                logger.error("Invalid notification settings format")
                return self.defaults
            return NotificationSettings.from_dict(_merge(self.defaults.to_dict(), parsed))
        except Exception as exc:
            logger.error(f"Failed to load notification settings: {exc}", exc_info=True)
            return self.defaults

    async def save_settings(self, settings: NotificationSettings) -> bool:
        try:
            await self.storage.set_item(NOTIFICATION_SETTINGS_KEY, json.dumps(settings.to_dict()))
            return True
        except Exception as exc:
            logger.error(f"Failed to save notification settings: {exc}", exc_info=True)
            return False

    async def update_settings(self, updates: Mapping[str, Any]) -> bool:
        """Apply camelCase field updates; ``quietHours`` is merged, not replaced."""
        try:
            current = (await self.load_settings()).to_dict()
            updated = {**current, **updates}
            if "quietHours" in updates:
                updated["quietHours"] = _merge(current["quietHours"], updates["quietHours"] or {})
            return await self.save_settings(NotificationSettings.from_dict(updated))
        except Exception as exc:
            logger.error(f"Failed to update notification settings: {exc}", exc_info=True)
            return False

    async def reset_settings(self) -> bool:
        return await self.save_settings(self.defaults)

    async def clear_settings(self) -> bool:
        try:
            await self.storage.remove_item(NOTIFICATION_SETTINGS_KEY)
            return True
        except Exception as exc:
            logger.error(f"Failed to clear notification settings: {exc}", exc_info=True)
            return False

    def is_quiet_hours(
        self, settings: NotificationSettings, current_time: Optional[datetime] = None
    ) -> bool:
        return is_quiet_hours(settings, current_time)
