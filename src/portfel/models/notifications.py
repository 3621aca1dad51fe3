"""Notification preference and scheduling models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Mapping, Optional

NotificationFrequency = Literal["daily", "weekly", "off"]
NotificationType = Literal["daily_report", "weekly_report"]
DayOfWeek = Literal[
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

FREQUENCIES: tuple[str, ...] = ("daily", "weekly", "off")
NOTIFICATION_TYPES: tuple[str, ...] = ("daily_report", "weekly_report")
DAYS_OF_WEEK: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp, accepting the ``Z`` suffix used by JS clients."""

    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(slots=True)
class NotificationTime:
    """Wall-clock time of day (24h)."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be within 0-23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be within 0-59, got {self.minute}")

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute

    def to_dict(self) -> dict[str, int]:
        return {"hour": self.hour, "minute": self.minute}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NotificationTime":
        return cls(hour=int(data["hour"]), minute=int(data["minute"]))


@dataclass(slots=True)
class QuietHours:
    """Daily window during which report notifications should stay silent."""

    enabled: bool
    start: NotificationTime
    end: NotificationTime

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuietHours":
        return cls(
            enabled=bool(data["enabled"]),
            start=NotificationTime.from_dict(data["start"]),
            end=NotificationTime.from_dict(data["end"]),
        )


@dataclass(slots=True)
class NotificationSettings:
    """User preferences for periodic portfolio reports (one per device)."""

    enabled: bool
    frequency: NotificationFrequency
    time: NotificationTime
    include_positions: bool
    quiet_hours: QuietHours
    timezone: str
    weekly_day: Optional[DayOfWeek] = None

    def __post_init__(self) -> None:
        if self.frequency not in FREQUENCIES:
            raise ValueError(f"Unknown notification frequency: {self.frequency!r}")
        if self.weekly_day is not None and self.weekly_day not in DAYS_OF_WEEK:
            raise ValueError(f"Unknown weekday: {self.weekly_day!r}")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "enabled": self.enabled,
            "frequency": self.frequency,
            "time": self.time.to_dict(),
            "includePositions": self.include_positions,
            "quietHours": self.quiet_hours.to_dict(),
            "timezone": self.timezone,
        }
        if self.weekly_day is not None:
            payload["weeklyDay"] = self.weekly_day
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NotificationSettings":
        return cls(
            enabled=bool(data["enabled"]),
            frequency=data["frequency"],
            time=NotificationTime.from_dict(data["time"]),
            include_positions=bool(data["includePositions"]),
            quiet_hours=QuietHours.from_dict(data["quietHours"]),
            timezone=str(data["timezone"]),
            weekly_day=data.get("weeklyDay"),
        )


@dataclass(slots=True)
class ScheduledNotification:
    """Local record of an alarm armed through the notification capability."""

    id: str
    type: NotificationType
    scheduled_for: datetime
    next_trigger: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "scheduledFor": self.scheduled_for.isoformat(),
            "nextTrigger": self.next_trigger.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScheduledNotification":
        return cls(
            id=str(data["id"]),
            type=data["type"],
            scheduled_for=parse_timestamp(data["scheduledFor"]),
            next_trigger=parse_timestamp(data["nextTrigger"]),
        )


@dataclass(slots=True)
class NotificationChannel:
    """Grouping of notifications on platforms that support channels."""

    id: str
    name: str
    description: str = ""
    importance: str = "default"
    vibration_pattern: list[int] = field(default_factory=list)
    light_color: Optional[str] = None
