"""Ports the notification core depends on."""

from .notifications import (
    AlarmRequest,
    AlarmTrigger,
    DailyTrigger,
    IntervalTrigger,
    NotificationCapability,
    PermissionStatus,
    WeeklyTrigger,
)
from .storage import KeyValueStorage

__all__ = [
    "AlarmRequest",
    "AlarmTrigger",
    "DailyTrigger",
    "IntervalTrigger",
    "KeyValueStorage",
    "NotificationCapability",
    "PermissionStatus",
    "WeeklyTrigger",
]
