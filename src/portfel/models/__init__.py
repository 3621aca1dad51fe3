"""Domain models and the SQLModel key-value table."""

from .kv import StoredItem
from .notifications import (
    DAYS_OF_WEEK,
    DayOfWeek,
    NotificationChannel,
    NotificationFrequency,
    NotificationSettings,
    NotificationTime,
    NotificationType,
    QuietHours,
    ScheduledNotification,
)
from .position import PortfolioSummary, Position
from .report import (
    NotificationHistoryEntry,
    PortfolioReport,
    PortfolioSnapshot,
    PositionDetail,
    ReportChanges,
    ReportPeriod,
    ReportSummary,
    SnapshotPosition,
    TopMover,
)

__all__ = [
    "DAYS_OF_WEEK",
    "DayOfWeek",
    "NotificationChannel",
    "NotificationFrequency",
    "NotificationHistoryEntry",
    "NotificationSettings",
    "NotificationTime",
    "NotificationType",
    "PortfolioReport",
    "PortfolioSnapshot",
    "PortfolioSummary",
    "Position",
    "PositionDetail",
    "QuietHours",
    "ReportChanges",
    "ReportPeriod",
    "ReportSummary",
    "ScheduledNotification",
    "SnapshotPosition",
    "StoredItem",
    "TopMover",
]
