"""Local-notification capability port and the alarm shapes it accepts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Protocol, Union

from ..models.notifications import NotificationChannel

PermissionStatus = Literal["granted", "denied", "undetermined"]


@dataclass(frozen=True, slots=True)
class IntervalTrigger:
    """Fire once, ``seconds`` after scheduling."""

    seconds: int


@dataclass(frozen=True, slots=True)
class DailyTrigger:
    """Repeat every day at ``hour:minute``."""

    hour: int
    minute: int


@dataclass(frozen=True, slots=True)
class WeeklyTrigger:
    """Repeat every week; ``weekday`` is 1-7 with 1 = Sunday."""

    weekday: int
    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 1 <= self.weekday <= 7:
            raise ValueError(f"weekday must be within 1-7, got {self.weekday}")


AlarmTrigger = Union[IntervalTrigger, DailyTrigger, WeeklyTrigger]


@dataclass(frozen=True, slots=True)
class AlarmRequest:
    title: str
    body: str
    trigger: AlarmTrigger
    data: dict[str, Any] = field(default_factory=dict)
    channel_id: Optional[str] = None
    sound: Optional[str] = "default"


class NotificationCapability(Protocol):
    """Platform primitive that arms local alarms.

    Hosts without local notifications supply an implementation whose
    ``available`` is False.
    """

    @property
    def available(self) -> bool:
        ...

    @property
    def supports_channels(self) -> bool:
        ...

    async def get_permission_status(self) -> PermissionStatus:
        ...

    async def request_permission(self) -> PermissionStatus:
        ...

    async def schedule_alarm(self, request: AlarmRequest) -> str:
        """Arm an alarm and return its capability-issued identifier."""
        ...

    async def cancel_alarm(self, alarm_id: str) -> None:
        ...

    async def cancel_all_alarms(self) -> None:
        ...

    async def create_channel(self, channel: NotificationChannel) -> None:
        ...
