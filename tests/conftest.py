"""Pytest configuration and shared fixtures for Portfel tests.

Fixtures provide in-memory storage, a recording notification capability and
sample positions so services can be tested without a real database or OS
notification support.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytest

from portfel.domain.notifications import AlarmRequest, PermissionStatus
from portfel.infra.storage import InMemoryStorage
from portfel.models import NotificationChannel, Position

# Saturday, 2024-06-15 12:00
FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0)


class FakeCapability:
    """Notification capability that records what it was asked to do."""

    def __init__(
        self,
        *,
        available: bool = True,
        permission: PermissionStatus = "granted",
        grant_on_request: bool = True,
        supports_channels: bool = False,
        fail_schedule: bool = False,
    ):
        self.available = available
        self.supports_channels = supports_channels
        self.permission = permission
        self.grant_on_request = grant_on_request
        self.fail_schedule = fail_schedule
        self.alarms: dict[str, AlarmRequest] = {}
        self.channels: list[NotificationChannel] = []
        self.cancel_all_calls = 0
        self._next_id = 0

    async def get_permission_status(self) -> PermissionStatus:
        return self.permission

    async def request_permission(self) -> PermissionStatus:
        if self.grant_on_request:
            self.permission = "granted"
        return self.permission

    async def schedule_alarm(self, request: AlarmRequest) -> str:
        if self.fail_schedule:
            raise RuntimeError("alarm service unavailable")
        self._next_id += 1
        alarm_id = f"alarm-{self._next_id}"
        self.alarms[alarm_id] = request
        return alarm_id

    async def cancel_alarm(self, alarm_id: str) -> None:
        self.alarms.pop(alarm_id, None)

    async def cancel_all_alarms(self) -> None:
        self.cancel_all_calls += 1
        self.alarms.clear()

    async def create_channel(self, channel: NotificationChannel) -> None:
        self.channels.append(channel)


class FailingStorage:
    """Storage whose every call raises."""

    async def get_item(self, key: str) -> Optional[str]:
        raise OSError("storage offline")

    async def set_item(self, key: str, value: str) -> None:
        raise OSError("storage offline")

    async def remove_item(self, key: str) -> None:
        raise OSError("storage offline")


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def capability() -> FakeCapability:
    return FakeCapability()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


# =============================================================================
# Data Factories
# =============================================================================


def make_position(
    symbol: str = "PKN",
    quantity: int = 100,
    purchase_price: float = 50.0,
    current_price: Optional[float] = None,
    purchase_date: date = date(2024, 1, 15),
) -> Position:
    return Position(
        symbol=symbol,
        quantity=quantity,
        purchase_price=purchase_price,
        current_price=purchase_price if current_price is None else current_price,
        purchase_date=purchase_date,
    )


@pytest.fixture
def sample_positions() -> list[Position]:
    """Three positions worth 7750 PLN against a 7000 PLN cost."""
    return [
        make_position("PKN", 100, 50.0, 55.0),
        make_position("PKO", 50, 30.0, 35.0),
        make_position("PZU", 10, 50.0, 50.0),
    ]
