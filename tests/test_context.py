"""Tests for application wiring."""

from __future__ import annotations

import pytest

from portfel import create_app_context
from portfel.config import BaseConfig, TestConfig
from portfel.domain.notifications import DailyTrigger, WeeklyTrigger
from portfel.infra.notifications import APSchedulerNotificationCapability, NullNotificationCapability
from portfel.infra.storage import InMemoryStorage, SQLModelKeyValueStorage

from tests.conftest import FakeCapability


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("PORTFEL_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("PORTFEL_DATABASE_URL", raising=False)
    monkeypatch.delenv("PORTFEL_NOTIFICATIONS", raising=False)
    return tmp_path


def test_default_wiring_uses_database_storage(data_dir):
    context = create_app_context(TestConfig())

    assert isinstance(context.storage, SQLModelKeyValueStorage)
    assert isinstance(context.capability, NullNotificationCapability)
    assert context.session_factory is not None
    assert context.scheduler.storage is context.storage
    assert context.report_generator.storage is context.storage
    assert context.dispatcher.generator is context.report_generator


def test_apscheduler_backend_fires_into_dispatcher(data_dir):
    context = create_app_context(BaseConfig(), storage=InMemoryStorage())

    assert isinstance(context.capability, APSchedulerNotificationCapability)
    assert context.capability.on_fire == context.dispatcher.handle_alarm


@pytest.mark.asyncio
async def test_apply_notification_settings_reschedules(data_dir):
    capability = FakeCapability()
    context = create_app_context(TestConfig(), storage=InMemoryStorage(), capability=capability)

    assert await context.apply_notification_settings({"enabled": True, "frequency": "daily"}) is True
    (request,) = capability.alarms.values()
    assert request.trigger == DailyTrigger(hour=18, minute=0)

    assert await context.apply_notification_settings(
        {"frequency": "weekly", "weeklyDay": "sunday", "time": {"hour": 9, "minute": 0}}
    )
    (request,) = capability.alarms.values()
    assert request.trigger == WeeklyTrigger(weekday=1, hour=9, minute=0)

    assert await context.apply_notification_settings({"enabled": False}) is True
    assert capability.alarms == {}


@pytest.mark.asyncio
async def test_apply_invalid_settings_leaves_alarms(data_dir):
    capability = FakeCapability()
    context = create_app_context(TestConfig(), storage=InMemoryStorage(), capability=capability)
    await context.apply_notification_settings({"enabled": True, "frequency": "daily"})

    assert await context.apply_notification_settings({"frequency": "hourly"}) is False
    assert len(capability.alarms) == 1


@pytest.mark.asyncio
async def test_start_rearms_saved_settings(data_dir):
    storage = InMemoryStorage()
    capability = FakeCapability(supports_channels=True)
    context = create_app_context(TestConfig(), storage=storage, capability=capability)
    await context.settings_store.update_settings({"enabled": True, "frequency": "daily"})

    await context.start()
    context.stop()

    assert [channel.id for channel in capability.channels] == ["portfolio-reports"]
    assert len(capability.alarms) == 1
    assert len(await context.scheduler.get_scheduled_notifications()) == 1


@pytest.mark.asyncio
async def test_start_and_stop_apscheduler(data_dir):
    context = create_app_context(BaseConfig(), storage=InMemoryStorage())

    await context.start()
    try:
        assert context.capability.scheduler.running is True
        assert await context.apply_notification_settings({"enabled": True, "frequency": "daily"})
        assert len(context.capability.alarm_ids()) == 1
    finally:
        context.stop()

    assert context.capability.scheduler.running is False
