"""Tests for notification settings persistence and quiet hours."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime

import pytest

from portfel.keys import NOTIFICATION_SETTINGS_KEY
from portfel.models import NotificationSettings, NotificationTime, QuietHours
from portfel.services.notification_settings import (
    NotificationSettingsStore,
    default_notification_settings,
    is_quiet_hours,
)


def _with_quiet_hours(start: tuple[int, int], end: tuple[int, int], enabled: bool = True):
    return replace(
        default_notification_settings(),
        quiet_hours=QuietHours(
            enabled=enabled,
            start=NotificationTime(*start),
            end=NotificationTime(*end),
        ),
    )


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 6, 15, hour, minute)


def test_defaults():
    settings = default_notification_settings()

    assert settings.enabled is False
    assert settings.frequency == "off"
    assert settings.time == NotificationTime(18, 0)
    assert settings.weekly_day == "monday"
    assert settings.include_positions is True
    assert settings.quiet_hours.enabled is False
    assert settings.quiet_hours.start == NotificationTime(22, 0)
    assert settings.quiet_hours.end == NotificationTime(8, 0)
    assert settings.timezone == "Europe/Warsaw"


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError):
        NotificationTime(24, 0)
    with pytest.raises(ValueError):
        NotificationTime(12, 60)
    with pytest.raises(ValueError):
        replace(default_notification_settings(), frequency="hourly")
    with pytest.raises(ValueError):
        replace(default_notification_settings(), weekly_day="someday")


@pytest.mark.asyncio
async def test_load_returns_defaults_when_missing(storage):
    store = NotificationSettingsStore(storage)

    assert await store.load_settings() == default_notification_settings()


@pytest.mark.asyncio
async def test_store_uses_configured_timezone(storage):
    store = NotificationSettingsStore(storage, timezone="UTC")

    assert (await store.load_settings()).timezone == "UTC"
    assert store.defaults.timezone == "UTC"


@pytest.mark.asyncio
async def test_save_and_load(storage):
    store = NotificationSettingsStore(storage)
    settings = replace(
        default_notification_settings(),
        enabled=True,
        frequency="weekly",
        weekly_day="friday",
        time=NotificationTime(7, 30),
    )

    assert await store.save_settings(settings) is True
    assert await store.load_settings() == settings

    stored = json.loads(await storage.get_item(NOTIFICATION_SETTINGS_KEY))
    assert stored["weeklyDay"] == "friday"
    assert stored["time"] == {"hour": 7, "minute": 30}
    assert stored["includePositions"] is True


@pytest.mark.asyncio
async def test_partial_payload_is_merged_over_defaults(storage):
    await storage.set_item(
        NOTIFICATION_SETTINGS_KEY,
        json.dumps({"enabled": True, "frequency": "daily", "quietHours": {"enabled": True}}),
    )
    store = NotificationSettingsStore(storage)

    settings = await store.load_settings()

    assert settings.enabled is True
    assert settings.frequency == "daily"
    assert settings.time == NotificationTime(18, 0)
    assert settings.weekly_day == "monday"
    assert settings.quiet_hours.enabled is True
    assert settings.quiet_hours.start == NotificationTime(22, 0)
    assert settings.quiet_hours.end == NotificationTime(8, 0)


@pytest.mark.asyncio
async def test_missing_quiet_hours_start_uses_default(storage):
    await storage.set_item(
        NOTIFICATION_SETTINGS_KEY,
        json.dumps(
            {
                "enabled": True,
                "frequency": "weekly",
                "quietHours": {"enabled": True, "end": {"hour": 6, "minute": 30}},
            }
        ),
    )

    settings = await NotificationSettingsStore(storage).load_settings()

    assert settings.enabled is True
    assert settings.frequency == "weekly"
    assert settings.quiet_hours.start == NotificationTime(22, 0)
    assert settings.quiet_hours.end == NotificationTime(6, 30)


@pytest.mark.asyncio
async def test_partial_time_is_merged(storage):
    await storage.set_item(NOTIFICATION_SETTINGS_KEY, json.dumps({"time": {"hour": 9}}))
    store = NotificationSettingsStore(storage)

    assert (await store.load_settings()).time == NotificationTime(9, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ["{broken", "[1, 2, 3]", '{"frequency": "hourly"}'])
async def test_unreadable_payload_falls_back_to_defaults(storage, payload):
    await storage.set_item(NOTIFICATION_SETTINGS_KEY, payload)
    store = NotificationSettingsStore(storage)

    assert await store.load_settings() == default_notification_settings()


@pytest.mark.asyncio
async def test_update_settings_changes_named_fields_only(storage):
    store = NotificationSettingsStore(storage)

    assert await store.update_settings({"enabled": True, "frequency": "weekly", "weeklyDay": "sunday"})
    settings = await store.load_settings()

    assert settings.enabled is True
    assert settings.frequency == "weekly"
    assert settings.weekly_day == "sunday"
    assert settings.time == NotificationTime(18, 0)


@pytest.mark.asyncio
async def test_update_settings_merges_quiet_hours(storage):
    store = NotificationSettingsStore(storage)

    await store.update_settings({"quietHours": {"enabled": True}})
    await store.update_settings({"quietHours": {"end": {"hour": 7, "minute": 15}}})
    quiet = (await store.load_settings()).quiet_hours

    assert quiet.enabled is True
    assert quiet.start == NotificationTime(22, 0)
    assert quiet.end == NotificationTime(7, 15)


@pytest.mark.asyncio
async def test_update_settings_rejects_invalid_values(storage):
    store = NotificationSettingsStore(storage)

    assert await store.update_settings({"frequency": "hourly"}) is False
    assert await store.load_settings() == default_notification_settings()


@pytest.mark.asyncio
async def test_reset_and_clear(storage):
    store = NotificationSettingsStore(storage)
    await store.update_settings({"enabled": True, "frequency": "daily"})

    assert await store.reset_settings() is True
    assert await store.load_settings() == default_notification_settings()
    assert NOTIFICATION_SETTINGS_KEY in storage.keys()

    assert await store.clear_settings() is True
    assert NOTIFICATION_SETTINGS_KEY not in storage.keys()


@pytest.mark.asyncio
async def test_storage_failures_are_soft(failing_storage):
    store = NotificationSettingsStore(failing_storage)

    assert await store.load_settings() == default_notification_settings()
    assert await store.save_settings(default_notification_settings()) is False
    assert await store.update_settings({"enabled": True}) is False
    assert await store.clear_settings() is False


# -- quiet hours --------------------------------------------------------------


def test_quiet_hours_disabled_is_never_quiet():
    settings = _with_quiet_hours((22, 0), (8, 0), enabled=False)

    assert is_quiet_hours(settings, _at(23)) is False
    assert is_quiet_hours(settings, _at(3)) is False


@pytest.mark.parametrize(
    "hour, minute, expected",
    [
        (22, 0, True),
        (23, 0, True),
        (0, 0, True),
        (3, 0, True),
        (7, 59, True),
        (8, 0, False),
        (12, 0, False),
        (21, 59, False),
    ],
)
def test_quiet_hours_spanning_midnight(hour, minute, expected):
    settings = _with_quiet_hours((22, 0), (8, 0))

    assert is_quiet_hours(settings, _at(hour, minute)) is expected


@pytest.mark.parametrize(
    "hour, minute, expected",
    [(11, 59, False), (12, 0, True), (13, 59, True), (14, 0, False)],
)
def test_quiet_hours_within_one_day(hour, minute, expected):
    settings = _with_quiet_hours((12, 0), (14, 0))

    assert is_quiet_hours(settings, _at(hour, minute)) is expected


def test_equal_start_and_end_is_empty_window():
    settings = _with_quiet_hours((10, 0), (10, 0))

    assert is_quiet_hours(settings, _at(10)) is False
    assert is_quiet_hours(settings, _at(3)) is False


def test_store_delegates_quiet_hours(storage):
    store = NotificationSettingsStore(storage)
    settings = _with_quiet_hours((22, 0), (8, 0))

    assert store.is_quiet_hours(settings, _at(23)) is True
    assert store.is_quiet_hours(settings, _at(9)) is False


def test_settings_dict_omits_missing_weekday():
    settings = replace(default_notification_settings(), weekly_day=None)

    payload = settings.to_dict()

    assert "weeklyDay" not in payload
    assert NotificationSettings.from_dict(payload) == settings
