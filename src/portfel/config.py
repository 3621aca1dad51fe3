"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Portfel"
    DB_FILENAME = "portfel.db"
    LOG_FILENAME = "portfel.log"
    NOTIFICATION_BACKENDS = ("apscheduler", "none")

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("PORTFEL_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("PORTFEL_DATABASE_URL", self._build_sqlite_url())
        self.NOTIFICATIONS = os.getenv("PORTFEL_NOTIFICATIONS", "apscheduler").strip().lower()
        self.TIMEZONE = os.getenv("PORTFEL_TIMEZONE", "Europe/Warsaw")
        if self.NOTIFICATIONS not in self.NOTIFICATION_BACKENDS:
            raise ValueError(
                f"PORTFEL_NOTIFICATIONS must be one of {', '.join(self.NOTIFICATION_BACKENDS)}; "
                f"got {self.NOTIFICATIONS!r}."
            )

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("PORTFEL_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to per-user storage.
            fallback_path = Path.home() / f".{self.APP_NAME.lower()}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            # Storage adapters run blocking calls in worker threads.
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test-suite; never arms real alarms."""

    __test__ = False

    DEBUG = True
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True
        self.NOTIFICATIONS = "none"
