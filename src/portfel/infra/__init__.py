"""Concrete adapters: database, storage and notification capabilities."""

from .database import bootstrap_database, create_db_engine, create_session_factory, init_database
from .notifications import APSchedulerNotificationCapability, NullNotificationCapability
from .storage import InMemoryStorage, SQLModelKeyValueStorage

__all__ = [
    "APSchedulerNotificationCapability",
    "InMemoryStorage",
    "NullNotificationCapability",
    "SQLModelKeyValueStorage",
    "bootstrap_database",
    "create_db_engine",
    "create_session_factory",
    "init_database",
]
