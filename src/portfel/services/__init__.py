"""Service module exports."""

from . import (
    calculations,
    import_csv,
    notification_settings,
    portfolio_store,
    report_generator,
    report_job,
    scheduler,
    snapshots,
)

__all__ = [
    "calculations",
    "import_csv",
    "notification_settings",
    "portfolio_store",
    "report_generator",
    "report_job",
    "scheduler",
    "snapshots",
]
