"""Storage keys shared by the stores; namespaced to avoid collisions."""

STORAGE_PREFIX = "@portfel/"

PORTFOLIO_KEY = f"{STORAGE_PREFIX}portfolio"
NOTIFICATION_HISTORY_KEY = f"{STORAGE_PREFIX}notification-history"
LAST_REPORT_SNAPSHOT_KEY = f"{STORAGE_PREFIX}last-report-snapshot"
NOTIFICATION_SETTINGS_KEY = f"{STORAGE_PREFIX}notification-settings"
SCHEDULED_NOTIFICATIONS_KEY = f"{STORAGE_PREFIX}scheduled-notifications"
