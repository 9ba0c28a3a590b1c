"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "UTC"
DEFAULT_LATE_TOLERANCE_MINUTES = 0
# ISO weekday numbers (Mon=1 .. Sun=7): Friday and Saturday.
DEFAULT_WEEKEND_DAYS = (5, 6)
DEFAULT_EXPECTED_HOURS = 8.0

HOLIDAY_NOTE = "Official Holiday"
WEEKEND_NOTE = "Weekend"

DEFAULT_SYNC_INTERVAL_MINUTES = 5
DEFAULT_SYNC_LEASE_MINUTES = 30
DEFAULT_PULL_LOOKBACK_HOURS = 24
DEFAULT_CLOUD_FETCH_LIMIT = 1000
DEFAULT_CLOUD_TIMEOUT_SECONDS = 30

SYNC_LEASE_EXPIRED = "sync lease expired"
