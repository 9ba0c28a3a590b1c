import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

DEFAULT_TIMEZONE = "UTC"
LATE_TOLERANCE_MINUTES = 0
DEFAULT_WEEKEND_DAYS = (5, 6)

SYNC_LEASE_MINUTES = 30
CLOUD_FETCH_LIMIT = 1000
CLOUD_TIMEOUT_SECONDS = 5

AUTO_INIT_DB = False
