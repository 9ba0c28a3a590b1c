import os

from config import weekend_days_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
LATE_TOLERANCE_MINUTES = int(os.getenv("LATE_TOLERANCE_MINUTES", "0"))
DEFAULT_WEEKEND_DAYS = weekend_days_from_env()

SYNC_LEASE_MINUTES = int(os.getenv("SYNC_LEASE_MINUTES", "30"))
CLOUD_FETCH_LIMIT = int(os.getenv("CLOUD_FETCH_LIMIT", "1000"))
CLOUD_TIMEOUT_SECONDS = int(os.getenv("CLOUD_TIMEOUT_SECONDS", "30"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
