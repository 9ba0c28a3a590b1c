import os

from config import weekend_days_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Tenant defaults, used until a tenant stores its own settings
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
LATE_TOLERANCE_MINUTES = int(os.getenv("LATE_TOLERANCE_MINUTES", "0"))
DEFAULT_WEEKEND_DAYS = weekend_days_from_env()

# Device sync
SYNC_LEASE_MINUTES = int(os.getenv("SYNC_LEASE_MINUTES", "30"))
CLOUD_FETCH_LIMIT = int(os.getenv("CLOUD_FETCH_LIMIT", "1000"))
CLOUD_TIMEOUT_SECONDS = int(os.getenv("CLOUD_TIMEOUT_SECONDS", "30"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
