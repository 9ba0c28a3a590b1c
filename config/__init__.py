import os

_ALIASES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    # APP_ENV selects the settings module; anything unknown falls back to development.
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _ALIASES.get(env, "config.development")


def weekend_days_from_env(default: str = "5,6") -> tuple:
    raw = os.getenv("DEFAULT_WEEKEND_DAYS", default)
    return tuple(int(part) for part in raw.split(",") if part.strip())
