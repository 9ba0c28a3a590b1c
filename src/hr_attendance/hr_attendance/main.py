from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .devices.controller import register as register_devices
from .holidays.controller import register as register_holidays
from .schedules.controller import register as register_schedules
from .tenants.controller import register as register_settings

log = logging.getLogger(__name__)

_OPTION_KEYS = (
    "DEFAULT_TIMEZONE",
    "LATE_TOLERANCE_MINUTES",
    "DEFAULT_WEEKEND_DAYS",
    "SYNC_LEASE_MINUTES",
    "CLOUD_FETCH_LIMIT",
    "CLOUD_TIMEOUT_SECONDS",
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    options = {key: getattr(settings, key) for key in _OPTION_KEYS if hasattr(settings, key)}

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        log.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            log.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, options=options)

    app.extensions["hr_attendance"] = container

    register_error_handlers(app)
    register_attendance(app, container)
    register_holidays(app, container)
    register_devices(app, container)
    register_schedules(app, container)
    register_settings(app, container)

    return app
