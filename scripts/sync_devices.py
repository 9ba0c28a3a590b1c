"""Sync every auto-sync device whose interval has elapsed.

Meant to be run from cron (e.g. every minute); devices that are not yet due
are left alone.
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_attendance.hr_attendance.container import build_container

log = logging.getLogger("sync_devices")

_OPTION_KEYS = ("SYNC_LEASE_MINUTES", "CLOUD_FETCH_LIMIT", "CLOUD_TIMEOUT_SECONDS", "DEFAULT_TIMEZONE")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--tenant", help="only sync devices of this tenant")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    options = {key: getattr(settings, key) for key in _OPTION_KEYS if hasattr(settings, key)}
    container = build_container(db_config=dict(settings.DB_CONFIG), options=options)

    summaries = container.ingestion.sync_all_due(tenant_id=args.tenant)
    failed = [s for s in summaries if s["status"] == "failed"]
    for summary in summaries:
        log.info("%s/%s: %s", summary["tenant_id"], summary["name"], summary["status"])
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
