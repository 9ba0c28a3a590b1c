from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import TenantSettings
from .repository import TenantSettingsRepository


def _parse_weekend(value: Optional[str]) -> tuple[int, ...]:
    if not value:
        return ()
    return tuple(sorted({int(part) for part in str(value).split(",") if part.strip()}))


class MySQLTenantSettingsRepository(TenantSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, tenant_id: str) -> Optional[TenantSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tenant_id, timezone, late_tolerance_minutes, weekend_days
                FROM tenant_settings
                WHERE tenant_id=%s
                """,
                (tenant_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return TenantSettings(
                tenant_id=r["tenant_id"],
                timezone=r["timezone"],
                late_tolerance_minutes=int(r.get("late_tolerance_minutes") or 0),
                weekend_days=_parse_weekend(r.get("weekend_days")),
            )

    def save(self, settings: TenantSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tenant_settings(tenant_id, timezone, late_tolerance_minutes, weekend_days)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    timezone=VALUES(timezone),
                    late_tolerance_minutes=VALUES(late_tolerance_minutes),
                    weekend_days=VALUES(weekend_days)
                """,
                (
                    settings.tenant_id,
                    settings.timezone,
                    int(settings.late_tolerance_minutes),
                    ",".join(str(d) for d in settings.weekend_days),
                ),
            )
