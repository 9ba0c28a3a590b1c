from __future__ import annotations

from flask import Flask

from ..common.http import current_tenant, json_body, ok
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    settings = container.tenant_settings

    @app.route("/api/settings", methods=["GET"], endpoint="api_get_settings")
    def api_get_settings():
        return ok(settings.get(current_tenant()).to_dict())

    @app.route("/api/settings", methods=["PUT"], endpoint="api_update_settings")
    def api_update_settings():
        body = json_body()
        weekend_days = body.get("weekend_days")
        if weekend_days is not None and not isinstance(weekend_days, list):
            raise ValidationError("weekend_days must be a list")
        updated = settings.update(
            current_tenant(),
            timezone=body.get("timezone"),
            late_tolerance_minutes=body.get("late_tolerance_minutes"),
            weekend_days=weekend_days,
        )
        return ok(updated.to_dict())
