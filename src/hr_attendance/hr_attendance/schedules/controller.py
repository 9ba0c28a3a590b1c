from __future__ import annotations

from flask import Flask

from ..common.http import current_tenant, date_value, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    schedules = container.schedule_service

    @app.route("/api/schedules", methods=["POST"], endpoint="api_assign_schedule")
    def api_assign_schedule():
        """Assign a shift to an employee for one date, replacing any earlier assignment."""
        body = json_body()
        schedule_id = schedules.assign(
            current_tenant(),
            employee_id=body.get("employee_id"),
            work_date=date_value(body.get("date"), "date"),
            shift_id=body.get("shift_id"),
            note=body.get("note"),
        )
        return ok({"schedule_id": schedule_id}, status=201)

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="api_delete_schedule")
    def api_delete_schedule(schedule_id: int):
        schedules.delete(current_tenant(), schedule_id=schedule_id)
        return ok(None)
