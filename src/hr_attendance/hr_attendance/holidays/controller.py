from __future__ import annotations

from flask import Flask

from ..common.http import current_tenant, date_value, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    calendar = container.calendar

    @app.route("/api/calendar/<work_date>", methods=["GET"], endpoint="api_calendar_check")
    def api_calendar_check(work_date: str):
        return ok(calendar.check(current_tenant(), date_value(work_date, "date")).to_dict())

    @app.route("/api/calendar/holidays", methods=["POST"], endpoint="api_add_holiday")
    def api_add_holiday():
        body = json_body()
        calendar.add_holiday(current_tenant(), date_value(body.get("date"), "date"), body.get("name"))
        return ok(None, status=201)

    @app.route("/api/calendar/holidays/<holiday_date>", methods=["DELETE"], endpoint="api_remove_holiday")
    def api_remove_holiday(holiday_date: str):
        calendar.remove_holiday(current_tenant(), date_value(holiday_date, "date"))
        return ok(None)

    @app.route("/api/calendar/weekend-work-days", methods=["POST"], endpoint="api_add_weekend_work_day")
    def api_add_weekend_work_day():
        body = json_body()
        calendar.add_weekend_work_day(current_tenant(), date_value(body.get("date"), "date"))
        return ok(None, status=201)

    @app.route(
        "/api/calendar/weekend-work-days/<work_date>", methods=["DELETE"], endpoint="api_remove_weekend_work_day"
    )
    def api_remove_weekend_work_day(work_date: str):
        calendar.remove_weekend_work_day(current_tenant(), date_value(work_date, "date"))
        return ok(None)
