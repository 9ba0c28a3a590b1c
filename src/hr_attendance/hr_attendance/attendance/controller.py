from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_utc
from ..common.http import current_tenant, date_value, datetime_value, json_body, ok
from ..common.validators import require_enum, require_non_empty
from ..core.enums import CheckLocation, CheckMethod
from ..container import Container
from ..leaves.model import Leave


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _punch_args(body: dict) -> dict:
        return {
            "time": datetime_value(body["time"], "time") if body.get("time") else now_utc(),
            "work_date": date_value(body["date"], "date") if body.get("date") else None,
            "method": require_enum(body.get("method") or CheckMethod.MANUAL, CheckMethod, "method"),
            "location": require_enum(body.get("location") or CheckLocation.OFFICE, CheckLocation, "location"),
        }

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    def api_check_in():
        body = json_body()
        record = service.record_check_in(current_tenant(), body.get("employee_id"), **_punch_args(body))
        return ok(record.to_dict(), status=201)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    def api_check_out():
        body = json_body()
        record = service.record_check_out(current_tenant(), body.get("employee_id"), **_punch_args(body))
        return ok(record.to_dict())

    @app.route("/api/attendance/records", methods=["GET"], endpoint="api_records")
    def api_records():
        records = service.get_records_for_range(
            current_tenant(),
            start=date_value(request.args.get("start"), "start"),
            end=date_value(request.args.get("end"), "end"),
            employee_id=request.args.get("employee_id"),
            department_id=request.args.get("department_id"),
        )
        return ok([r.to_dict() for r in records], count=len(records))

    @app.route("/api/attendance/records/<employee_id>/<work_date>", methods=["GET"], endpoint="api_record")
    def api_record(employee_id: str, work_date: str):
        record = service.get_record(current_tenant(), employee_id, date_value(work_date, "date"))
        return ok(record.to_dict() if record else None)

    @app.route("/api/attendance/records/<employee_id>/<work_date>", methods=["PATCH"], endpoint="api_correct_record")
    def api_correct_record(employee_id: str, work_date: str):
        body = json_body()
        record = service.correct_record(
            current_tenant(),
            employee_id,
            date_value(work_date, "date"),
            approved_by=body.get("approved_by"),
            check_in=datetime_value(body["check_in"], "check_in") if body.get("check_in") else None,
            check_out=datetime_value(body["check_out"], "check_out") if body.get("check_out") else None,
            notes=body.get("notes"),
        )
        return ok(record.to_dict())

    @app.route("/api/attendance/metrics/<employee_id>", methods=["GET"], endpoint="api_metrics")
    def api_metrics(employee_id: str):
        metrics = service.compute_metrics(
            current_tenant(),
            employee_id,
            start=date_value(request.args.get("start"), "start"),
            end=date_value(request.args.get("end"), "end"),
        )
        return ok(metrics.to_dict())

    @app.route("/api/attendance/leaves", methods=["POST"], endpoint="api_leave_records")
    def api_leave_records():
        """Generate attendance days for an approved leave."""
        body = json_body()
        leave = Leave(
            leave_id=require_non_empty(str(body.get("leave_id") or ""), "leave_id"),
            employee_id=require_non_empty(body.get("employee_id"), "employee_id"),
            leave_type=require_non_empty(body.get("leave_type"), "leave_type"),
            start_date=date_value(body.get("start_date"), "start_date"),
            end_date=date_value(body.get("end_date"), "end_date"),
            department_id=body.get("department_id"),
            position_id=body.get("position_id"),
            is_approved=bool(body.get("is_approved", True)),
        )
        records = service.create_from_leave(current_tenant(), leave)
        return ok([r.to_dict() for r in records], status=201, count=len(records))

    @app.route("/api/attendance/work-from-home", methods=["POST"], endpoint="api_work_from_home")
    def api_work_from_home():
        body = json_body()
        record = service.set_work_from_home(
            current_tenant(),
            body.get("employee_id"),
            date_value(body.get("date"), "date"),
            approved=bool(body.get("approved", True)),
            approved_by=body.get("approved_by"),
        )
        return ok(record.to_dict())

    @app.route("/api/attendance/recompute", methods=["POST"], endpoint="api_recompute")
    def api_recompute():
        body = json_body()
        record = service.recompute(current_tenant(), body.get("employee_id"), date_value(body.get("date"), "date"))
        return ok(record.to_dict())
