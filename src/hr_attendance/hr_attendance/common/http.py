from __future__ import annotations

import logging
from datetime import date

from flask import Flask, jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    DeviceBusy,
    DeviceNotFound,
    DomainError,
    DuplicateDeviceName,
    RecordNotFound,
    ValidationError,
)
from .datetime_utils import parse_iso_date, parse_iso_datetime
from .validators import require_tenant

log = logging.getLogger(__name__)

TENANT_HEADER = "X-Tenant-ID"


def ok(data=None, status: int = 200, **meta):
    payload = {"success": True, "data": data}
    if meta:
        payload["meta"] = meta
    return jsonify(payload), status


def fail(message: str = "Bad Request", status: int = 400, code=None, detail=None, errors=None):
    err = {"message": message}
    if code:
        err["code"] = code
    if detail:
        err["detail"] = detail
    if errors:
        err["errors"] = errors
    return jsonify({"success": False, "error": err}), status


def current_tenant() -> str:
    return require_tenant(request.headers.get(TENANT_HEADER))


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def date_value(value, field_name: str) -> date:
    if not value:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(str(value))
    except ValueError as exc:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD") from exc


def datetime_value(value, field_name: str):
    try:
        return parse_iso_datetime(str(value))
    except ValueError as exc:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp") from exc


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, (RecordNotFound, DeviceNotFound)):
        return 404
    if isinstance(exc, (DeviceBusy, DuplicateDeviceName)):
        return 409
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = _status_for(exc)
        log.info("%s on %s %s: %s", exc.__class__.__name__, request.method, request.path, exc)
        return fail(str(exc), status=status, code=exc.__class__.__name__)
