from __future__ import annotations

from flask import Flask, request

from ..common.http import current_tenant, json_body, ok
from ..container import Container
from ..core.exceptions import ValidationError

DEVICE_KEY_HEADER = "X-Device-Key"


def register(app: Flask, container: Container) -> None:
    registry = container.device_registry
    ingestion = container.ingestion

    def _list_field(body: dict, name: str) -> list:
        items = body.get(name)
        if not isinstance(items, list):
            raise ValidationError(f"{name} must be a list")
        return items

    @app.route("/api/devices", methods=["GET"], endpoint="api_list_devices")
    def api_list_devices():
        devices = registry.list_devices(current_tenant())
        return ok([d.to_dict() for d in devices], count=len(devices))

    @app.route("/api/devices", methods=["POST"], endpoint="api_register_device")
    def api_register_device():
        body = json_body()
        device = registry.register(
            current_tenant(),
            name=body.get("name"),
            device_type=body.get("device_type"),
            connection=body.get("connection"),
            auto_sync=bool(body.get("auto_sync", True)),
            sync_interval=body.get("sync_interval", 5),
            push_key=body.get("push_key"),
            notes=body.get("notes"),
        )
        return ok(device.to_dict(), status=201)

    @app.route("/api/devices/<device_id>", methods=["GET"], endpoint="api_get_device")
    def api_get_device(device_id: str):
        return ok(registry.get(current_tenant(), device_id).to_dict())

    @app.route("/api/devices/<device_id>", methods=["PATCH"], endpoint="api_update_device")
    def api_update_device(device_id: str):
        device = registry.update_config(current_tenant(), device_id, json_body())
        return ok(device.to_dict())

    @app.route("/api/devices/<device_id>", methods=["DELETE"], endpoint="api_delete_device")
    def api_delete_device(device_id: str):
        registry.delete(current_tenant(), device_id)
        return ok(None)

    @app.route("/api/devices/<device_id>/test-connection", methods=["POST"], endpoint="api_test_device")
    def api_test_device(device_id: str):
        return ok(registry.test_connection(current_tenant(), device_id).to_dict())

    @app.route("/api/devices/<device_id>/sync", methods=["POST"], endpoint="api_sync_device")
    def api_sync_device(device_id: str):
        result = ingestion.sync_device(current_tenant(), device_id)
        return ok(result.to_dict())

    @app.route("/api/devices/sync-due", methods=["POST"], endpoint="api_sync_due")
    def api_sync_due():
        summaries = ingestion.sync_all_due(tenant_id=current_tenant())
        return ok(summaries, count=len(summaries))

    @app.route("/api/devices/<device_id>/push", methods=["POST"], endpoint="api_push_logs")
    def api_push_logs(device_id: str):
        """Logs pushed by the device itself, authenticated with its push key."""
        logs = _list_field(json_body(), "logs")
        result = ingestion.push_logs(current_tenant(), device_id, request.headers.get(DEVICE_KEY_HEADER), logs)
        return ok(result.to_dict())

    @app.route("/api/attendance/import", methods=["POST"], endpoint="api_import_rows")
    def api_import_rows():
        body = json_body()
        rows = _list_field(body, "rows")
        result = ingestion.import_rows(current_tenant(), rows, device_id=body.get("device_id") or None)
        return ok(result.to_dict())
