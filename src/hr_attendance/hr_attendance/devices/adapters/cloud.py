from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

import requests

from ...core.constants import DEFAULT_CLOUD_FETCH_LIMIT, DEFAULT_CLOUD_TIMEOUT_SECONDS
from ...core.exceptions import ValidationError
from ..model import ConnectionCheck, Device
from .base import DeviceAdapter

log = logging.getLogger(__name__)


class CloudDeviceAdapter(DeviceAdapter):
    """Pulls logs from a vendor cloud API over HTTPS."""

    def __init__(self, *, limit: int = DEFAULT_CLOUD_FETCH_LIMIT, timeout: int = DEFAULT_CLOUD_TIMEOUT_SECONDS):
        self.limit = int(limit)
        self.timeout = int(timeout)

    def _headers(self, device: Device) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if device.connection.api_key:
            headers["X-API-Key"] = device.connection.api_key
        if device.connection.token:
            headers["Authorization"] = f"Bearer {device.connection.token}"
        return headers

    def fetch_logs(self, device: Device, *, since: datetime) -> List[Dict[str, Any]]:
        if not device.connection.api_url:
            raise ValidationError("API URL not configured for cloud device")

        response = requests.get(
            device.connection.api_url,
            headers=self._headers(device),
            params={"since": since.astimezone(timezone.utc).isoformat(), "limit": self.limit},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json() if response.content else []

        if isinstance(payload, dict):
            logs = payload.get("logs", payload.get("data", []))
        else:
            logs = payload
        if not isinstance(logs, list):
            logs = []

        log.info("Fetched %d log(s) from cloud device %s", len(logs), device.name)
        return [entry for entry in logs if isinstance(entry, dict)]

    def test_connection(self, device: Device) -> ConnectionCheck:
        try:
            logs = self.fetch_logs(device, since=datetime.now(timezone.utc))
        except (requests.RequestException, ValueError, ValidationError) as exc:
            return ConnectionCheck(success=False, message=str(exc))
        return ConnectionCheck(success=True, message="Cloud API connection successful", record_count=len(logs))
