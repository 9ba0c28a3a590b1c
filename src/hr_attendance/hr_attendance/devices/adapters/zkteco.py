from __future__ import annotations

import socket
from datetime import datetime
from typing import Any, Dict, List

from ...core.exceptions import UnsupportedDeviceType
from ..model import ConnectionCheck, Device
from .base import DeviceAdapter

ZKTECO_DEFAULT_PORT = 4370


class ZKTecoAdapter(DeviceAdapter):
    """ZKTeco terminals push their logs; pulling needs the vendor SDK.

    Only reachability of the terminal is checked here.
    """

    def __init__(self, *, timeout: float = 5.0):
        self.timeout = timeout

    def fetch_logs(self, device: Device, *, since: datetime) -> List[Dict[str, Any]]:
        raise UnsupportedDeviceType(f"Sync not supported for device type: {device.device_type.value}")

    def test_connection(self, device: Device) -> ConnectionCheck:
        host = device.connection.ip_address
        if not host:
            return ConnectionCheck(success=False, message="IP address not configured for ZKTeco device")
        port = int(device.connection.port or ZKTECO_DEFAULT_PORT)
        try:
            with socket.create_connection((host, port), timeout=self.timeout):
                pass
        except OSError as exc:
            return ConnectionCheck(success=False, message=f"ZKTeco connection failed: {exc}")
        return ConnectionCheck(success=True, message="Connected to ZKTeco device")
