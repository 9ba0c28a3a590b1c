from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List

from ...core.exceptions import UnsupportedDeviceType
from ..model import ConnectionCheck, Device


class DeviceAdapter(ABC):
    """Adapter Pattern: one vendor protocol per class."""

    @abstractmethod
    def fetch_logs(self, device: Device, *, since: datetime) -> List[Dict[str, Any]]:
        """Return raw vendor log payloads recorded after `since`."""
        raise NotImplementedError

    @abstractmethod
    def test_connection(self, device: Device) -> ConnectionCheck:
        raise NotImplementedError


class PushOnlyAdapter(DeviceAdapter):
    """Devices that deliver logs by push or file import only."""

    def fetch_logs(self, device: Device, *, since: datetime) -> List[Dict[str, Any]]:
        raise UnsupportedDeviceType(f"Sync not supported for device type: {device.device_type.value}")

    def test_connection(self, device: Device) -> ConnectionCheck:
        return ConnectionCheck(
            success=True,
            message=f"Device type {device.device_type.value} does not require connection test",
        )
