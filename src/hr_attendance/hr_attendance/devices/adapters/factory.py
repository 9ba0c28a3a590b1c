from __future__ import annotations

from dataclasses import dataclass, field

from ...core.constants import DEFAULT_CLOUD_FETCH_LIMIT, DEFAULT_CLOUD_TIMEOUT_SECONDS
from ...core.enums import DeviceType
from .base import DeviceAdapter, PushOnlyAdapter
from .cloud import CloudDeviceAdapter
from .zkteco import ZKTecoAdapter


@dataclass
class DeviceAdapterFactory:
    """Factory Pattern: pick the adapter for a device type."""

    cloud_limit: int = DEFAULT_CLOUD_FETCH_LIMIT
    cloud_timeout: int = DEFAULT_CLOUD_TIMEOUT_SECONDS
    _push_only: PushOnlyAdapter = field(default_factory=PushOnlyAdapter, init=False)

    def for_type(self, device_type: DeviceType) -> DeviceAdapter:
        if device_type == DeviceType.CLOUD:
            return CloudDeviceAdapter(limit=self.cloud_limit, timeout=self.cloud_timeout)
        if device_type == DeviceType.ZKTECO:
            return ZKTecoAdapter()
        return self._push_only
