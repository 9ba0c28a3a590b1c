class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class TenantRequired(ValidationError):
    """Raised when a call arrives without a tenant context."""

    def __init__(self, message: str = "Tenant ID is required"):
        super().__init__(message)


class RecordNotFound(DomainError):
    """Raised when the attendance record an operation needs does not exist."""


class InvalidLeaveRange(ValidationError):
    """Raised when a leave ends before it starts."""


class DeviceNotFound(DomainError):
    """Raised when a device id does not belong to the tenant."""


class DuplicateDeviceName(ValidationError):
    """Raised when a device name is already taken within the tenant."""


class DeviceBusy(DomainError):
    """Raised when a device is already being synced. Retry later."""


class UnsupportedDeviceType(DomainError):
    """Raised when a device type has no pull adapter."""


class EntryResolutionError(DomainError):
    """Raised when a log entry cannot be mapped to an employee."""


class AuthenticationError(DomainError):
    """Raised when a device push carries invalid credentials."""
