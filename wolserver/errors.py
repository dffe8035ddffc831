"""Error types for wolserver."""


class WolServerError(Exception):
    """Base error for wolserver."""


class InvalidFormat(WolServerError, ValueError):
    """Raised when a MAC address string is not in canonical form."""


class SendError(WolServerError):
    """Raised when both the primary and fallback broadcast sends failed."""

    def __init__(self, message: str, primary_error: Exception | None = None) -> None:
        super().__init__(message)
        self.primary_error = primary_error


class DeviceNotFound(WolServerError):
    """Raised when the registry has no device with the requested id."""


class DuplicateMac(WolServerError):
    """Raised when a MAC address is already registered to another device."""
