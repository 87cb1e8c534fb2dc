"""Errors raised while scanning a device."""


class ScanError(Exception):
    """Base exception for fatal scan failures."""


class InvalidRootError(ScanError):
    """Raised when the supplied device root is not a directory."""


class DeviceSignatureError(ScanError):
    """Raised when the device root lacks the expected directory layout."""
