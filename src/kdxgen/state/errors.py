"""State management errors."""


class StateError(Exception):
    """Base exception for collection file operations."""


class MissingStateError(StateError):
    """Raised when the device holds no collections file."""
