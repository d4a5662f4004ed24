"""State repository errors."""


class StateError(Exception):
    """Base exception for vault state operations."""


class MissingStateError(StateError):
    """Raised when a vault has never been organized."""


class StateWriteError(StateError):
    """Raised when vault state cannot be written to disk."""
