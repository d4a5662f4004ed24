"""Vault store errors."""


class VaultError(Exception):
    """Base exception for vault store operations."""


class TagReadError(VaultError):
    """Raised when a note's tag metadata cannot be read."""


class FolderCreationError(VaultError):
    """Raised when a destination folder cannot be created."""


class MoveError(VaultError):
    """Raised when a file cannot be relocated."""
