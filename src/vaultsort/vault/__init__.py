"""Vault store access: listing, tag extraction, and file relocation."""

from .errors import FolderCreationError, MoveError, TagReadError, VaultError
from .store import FilesystemVault, VaultStore
from .tags import extract_tags

__all__ = [
    "FilesystemVault",
    "VaultStore",
    "extract_tags",
    "VaultError",
    "TagReadError",
    "FolderCreationError",
    "MoveError",
]
