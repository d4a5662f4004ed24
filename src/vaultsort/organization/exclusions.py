"""Folder exclusion checks."""

from __future__ import annotations

from typing import Iterable

_SEPARATORS = ("/", "\\")


def is_excluded(path: str, excluded_folders: Iterable[str]) -> bool:
    """Return whether ``path`` lies beneath any excluded folder.

    The test is a plain prefix check against ``folder + separator`` for both
    forward and backward slashes; no glob or regex semantics apply.

    Args:
        path: Vault-relative file path.
        excluded_folders: Folder prefixes whose contents must never move.

    Returns:
        bool: True when the path is protected by an exclusion.
    """
    for folder in excluded_folders:
        prefix = folder.strip().rstrip("/\\")
        if not prefix:
            continue
        if any(path.startswith(prefix + separator) for separator in _SEPARATORS):
            return True
    return False


__all__ = ["is_excluded"]
