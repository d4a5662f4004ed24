"""Destination conflict tracking for a single planning pass."""

from __future__ import annotations

from typing import Iterable

from .models import Rule, VaultFile


class ConflictResolver:
    """Track occupied paths so no two moves ever share a destination.

    The resolver starts from the paths present in the run's snapshot and
    grows as the planner claims destinations. Paths vacated by planned moves
    are never released within the same run.
    """

    def __init__(self, existing_paths: Iterable[str] = ()) -> None:
        self._existing = {path.strip("/") for path in existing_paths}
        self._claimed: set[str] = set()

    @staticmethod
    def is_in_place(file: VaultFile, rule: Rule) -> bool:
        """Return whether the file already lives in the rule's folder."""
        return file.parent == rule.folder

    @staticmethod
    def destination_for(file: VaultFile, rule: Rule) -> str:
        """Return the path the file would occupy under the rule's folder."""
        return f"{rule.folder}/{file.name}"

    def is_free(self, destination: str) -> bool:
        """Return whether nothing exists or is planned at ``destination``."""
        return destination not in self._existing and destination not in self._claimed

    def claim(self, destination: str) -> None:
        """Reserve ``destination`` for a planned move."""
        self._claimed.add(destination)

    @property
    def claimed(self) -> frozenset[str]:
        """Return the destinations claimed so far."""
        return frozenset(self._claimed)


__all__ = ["ConflictResolver"]
