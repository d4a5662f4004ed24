"""User-facing notifications for completed runs."""

from __future__ import annotations

from typing import Protocol

from rich.console import Console


class Notifier(Protocol):
    """Receives the number of files moved by a run."""

    def notify(self, moved_count: int) -> None:
        """Surface a completed run that moved files."""


class ConsoleNotifier:
    """Print a one-line summary through a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, moved_count: int) -> None:
        """Print how many files the run moved."""
        plural = "" if moved_count == 1 else "s"
        self._console.print(f"[green]Vaultsort: Moved {moved_count} file{plural}[/green]")


__all__ = ["Notifier", "ConsoleNotifier"]
