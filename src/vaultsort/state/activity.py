"""Append-only Markdown activity log of organization runs."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Mapping, Protocol, Sequence


class ActivityLog(Protocol):
    """Receives the moves of each run that relocated files."""

    def record(self, grouped: Mapping[str, Sequence[str]], timestamp: datetime) -> None:
        """Record filenames moved into each destination folder."""


class MarkdownActivityLog:
    """Append one section per run to a Markdown document.

    Each section is headed by the run timestamp and lists the moved
    filenames under their destination folder::

        ## 2026-10-18 09:30:00 UTC
        ### Archive
        - note.md
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def record(self, grouped: Mapping[str, Sequence[str]], timestamp: datetime) -> None:
        """Append a section describing one run.

        Raises:
            OSError: If the document cannot be written.
        """
        if not grouped:
            return
        lines = [f"## {timestamp.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}", ""]
        for folder, names in grouped.items():
            lines.append(f"### {folder}")
            lines.extend(f"- {name}" for name in names)
            lines.append("")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        is_new = not self.path.exists() or self.path.stat().st_size == 0
        with self.path.open("a", encoding="utf-8") as handle:
            if is_new:
                handle.write("# Vaultsort activity log\n\n")
            handle.write("\n".join(lines) + "\n")
