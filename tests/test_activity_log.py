"""Tests for the Markdown activity log and console notifier."""

from __future__ import annotations

import io
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console

from vaultsort.notify import ConsoleNotifier
from vaultsort.state.activity import MarkdownActivityLog


def test_record_writes_header_and_grouped_sections(tmp_path: Path) -> None:
    log = MarkdownActivityLog(tmp_path / "state" / "activity-log.md")
    stamp = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)

    log.record({"Archive": ["a.md", "b.md"], "Images": ["c.png"]}, stamp)

    text = log.path.read_text(encoding="utf-8")
    assert text.startswith("# Vaultsort activity log\n")
    assert "## 2026-10-18 09:30:00 UTC" in text
    assert "### Archive\n- a.md\n- b.md\n" in text
    assert "### Images\n- c.png\n" in text


def test_record_appends_later_runs(tmp_path: Path) -> None:
    log = MarkdownActivityLog(tmp_path / "activity-log.md")
    first = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
    second = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

    log.record({"Archive": ["a.md"]}, first)
    log.record({"Archive": ["b.md"]}, second)

    text = log.path.read_text(encoding="utf-8")
    assert text.count("# Vaultsort activity log") == 1
    assert text.index("2026-10-18") < text.index("2026-10-19")


def test_record_ignores_empty_runs(tmp_path: Path) -> None:
    log = MarkdownActivityLog(tmp_path / "activity-log.md")

    log.record({}, datetime.now(timezone.utc))

    assert not log.path.exists()


def test_console_notifier_pluralizes() -> None:
    buffer = io.StringIO()
    notifier = ConsoleNotifier(Console(file=buffer, width=120))

    notifier.notify(1)
    notifier.notify(3)

    lines = buffer.getvalue().splitlines()
    assert lines == ["Vaultsort: Moved 1 file", "Vaultsort: Moved 3 files"]
