"""Tests for computing organization plans."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

import pytest

from vaultsort.organization.models import Rule, RunSnapshot, VaultFile
from vaultsort.organization.planner import OrganizerPlanner
from vaultsort.vault.errors import TagReadError


class _TagTable:
    """Tag reader backed by a mapping that counts lookups."""

    def __init__(self, tags: Mapping[str, Iterable[str]] | None = None) -> None:
        self.tags = dict(tags or {})
        self.calls: list[str] = []

    def __call__(self, file: VaultFile) -> Iterable[str]:
        self.calls.append(file.path)
        return self.tags.get(file.path, [])


def _files(*paths: str) -> list[VaultFile]:
    return [VaultFile.from_path(path) for path in paths]


def _snapshot(*rules: Rule, excluded: Iterable[str] = ()) -> RunSnapshot:
    return RunSnapshot(rules=tuple(rules), excluded_folders=tuple(excluded))


def test_tagged_note_moves_to_rule_folder() -> None:
    reader = _TagTable({"note.md": ["#archive"]})

    plan = OrganizerPlanner().build_plan(
        _files("note.md"),
        _snapshot(Rule(tag="#archive", folder="Archive")),
        tag_reader=reader,
    )

    assert [move.destination for move in plan.moves] == ["Archive/note.md"]
    assert plan.moves[0].matched_rule_folder == "Archive"


def test_first_matching_rule_wins() -> None:
    snapshot = _snapshot(
        Rule(filename_pattern="screenshot", folder="Screens"),
        Rule(file_type="png", folder="Images"),
    )

    plan = OrganizerPlanner().build_plan(_files("screenshot1.png"), snapshot)

    assert plan.moves[0].destination == "Screens/screenshot1.png"
    assert plan.moves[0].rule_index == 0


def test_tag_match_overrides_file_type_criterion() -> None:
    reader = _TagTable({"pic.md": ["img"]})
    snapshot = _snapshot(Rule(tag="#img", file_type="png", folder="Images"))

    plan = OrganizerPlanner().build_plan(_files("pic.md"), snapshot, tag_reader=reader)

    assert plan.moves[0].destination == "Images/pic.md"


def test_excluded_files_are_never_moved() -> None:
    reader = _TagTable({"Templates/sub/todo.md": ["archive"]})
    snapshot = _snapshot(Rule(tag="archive", folder="Archive"), excluded=["Templates"])

    plan = OrganizerPlanner().build_plan(
        _files("Templates/sub/todo.md"), snapshot, tag_reader=reader
    )

    assert plan.moves == []
    assert plan.conflicts == []
    assert reader.calls == []


def test_file_already_in_place_is_left_alone() -> None:
    reader = _TagTable({"Archive/note.md": ["archive"]})

    plan = OrganizerPlanner().build_plan(
        _files("Archive/note.md"),
        _snapshot(Rule(tag="archive", folder="Archive")),
        tag_reader=reader,
    )

    assert plan.moves == []


def test_in_place_check_stops_before_lower_rules() -> None:
    snapshot = _snapshot(
        Rule(tag="archive", folder="Archive"),
        Rule(file_type="md", folder="Notes"),
    )

    plan = OrganizerPlanner().build_plan(_files("Archive/x.md"), snapshot, tag_reader=_TagTable())

    assert plan.moves == []


def test_same_name_from_two_folders_conflicts() -> None:
    snapshot = _snapshot(Rule(file_type="md", folder="Out"))

    plan = OrganizerPlanner().build_plan(_files("Docs/a.md", "Notes/a.md"), snapshot)

    assert [move.source for move in plan.moves] == ["Docs/a.md"]
    assert len(plan.conflicts) == 1
    conflict = plan.conflicts[0]
    assert conflict.path == "Notes/a.md"
    assert conflict.reason == "destination_exists"
    assert conflict.destination == "Out/a.md"


def test_existing_destination_file_blocks_move() -> None:
    snapshot = _snapshot(Rule(file_type="md", folder="Out"))

    plan = OrganizerPlanner().build_plan(_files("a.md", "Out/a.md"), snapshot)

    assert plan.moves == []
    assert [record.path for record in plan.conflicts] == ["a.md"]


def test_existing_folder_at_destination_blocks_move() -> None:
    snapshot = _snapshot(Rule(file_type="md", folder="Out"))

    plan = OrganizerPlanner().build_plan(
        _files("a.md"), snapshot, existing_paths=["a.md", "Out", "Out/a.md"]
    )

    assert plan.moves == []
    assert plan.conflicts[0].destination == "Out/a.md"


def test_disabled_and_invalid_rules_are_skipped() -> None:
    snapshot = _snapshot(
        Rule(file_type="md", folder="Disabled", enabled=False),
        Rule(file_type="md", folder=""),
        Rule(file_type="md", folder="Notes"),
    )

    plan = OrganizerPlanner().build_plan(_files("a.md"), snapshot)

    assert plan.moves[0].destination == "Notes/a.md"
    assert plan.moves[0].rule_index == 2
    assert plan.invalid_rules == [1]
    assert plan.notes


def test_tag_read_failure_treats_note_as_untagged(caplog: pytest.LogCaptureFixture) -> None:
    def _broken(file: VaultFile) -> Iterable[str]:
        raise TagReadError(f"cannot read {file.path}")

    snapshot = _snapshot(
        Rule(tag="archive", folder="Archive"),
        Rule(file_type="md", folder="Notes"),
    )

    with caplog.at_level(logging.WARNING, logger="vaultsort"):
        plan = OrganizerPlanner().build_plan(_files("a.md"), snapshot, tag_reader=_broken)

    assert plan.moves[0].destination == "Notes/a.md"
    assert "Error checking tags for a.md" in caplog.text


def test_tags_read_once_and_only_for_notes() -> None:
    reader = _TagTable({"b.md": ["two"]})
    snapshot = _snapshot(
        Rule(tag="one", folder="One"),
        Rule(tag="two", folder="Two"),
    )

    plan = OrganizerPlanner().build_plan(_files("a.png", "b.md"), snapshot, tag_reader=reader)

    assert reader.calls == ["b.md"]
    assert plan.moves[0].destination == "Two/b.md"


def test_tags_not_read_without_tag_rules() -> None:
    reader = _TagTable()

    OrganizerPlanner().build_plan(
        _files("a.md"), _snapshot(Rule(file_type="md", folder="Notes")), tag_reader=reader
    )

    assert reader.calls == []


def test_record_tags_used_without_reader() -> None:
    files = [VaultFile.from_path("a.md", frozenset({"archive"}))]

    plan = OrganizerPlanner().build_plan(files, _snapshot(Rule(tag="archive", folder="Archive")))

    assert plan.moves[0].destination == "Archive/a.md"


def test_grouped_by_folder_preserves_order() -> None:
    snapshot = _snapshot(
        Rule(file_type="png", folder="Images"),
        Rule(file_type="md", folder="Notes"),
    )

    plan = OrganizerPlanner().build_plan(_files("a.png", "b.md", "c.png"), snapshot)

    assert plan.grouped_by_folder() == {"Images": ["a.png", "c.png"], "Notes": ["b.md"]}
