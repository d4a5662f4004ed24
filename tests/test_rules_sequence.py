"""Tests for the ordered rule sequence."""

from __future__ import annotations

import pytest

from vaultsort.organization.errors import RuleSequenceError
from vaultsort.organization.models import Rule
from vaultsort.organization.rules import RuleSequence


def _sequence() -> RuleSequence:
    return RuleSequence(
        [
            Rule(tag="a", folder="A"),
            Rule(tag="b", folder="B"),
            Rule(tag="c", folder="C"),
        ]
    )


def _folders(sequence: RuleSequence) -> list[str]:
    return [rule.folder for rule in sequence]


def test_add_appends_or_inserts() -> None:
    sequence = _sequence()

    assert _folders(sequence.add(Rule(tag="d", folder="D"))) == ["A", "B", "C", "D"]
    assert _folders(sequence.add(Rule(tag="d", folder="D"), 0)) == ["D", "A", "B", "C"]


def test_mutators_leave_original_untouched() -> None:
    sequence = _sequence()

    sequence.remove(0)
    sequence.toggle(1)

    assert _folders(sequence) == ["A", "B", "C"]
    assert all(rule.enabled for rule in sequence)


def test_swap_adjacent_moves_priority() -> None:
    sequence = _sequence()

    assert _folders(sequence.swap_adjacent(1, "up")) == ["B", "A", "C"]
    assert _folders(sequence.swap_adjacent(1, "down")) == ["A", "C", "B"]


def test_swap_adjacent_rejects_edges() -> None:
    sequence = _sequence()

    with pytest.raises(RuleSequenceError):
        sequence.swap_adjacent(0, "up")
    with pytest.raises(RuleSequenceError):
        sequence.swap_adjacent(2, "down")


def test_move_to_relocates_rule() -> None:
    assert _folders(_sequence().move_to(0, 2)) == ["B", "C", "A"]
    assert _folders(_sequence().move_to(2, 0)) == ["C", "A", "B"]


def test_toggle_and_enabled_iteration() -> None:
    sequence = _sequence().toggle(1)

    assert not sequence[1].enabled
    assert [index for index, _ in sequence.enabled()] == [0, 2]
    assert sequence.toggle(1, enabled=True)[1].enabled


def test_out_of_range_positions_raise() -> None:
    sequence = _sequence()

    with pytest.raises(RuleSequenceError):
        sequence.remove(3)
    with pytest.raises(IndexError):
        sequence.add(Rule(tag="x", folder="X"), 5)
    with pytest.raises(RuleSequenceError):
        sequence.move_to(0, -1)


def test_replace_and_equality() -> None:
    replaced = _sequence().replace(0, Rule(tag="z", folder="Z"))

    assert replaced[0].folder == "Z"
    assert _sequence() == _sequence()
    assert replaced != _sequence()
