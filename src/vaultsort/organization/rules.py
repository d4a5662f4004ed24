"""Ordered rule sequences where position encodes priority."""

from __future__ import annotations

from typing import Iterable, Iterator, Literal, Optional, Tuple

from .errors import RuleSequenceError
from .models import Rule


class RuleSequence:
    """Immutable ordered collection of rules; index 0 has the highest priority.

    Every mutator returns a new sequence, so a run holding a sequence never
    observes later edits.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: Tuple[Rule, ...] = tuple(rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[self._check(index)]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RuleSequence):
            return self._rules == other._rules
        return NotImplemented

    def __repr__(self) -> str:
        return f"RuleSequence({list(self._rules)!r})"

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """Return the rules as a tuple in priority order."""
        return self._rules

    def enabled(self) -> Iterator[tuple[int, Rule]]:
        """Yield ``(index, rule)`` pairs for enabled rules in priority order."""
        for index, rule in enumerate(self._rules):
            if rule.enabled:
                yield index, rule

    # ------------------------------------------------------------------ #
    # Mutators                                                           #
    # ------------------------------------------------------------------ #

    def add(self, rule: Rule, index: Optional[int] = None) -> "RuleSequence":
        """Return a sequence with ``rule`` appended or inserted at ``index``."""
        rules = list(self._rules)
        if index is None:
            rules.append(rule)
        else:
            if not 0 <= index <= len(rules):
                raise RuleSequenceError(f"Rule position {index} is out of range.")
            rules.insert(index, rule)
        return RuleSequence(rules)

    def remove(self, index: int) -> "RuleSequence":
        """Return a sequence without the rule at ``index``."""
        rules = list(self._rules)
        del rules[self._check(index)]
        return RuleSequence(rules)

    def replace(self, index: int, rule: Rule) -> "RuleSequence":
        """Return a sequence with the rule at ``index`` swapped for ``rule``."""
        rules = list(self._rules)
        rules[self._check(index)] = rule
        return RuleSequence(rules)

    def toggle(self, index: int, enabled: Optional[bool] = None) -> "RuleSequence":
        """Return a sequence with the rule at ``index`` enabled or disabled.

        Args:
            index: Position of the rule to toggle.
            enabled: Explicit state to set; flips the current state when omitted.
        """
        current = self[index]
        value = (not current.enabled) if enabled is None else enabled
        return self.replace(index, current.model_copy(update={"enabled": value}))

    def swap_adjacent(self, index: int, direction: Literal["up", "down"]) -> "RuleSequence":
        """Return a sequence with the rule at ``index`` swapped with a neighbour.

        ``up`` raises the rule's priority by one place, ``down`` lowers it.
        """
        self._check(index)
        neighbour = index - 1 if direction == "up" else index + 1
        if not 0 <= neighbour < len(self._rules):
            raise RuleSequenceError(f"Rule {index} cannot move {direction}.")
        rules = list(self._rules)
        rules[index], rules[neighbour] = rules[neighbour], rules[index]
        return RuleSequence(rules)

    def move_to(self, index: int, target: int) -> "RuleSequence":
        """Return a sequence with the rule at ``index`` relocated to ``target``."""
        self._check(index)
        self._check(target)
        rules = list(self._rules)
        rule = rules.pop(index)
        rules.insert(target, rule)
        return RuleSequence(rules)

    def _check(self, index: int) -> int:
        if not 0 <= index < len(self._rules):
            raise RuleSequenceError(f"No rule at position {index}.")
        return index


__all__ = ["RuleSequence"]
