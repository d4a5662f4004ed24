"""Planner for organization operations."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from vaultsort.vault.errors import VaultError

from .conflicts import ConflictResolver
from .exclusions import is_excluded
from .matcher import RuleMatcher
from .models import MoveOperation, OperationPlan, Rule, RunSnapshot, SkipRecord, VaultFile
from .tags import normalize_tags

LOGGER = logging.getLogger(__name__)

TagReader = Callable[[VaultFile], Iterable[str]]


class OrganizerPlanner:
    """Derive move plans from a file snapshot and an ordered rule sequence."""

    def __init__(self, matcher: Optional[RuleMatcher] = None) -> None:
        self._matcher = matcher or RuleMatcher()

    def build_plan(
        self,
        files: Iterable[VaultFile],
        snapshot: RunSnapshot,
        *,
        tag_reader: Optional[TagReader] = None,
        existing_paths: Optional[Iterable[str]] = None,
    ) -> OperationPlan:
        """Produce a move plan for the given files.

        Args:
            files: File snapshot taken once at the start of the run.
            snapshot: Immutable rules and exclusions for the run.
            tag_reader: Callable returning raw tags for a tag-bearing note.
                When omitted, the tags already on each record are used.
            existing_paths: Paths occupied in the vault (files and folders).
                Defaults to the paths of ``files``.

        Returns:
            OperationPlan: Planned moves, recorded conflicts, and notes.
        """

        files = list(files)
        plan = OperationPlan()
        occupied = existing_paths if existing_paths is not None else (f.path for f in files)
        resolver = ConflictResolver(occupied)
        active = self._active_rules(snapshot.rules, plan)

        for file in files:
            if is_excluded(file.path, snapshot.excluded_folders):
                LOGGER.debug("Skipping excluded file %s", file.path)
                continue

            outcome = self._plan_file(file, active, resolver, tag_reader)
            if isinstance(outcome, MoveOperation):
                plan.moves.append(outcome)
            elif outcome is not None and outcome.reason == "destination_exists":
                plan.conflicts.append(outcome)

        return plan

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _active_rules(self, rules: Iterable[Rule], plan: OperationPlan) -> list[tuple[int, Rule]]:
        active: list[tuple[int, Rule]] = []
        for index, rule in enumerate(rules):
            if not rule.enabled:
                continue
            if not rule.is_valid:
                LOGGER.warning("Skipping rule %d: no destination folder configured.", index + 1)
                plan.invalid_rules.append(index)
                plan.notes.append(f"Rule {index + 1} skipped: no destination folder configured.")
                continue
            active.append((index, rule))
        return active

    def _plan_file(
        self,
        file: VaultFile,
        rules: list[tuple[int, Rule]],
        resolver: ConflictResolver,
        tag_reader: Optional[TagReader],
    ) -> MoveOperation | SkipRecord | None:
        tags_loaded = tag_reader is None
        for index, rule in rules:
            if resolver.is_in_place(file, rule):
                LOGGER.debug("%s already in %s; leaving in place", file.path, rule.folder)
                return SkipRecord(path=file.path, reason="already_in_place", rule_index=index)

            if rule.tag and file.is_tag_bearing and not tags_loaded:
                file = file.model_copy(update={"tags": self._read_tags(file, tag_reader)})
                tags_loaded = True

            if not self._matcher.matches(file, rule):
                continue

            destination = resolver.destination_for(file, rule)
            if not resolver.is_free(destination):
                message = f"File already exists at {destination}, skipping {file.path}"
                LOGGER.warning("File already exists at %s, skipping %s", destination, file.path)
                return SkipRecord(
                    path=file.path,
                    reason="destination_exists",
                    destination=destination,
                    rule_index=index,
                    message=message,
                )

            resolver.claim(destination)
            return MoveOperation(
                source=file.path,
                destination=destination,
                matched_rule_folder=rule.folder,
                rule_index=index,
            )
        return None

    def _read_tags(self, file: VaultFile, tag_reader: Optional[TagReader]) -> frozenset[str]:
        if tag_reader is None:
            return file.tags
        try:
            return normalize_tags(tag_reader(file))
        except (VaultError, OSError, ValueError) as exc:
            LOGGER.warning("Error checking tags for %s: %s", file.path, exc)
            return frozenset()


__all__ = ["OrganizerPlanner", "TagReader"]
