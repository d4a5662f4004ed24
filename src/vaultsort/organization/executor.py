"""Executor for organization plans."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from vaultsort.vault.errors import VaultError

from .models import MoveFailure, MoveOperation, OperationPlan, RunResult

if TYPE_CHECKING:
    from vaultsort.vault.store import VaultStore

LOGGER = logging.getLogger(__name__)


class OperationExecutor:
    """Apply move plans through a vault store.

    Failures are contained per folder and per file: a folder that cannot be
    created voids only the moves into it, and a move that fails is recorded
    without affecting the others. There is no rollback; every completed move
    stays in place.
    """

    def __init__(self, store: VaultStore) -> None:
        self._store = store

    def apply(self, plan: OperationPlan, *, dry_run: bool = False) -> RunResult:
        """Apply the given plan by creating folders and moving files.

        Args:
            plan: Plan computed by the planner.
            dry_run: When true, report the planned moves without executing them.

        Returns:
            RunResult: Executed moves, failures, and conflicts carried from the plan.
        """

        result = RunResult(
            conflicts=list(plan.conflicts),
            notes=list(plan.notes),
            dry_run=dry_run,
        )

        if dry_run:
            result.moves = list(plan.moves)
            return self._finish(result)

        failed_folders = self._ensure_folders(plan)

        for move_op in plan.moves:
            if move_op.matched_rule_folder in failed_folders:
                result.failures.append(
                    self._failure(
                        move_op,
                        f"Destination folder {move_op.matched_rule_folder} could not be created",
                    )
                )
                continue
            try:
                self._store.move(move_op.source, move_op.destination)
            except (VaultError, OSError) as exc:
                LOGGER.error("Error moving file %s: %s", move_op.source, exc)
                result.failures.append(self._failure(move_op, str(exc)))
                continue
            LOGGER.info("Moved: %s -> %s", move_op.source, move_op.destination)
            result.moves.append(move_op)

        return self._finish(result)

    def _ensure_folders(self, plan: OperationPlan) -> set[str]:
        failed: set[str] = set()
        for folder in dict.fromkeys(move.matched_rule_folder for move in plan.moves):
            try:
                if self._store.exists(folder):
                    continue
                self._store.create_folder(folder)
            except (VaultError, OSError) as exc:
                LOGGER.error("Error creating folder %s: %s", folder, exc)
                failed.add(folder)
                continue
            LOGGER.info("Created folder: %s", folder)
        return failed

    def _failure(self, move_op: MoveOperation, error: str) -> MoveFailure:
        return MoveFailure(source=move_op.source, destination=move_op.destination, error=error)

    def _finish(self, result: RunResult) -> RunResult:
        result.moved_count = len(result.moves)
        result.finished_at = datetime.now(timezone.utc)
        return result


__all__ = ["OperationExecutor"]
