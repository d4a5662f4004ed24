"""Single entry point that runs one organization pass over a vault."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from vaultsort.config.models import VaultsortConfig
from vaultsort.notify import Notifier
from vaultsort.state import StateError, StateRepository
from vaultsort.state.activity import ActivityLog, MarkdownActivityLog
from vaultsort.vault.errors import VaultError
from vaultsort.vault.store import FilesystemVault, VaultStore

from .executor import OperationExecutor
from .models import OperationPlan, RunResult, RunSnapshot
from .planner import OrganizerPlanner

LOGGER = logging.getLogger(__name__)


class OrganizationService:
    """Run organization passes against a vault, one at a time.

    Every trigger (startup, timer, or manual command) calls
    :meth:`run_organization`, so behavior does not depend on why a run was
    started. Runs never overlap: a caller either waits for the active run to
    finish or, with ``wait=False``, has its trigger dropped.
    """

    def __init__(
        self,
        store: VaultStore,
        *,
        notifier: Optional[Notifier] = None,
        activity_log: Optional[ActivityLog] = None,
        state_repository: Optional[StateRepository] = None,
        root: Optional[Path] = None,
        planner: Optional[OrganizerPlanner] = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Vault store the run reads from and moves files within.
            notifier: Receives the moved count when a run moved files.
            activity_log: Receives moves grouped by destination folder.
            state_repository: Records the last organized timestamp for ``root``.
            root: Vault root used for state bookkeeping.
            planner: Planner override, mainly for tests.
        """
        self._store = store
        self._notifier = notifier
        self._activity_log = activity_log
        self._state_repository = state_repository
        self._root = root
        self._planner = planner or OrganizerPlanner()
        self._executor = OperationExecutor(store)
        self._lock = threading.Lock()

    @classmethod
    def for_vault(
        cls,
        root: Path,
        config: VaultsortConfig,
        *,
        notifier: Optional[Notifier] = None,
        state_repository: Optional[StateRepository] = None,
    ) -> "OrganizationService":
        """Build a service over a local vault directory using loaded settings."""
        repository = state_repository or StateRepository()
        store = FilesystemVault(
            root,
            include_hidden=config.vault.include_hidden,
            state_dirname=repository.base_dirname,
        )
        activity_log = None
        if config.activity_log.enabled:
            activity_log = MarkdownActivityLog(
                repository.state_dir(store.root) / config.activity_log.filename
            )
        return cls(
            store,
            notifier=notifier,
            activity_log=activity_log,
            state_repository=repository,
            root=store.root,
        )

    @property
    def running(self) -> bool:
        """Return whether a run is currently in progress."""
        return self._lock.locked()

    def run_organization(
        self,
        snapshot: RunSnapshot,
        *,
        wait: bool = True,
        dry_run: bool = False,
    ) -> Optional[RunResult]:
        """Organize the vault once using ``snapshot``.

        Args:
            snapshot: Immutable rules and exclusions for this run.
            wait: Queue behind an active run when true; drop the trigger when false.
            dry_run: Plan and report without touching the vault.

        Returns:
            Optional[RunResult]: Outcome of the run, or ``None`` when the
            trigger was dropped because another run was active.
        """
        if not self._lock.acquire(blocking=wait):
            LOGGER.info("Organization already in progress; skipping trigger.")
            return None
        try:
            return self._run(snapshot, dry_run=dry_run)
        finally:
            self._lock.release()

    def preview(self, snapshot: RunSnapshot) -> OperationPlan:
        """Return the plan a run would execute without applying it."""
        with self._lock:
            return self._plan(snapshot)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _run(self, snapshot: RunSnapshot, *, dry_run: bool) -> RunResult:
        LOGGER.info("Starting file organization...")
        started_at = datetime.now(timezone.utc)
        plan = self._plan(snapshot)
        result = self._executor.apply(plan, dry_run=dry_run)
        result.started_at = started_at

        if result.moved_count:
            LOGGER.info("File organization complete: %d files moved", result.moved_count)
        else:
            LOGGER.info("File organization complete: No files to move")

        if not dry_run:
            self._report(result)
        return result

    def _plan(self, snapshot: RunSnapshot) -> OperationPlan:
        try:
            files = self._store.list_files()
            existing = [file.path for file in files] + list(self._store.list_folders())
        except (VaultError, OSError) as exc:
            LOGGER.error("Unable to list vault contents: %s", exc)
            return OperationPlan(notes=[f"Vault listing failed: {exc}"])
        return self._planner.build_plan(
            files,
            snapshot,
            tag_reader=self._store.read_tags,
            existing_paths=existing,
        )

    def _report(self, result: RunResult) -> None:
        timestamp = result.finished_at or datetime.now(timezone.utc)

        if self._state_repository is not None and self._root is not None:
            try:
                self._state_repository.record_run(self._root, timestamp)
            except StateError as exc:
                LOGGER.error("Unable to record run timestamp: %s", exc)

        if result.moved_count <= 0:
            return

        if self._activity_log is not None:
            try:
                self._activity_log.record(result.grouped_by_folder(), timestamp)
            except Exception:
                LOGGER.exception("Unable to write activity log.")

        if self._notifier is not None:
            try:
                self._notifier.notify(result.moved_count)
            except Exception:
                LOGGER.exception("Unable to send organization notice.")


__all__ = ["OrganizationService"]
