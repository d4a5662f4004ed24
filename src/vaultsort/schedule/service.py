"""Cooperative scheduler that triggers organization runs."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from vaultsort.config import ConfigError, VaultsortConfig
from vaultsort.organization.models import RunResult, RunSnapshot
from vaultsort.organization.service import OrganizationService
from vaultsort.state import StateError, StateRepository

LOGGER = logging.getLogger(__name__)

ConfigLoader = Callable[[], VaultsortConfig]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScheduleService:
    """Decide when to organize a vault and trigger the organization service.

    Settings are reloaded before every trigger, so edits take effect on the
    next run. Scheduled triggers are dropped while a run is active; manual
    triggers wait their turn.
    """

    def __init__(
        self,
        root: Path,
        service: OrganizationService,
        *,
        config_loader: ConfigLoader,
        state_repository: Optional[StateRepository] = None,
        clock: Clock = _utcnow,
        max_error_backoff_seconds: float = 3600.0,
    ) -> None:
        """Initialize the scheduler.

        Args:
            root: Vault root whose last-run timestamp drives the cadence.
            service: Organization service invoked for every trigger.
            config_loader: Callable returning freshly loaded settings.
            state_repository: Repository holding the last organized timestamp.
            clock: Callable returning the current UTC time.
            max_error_backoff_seconds: Upper bound on the delay after failed checks.
        """
        self._root = root
        self._service = service
        self._config_loader = config_loader
        self._repository = state_repository or StateRepository()
        self._clock = clock
        self._stop_event = threading.Event()
        self._max_backoff = max_error_backoff_seconds

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def on_startup(self) -> Optional[RunResult]:
        """Run once when the scheduler starts, if startup runs are enabled."""
        config = self._load_config()
        if config is None or not config.schedule.organize_on_startup:
            return None
        LOGGER.info("Organizing on startup.")
        return self._service.run_organization(RunSnapshot.from_config(config), wait=False)

    def is_due(self, config: VaultsortConfig, now: Optional[datetime] = None) -> bool:
        """Return whether an automatic run is due under ``config``."""
        if not config.schedule.automatic_organization:
            return False
        try:
            last = self._repository.last_organized_at(self._root)
        except StateError as exc:
            LOGGER.warning("Unable to read vault state, treating run as due: %s", exc)
            return True
        if last is None:
            return True
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        current = now or self._clock()
        return current - last >= timedelta(hours=config.schedule.interval_hours)

    def check_and_organize(self, now: Optional[datetime] = None) -> Optional[RunResult]:
        """Run if automatic organization is enabled and the interval has elapsed."""
        config = self._load_config()
        if config is None or not self.is_due(config, now):
            return None
        return self._service.run_organization(RunSnapshot.from_config(config), wait=False)

    def trigger(self) -> Optional[RunResult]:
        """Run immediately on user request, waiting for any active run."""
        config = self._load_config()
        if config is None:
            return None
        return self._service.run_organization(RunSnapshot.from_config(config), wait=True)

    def run_forever(self, callback: Optional[Callable[[RunResult], None]] = None) -> None:
        """Run the startup hook, then check periodically until :meth:`stop`.

        Args:
            callback: Optional callable invoked with every completed run.
        """
        self._stop_event.clear()
        self._dispatch(self.on_startup, callback)
        backoff: Optional[float] = None

        while not self._stop_event.is_set():
            config = self._load_config()
            interval = 60.0 * (config.schedule.check_interval_minutes if config else 60.0)
            delay = backoff if backoff is not None else interval
            if self._stop_event.wait(timeout=delay):
                break
            if self._dispatch(self.check_and_organize, callback):
                backoff = None
            else:
                backoff = min((backoff or 1.0) * 2, self._max_backoff, interval)

    def stop(self) -> None:
        """Ask :meth:`run_forever` to return after the current check."""
        self._stop_event.set()

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _dispatch(
        self,
        trigger: Callable[[], Optional[RunResult]],
        callback: Optional[Callable[[RunResult], None]],
    ) -> bool:
        try:
            result = trigger()
        except Exception:  # pragma: no cover - keeps the loop alive
            LOGGER.exception("Scheduled organization failed.")
            return False
        if result is not None and callback is not None:
            callback(result)
        return True

    def _load_config(self) -> Optional[VaultsortConfig]:
        try:
            return self._config_loader()
        except ConfigError as exc:
            LOGGER.error("Unable to load settings; skipping trigger: %s", exc)
            return None


__all__ = ["ScheduleService"]
