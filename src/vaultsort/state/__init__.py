"""State persistence helpers for Vaultsort."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .activity import MarkdownActivityLog
from .errors import MissingStateError, StateError, StateWriteError
from .models import VaultState

DEFAULT_STATE_DIRNAME = ".vaultsort"


class StateRepository:
    """Manage the persistence of per-vault run metadata."""

    def __init__(self, base_dirname: str = DEFAULT_STATE_DIRNAME) -> None:
        """Initialize the repository with an optional base directory name.

        Args:
            base_dirname: Name of the directory that stores vault state.
        """
        self._base_dirname = base_dirname

    @property
    def base_dirname(self) -> str:
        """Return the directory name used for vault metadata."""
        return self._base_dirname

    def state_dir(self, root: Path) -> Path:
        """Return the state directory for a vault."""
        return root / self._base_dirname

    def load(self, root: Path) -> VaultState:
        """Load vault state for the given root.

        Args:
            root: Root path of the vault.

        Returns:
            VaultState: Deserialized state model for the vault.

        Raises:
            MissingStateError: If no state file is present.
            StateError: If stored data cannot be parsed.
        """
        state_path = self.state_dir(root) / "state.json"
        if not state_path.exists():
            raise MissingStateError(f"No vault state found at {state_path}")

        try:
            data = json.loads(state_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StateError(f"Invalid vault state data: {exc}") from exc

        try:
            return VaultState.model_validate(data)
        except ValidationError as exc:
            message = f"Vault state at {state_path} has an unexpected shape: {exc}"
            raise StateError(message) from exc

    def load_or_create(self, root: Path) -> VaultState:
        """Return stored state, or a fresh record when the vault is new."""
        try:
            return self.load(root)
        except MissingStateError:
            return VaultState(root=str(root))

    def save(self, root: Path, state: VaultState) -> None:
        """Persist vault state for the given root.

        Raises:
            StateWriteError: If the state file cannot be written.
        """
        state.updated_at = datetime.now(timezone.utc)
        if state.created_at.tzinfo is None:
            state.created_at = state.created_at.replace(tzinfo=timezone.utc)
        payload = state.model_dump(mode="json")
        try:
            directory = self.initialize(root)
            (directory / "state.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StateWriteError(f"Unable to write vault state: {exc}") from exc

    def initialize(self, root: Path) -> Path:
        """Create the state directory for a vault and return it."""
        directory = self.state_dir(root)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def last_organized_at(self, root: Path) -> datetime | None:
        """Return the time of the last completed run, if any.

        Raises:
            StateError: If stored data cannot be parsed.
        """
        try:
            return self.load(root).last_organized_at
        except MissingStateError:
            return None

    def record_run(self, root: Path, timestamp: datetime | None = None) -> VaultState:
        """Store ``timestamp`` as the time of the last completed run.

        Unreadable state is replaced rather than blocking the update.
        """
        try:
            state = self.load_or_create(root)
        except StateError:
            state = VaultState(root=str(root))
        state.last_organized_at = timestamp or datetime.now(timezone.utc)
        self.save(root, state)
        return state


__all__ = [
    "StateRepository",
    "DEFAULT_STATE_DIRNAME",
    "VaultState",
    "MarkdownActivityLog",
    "StateError",
    "MissingStateError",
    "StateWriteError",
]
