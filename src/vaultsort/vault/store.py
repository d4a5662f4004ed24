"""Vault store interface and the local filesystem implementation."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Protocol, Set, runtime_checkable

from vaultsort.organization.models import VaultFile
from vaultsort.state import DEFAULT_STATE_DIRNAME

from .errors import FolderCreationError, MoveError, TagReadError, VaultError
from .tags import extract_tags

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class VaultStore(Protocol):
    """Operations the organization engine needs from a vault."""

    def list_files(self) -> List[VaultFile]:
        """Return every file in the vault."""

    def list_folders(self) -> List[str]:
        """Return every folder path in the vault."""

    def read_tags(self, file: VaultFile) -> Set[str]:
        """Return raw frontmatter and inline tags for a note."""

    def exists(self, path: str) -> bool:
        """Return whether a file or folder exists at ``path``."""

    def create_folder(self, path: str) -> None:
        """Create ``path`` and any missing parents."""

    def move(self, source: str, destination: str) -> None:
        """Relocate ``source`` to ``destination`` without overwriting."""


def _is_hidden(relative: PurePosixPath) -> bool:
    return any(part.startswith(".") for part in relative.parts)


class FilesystemVault:
    """Vault store backed by a directory on the local filesystem.

    Paths exchanged with the engine are vault-relative and use forward
    slashes. Hidden entries and the Vaultsort state directory are never
    listed, so they are never organized.
    """

    def __init__(
        self,
        root: Path,
        *,
        include_hidden: bool = False,
        state_dirname: str = DEFAULT_STATE_DIRNAME,
    ) -> None:
        self.root = root.expanduser().resolve()
        self.include_hidden = include_hidden
        self.state_dirname = state_dirname

    def list_files(self) -> List[VaultFile]:
        """Return every visible file in sorted path order."""
        return [VaultFile.from_path(rel) for rel, path in self._walk() if path.is_file()]

    def list_folders(self) -> List[str]:
        """Return every visible folder in sorted path order."""
        return [rel for rel, path in self._walk() if path.is_dir()]

    def read_tags(self, file: VaultFile) -> Set[str]:
        """Return raw tags from the note's frontmatter and body.

        Raises:
            TagReadError: If the note cannot be read or its frontmatter is invalid.
        """
        try:
            text = self._resolve(file.path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise TagReadError(f"Unable to read {file.path}: {exc}") from exc
        return set(extract_tags(text))

    def exists(self, path: str) -> bool:
        """Return whether a file or folder exists at ``path``."""
        return self._resolve(path).exists()

    def create_folder(self, path: str) -> None:
        """Create ``path`` and missing parents.

        Raises:
            FolderCreationError: If the folder cannot be created.
        """
        target = self._resolve(path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except (FileExistsError, NotADirectoryError) as exc:
            raise FolderCreationError(f"{path} exists and is not a folder") from exc
        except OSError as exc:
            raise FolderCreationError(f"Unable to create folder {path}: {exc}") from exc
        LOGGER.debug("Ensured folder %s", path)

    def move(self, source: str, destination: str) -> None:
        """Rename ``source`` to ``destination``.

        Raises:
            MoveError: If the source is missing, the destination is occupied,
                or the rename fails.
        """
        source_path = self._resolve(source)
        destination_path = self._resolve(destination)
        if not source_path.exists():
            raise MoveError(f"Source path is missing: {source}")
        if destination_path.exists():
            raise MoveError(f"Destination already exists: {destination}")
        try:
            source_path.rename(destination_path)
        except OSError as exc:
            raise MoveError(f"Unable to move {source} to {destination}: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _walk(self) -> Iterator[tuple[str, Path]]:
        if not self.root.is_dir():
            return
        for path in sorted(self.root.rglob("*")):
            relative = PurePosixPath(path.relative_to(self.root).as_posix())
            if relative.parts and relative.parts[0] == self.state_dirname:
                continue
            if not self.include_hidden and _is_hidden(relative):
                continue
            yield relative.as_posix(), path

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path.replace("\\", "/").strip("/"))
        if ".." in relative.parts:
            raise VaultError(f"Path escapes the vault root: {path}")
        return self.root.joinpath(*relative.parts)


__all__ = ["VaultStore", "FilesystemVault", "DEFAULT_STATE_DIRNAME"]
