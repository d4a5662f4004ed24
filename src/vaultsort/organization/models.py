"""Organization rule, plan, and run result data models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from vaultsort.config import VaultsortConfig

TAG_BEARING_EXTENSIONS = frozenset({"md"})


class Rule(BaseModel):
    """A user-defined matching rule that routes files into a folder.

    Criteria left unset are ``None``; empty strings read from settings are
    coerced to ``None`` so an unset criterion can never be confused with one
    that is set to an empty value.

    Attributes:
        tag: Tag a note must carry, compared in normalized form.
        folder: Destination folder path relative to the vault root.
        file_type: File extension to match, without a leading dot.
        filename_pattern: Substring the file's base name must contain.
        enabled: Whether the rule participates in organization runs.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    tag: Optional[str] = None
    folder: str = ""
    file_type: Optional[str] = None
    filename_pattern: Optional[str] = None
    enabled: bool = True

    @field_validator("tag", "filename_pattern", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("file_type", mode="before")
    @classmethod
    def _normalize_file_type(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().lstrip(".")
            return value or None
        return value

    @field_validator("folder", mode="before")
    @classmethod
    def _normalize_folder(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip().replace("\\", "/").strip("/")
        return value

    @property
    def is_valid(self) -> bool:
        """Return whether the rule names a destination folder."""
        return bool(self.folder)

    @property
    def has_criteria(self) -> bool:
        """Return whether at least one matching criterion is configured."""
        return bool(self.tag or self.file_type or self.filename_pattern)

    def describe(self) -> str:
        """Return a compact human-readable summary of the rule criteria."""
        parts = []
        if self.tag:
            parts.append(f"tag={self.tag}")
        if self.file_type:
            parts.append(f"type={self.file_type}")
        if self.filename_pattern:
            parts.append(f"name~{self.filename_pattern}")
        criteria = ", ".join(parts) if parts else "no criteria"
        return f"{criteria} -> {self.folder or '<missing folder>'}"


class VaultFile(BaseModel):
    """Read-only projection of a file in the vault.

    Attributes:
        path: Forward-slash path relative to the vault root.
        name: Final path segment including the extension.
        base_name: Final path segment without the extension.
        extension: Extension without the leading dot.
        parent: Parent folder path, empty for files at the vault root.
        tags: Normalized tags attached to the file.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    base_name: str
    extension: str = ""
    parent: str = ""
    tags: FrozenSet[str] = Field(default_factory=frozenset)

    @classmethod
    def from_path(cls, path: str, tags: FrozenSet[str] | None = None) -> "VaultFile":
        """Build a file record from a vault-relative path."""
        normalized = path.replace("\\", "/").strip("/")
        parent, _, name = normalized.rpartition("/")
        base_name, dot, extension = name.rpartition(".")
        if not dot or not base_name:
            base_name, extension = name, ""
        return cls(
            path=normalized,
            name=name,
            base_name=base_name,
            extension=extension,
            parent=parent,
            tags=tags or frozenset(),
        )

    @property
    def is_tag_bearing(self) -> bool:
        """Return whether tag metadata is meaningful for this file type."""
        return self.extension.lower() in TAG_BEARING_EXTENSIONS


class MoveOperation(BaseModel):
    """Represents moving a file into a rule's destination folder.

    Attributes:
        source: Path of the file before the move.
        destination: Path of the file after the move.
        matched_rule_folder: Folder of the rule that claimed the file.
        rule_index: Priority position of the rule that claimed the file.
    """

    source: str
    destination: str
    matched_rule_folder: str
    rule_index: int


class SkipRecord(BaseModel):
    """A file the planner decided not to move."""

    path: str
    reason: Literal["excluded", "already_in_place", "destination_exists"]
    destination: Optional[str] = None
    rule_index: Optional[int] = None
    message: str = ""


class MoveFailure(BaseModel):
    """A planned move that could not be completed."""

    source: str
    destination: str
    error: str


def _group(moves: List[MoveOperation]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for move in moves:
        name = move.destination.rpartition("/")[2]
        grouped.setdefault(move.matched_rule_folder, []).append(name)
    return grouped


class OperationPlan(BaseModel):
    """Aggregated organization plan for a single run."""

    moves: List[MoveOperation] = Field(default_factory=list)
    conflicts: List[SkipRecord] = Field(default_factory=list)
    invalid_rules: List[int] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)

    def grouped_by_folder(self) -> dict[str, list[str]]:
        """Return planned filenames keyed by destination folder, in plan order."""
        return _group(self.moves)


class RunResult(BaseModel):
    """Outcome of one organization run.

    Attributes:
        moved_count: Number of files actually moved.
        moves: Executed moves in plan order.
        failures: Planned moves that failed during execution.
        conflicts: Files skipped because their destination was occupied.
        notes: Planner notes such as skipped invalid rules.
        dry_run: Whether the run only previewed the moves.
        started_at: When the run began.
        finished_at: When the run completed.
    """

    moved_count: int = 0
    moves: List[MoveOperation] = Field(default_factory=list)
    failures: List[MoveFailure] = Field(default_factory=list)
    conflicts: List[SkipRecord] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    dry_run: bool = False
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    def grouped_by_folder(self) -> dict[str, list[str]]:
        """Return moved filenames keyed by destination folder, in move order."""
        return _group(self.moves)


class RunSnapshot(BaseModel):
    """Immutable copy of the settings a single run operates on."""

    model_config = ConfigDict(frozen=True)

    rules: Tuple[Rule, ...] = ()
    excluded_folders: Tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: "VaultsortConfig") -> "RunSnapshot":
        """Capture the rule sequence and exclusions from loaded settings."""
        return cls(
            rules=tuple(config.rules),
            excluded_folders=tuple(config.excluded_folders),
        )


__all__ = [
    "TAG_BEARING_EXTENSIONS",
    "Rule",
    "VaultFile",
    "MoveOperation",
    "SkipRecord",
    "MoveFailure",
    "OperationPlan",
    "RunResult",
    "RunSnapshot",
]
