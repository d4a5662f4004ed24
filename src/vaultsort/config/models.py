"""Configuration models describing Vaultsort settings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vaultsort.organization.models import Rule


class VaultsortBaseModel(BaseModel):
    """Shared configuration for Vaultsort Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ScheduleSettings(VaultsortBaseModel):
    """Cadence toggles for unattended organization.

    Attributes:
        organize_on_startup: Whether to organize when the scheduler starts.
        automatic_organization: Whether periodic checks may trigger a run.
        interval_hours: Minimum time between automatic runs.
        check_interval_minutes: How often the scheduler checks whether a run is due.
    """

    organize_on_startup: bool = True
    automatic_organization: bool = True
    interval_hours: float = Field(default=24.0, gt=0)
    check_interval_minutes: float = Field(default=60.0, gt=0)


class VaultOptions(VaultsortBaseModel):
    """Options governing how the vault is listed.

    Attributes:
        include_hidden: Whether dot-prefixed files and folders are organized.
    """

    include_hidden: bool = False


class ActivityLogSettings(VaultsortBaseModel):
    """Settings for the Markdown activity log written after each run.

    Attributes:
        enabled: Whether runs that move files are appended to the log.
        filename: Log document name inside the vault's state directory.
    """

    enabled: bool = True
    filename: str = "activity-log.md"


class LoggingSettings(VaultsortBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(VaultsortBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class VaultsortConfig(VaultsortBaseModel):
    """Top-level configuration struct for Vaultsort.

    Attributes:
        rules: Ordered rule sequence; the first entry has the highest priority.
        excluded_folders: Folders whose contents are never moved.
        schedule: Cadence settings for unattended runs.
        vault: Vault listing options.
        activity_log: Activity log settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    rules: List[Rule] = Field(default_factory=list)
    excluded_folders: List[str] = Field(default_factory=lambda: ["Templates"])
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    vault: VaultOptions = Field(default_factory=VaultOptions)
    activity_log: ActivityLogSettings = Field(default_factory=ActivityLogSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)

    @field_validator("excluded_folders", mode="before")
    @classmethod
    def _drop_blank_folders(cls, value: object) -> object:
        if isinstance(value, list):
            return [str(item).strip() for item in value if item is not None and str(item).strip()]
        return value


__all__ = [
    "VaultsortBaseModel",
    "ScheduleSettings",
    "VaultOptions",
    "ActivityLogSettings",
    "LoggingSettings",
    "CLIOptions",
    "VaultsortConfig",
]
