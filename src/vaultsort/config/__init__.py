"""Configuration management for Vaultsort."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Mapping

import yaml

from vaultsort.organization.rules import RuleSequence

from .exceptions import ConfigError
from .models import VaultsortConfig
from .resolver import ENV_PREFIX, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.vaultsort/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # Vaultsort configuration file
    # Rules are checked top to bottom; the first rule that applies to a file wins.
    # Manage rules with `vaultsort rules ...` or edit this file via `vaultsort config edit`.
    """
)


class ConfigManager:
    """Load and persist configuration data, applying precedence rules.

    The manager is the long-lived settings store. The organization engine
    never holds onto it; each run receives an immutable snapshot taken from
    a freshly loaded configuration.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Path of the YAML settings file."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> VaultsortConfig:
        """Return settings merged from defaults, the file, environment, and CLI overrides."""
        if ensure_file:
            self.ensure_exists()

        env_data: Mapping[str, str] | None = None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env

        return resolve_with_precedence(
            defaults=VaultsortConfig(),
            file_overrides=self._read_file(),
            env_overrides=self._extract_env(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the settings file."""
        return self._read_file()

    def save(self, config: VaultsortConfig | Mapping[str, Any]) -> None:
        """Write settings to the YAML file, replacing its contents."""
        if isinstance(config, VaultsortConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Write a default settings file when none exists and return its path."""
        if not self._config_path.exists():
            self._write_file(VaultsortConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the settings file text, or an empty string when missing."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def update_rules(self, change: Callable[[RuleSequence], RuleSequence]) -> RuleSequence:
        """Apply ``change`` to the stored rule sequence and persist the result.

        Environment and CLI overrides are ignored so that only the file's own
        rules are rewritten.

        Args:
            change: Callable receiving the current sequence and returning the new one.

        Returns:
            RuleSequence: The persisted sequence.
        """
        file_data = self._read_file()
        current = resolve_with_precedence(defaults=VaultsortConfig(), file_overrides=file_data)
        updated = change(RuleSequence(current.rules))
        file_data["rules"] = [rule.model_dump(mode="python") for rule in updated]
        self._validate_and_write(file_data)
        return updated

    def update_excluded_folders(self, change: Callable[[List[str]], List[str]]) -> List[str]:
        """Apply ``change`` to the stored exclusion list and persist the result."""
        file_data = self._read_file()
        current = resolve_with_precedence(defaults=VaultsortConfig(), file_overrides=file_data)
        file_data["excluded_folders"] = list(change(list(current.excluded_folders)))
        config = resolve_with_precedence(defaults=VaultsortConfig(), file_overrides=file_data)
        file_data["excluded_folders"] = list(config.excluded_folders)
        self._write_file(file_data)
        return list(config.excluded_folders)

    # Internal helpers -------------------------------------------------

    def _validate_and_write(self, file_data: dict[str, Any]) -> VaultsortConfig:
        config = resolve_with_precedence(defaults=VaultsortConfig(), file_overrides=file_data)
        self._write_file(file_data)
        return config

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(
                f"Settings file {self._config_path} is not valid YAML: {exc}"
            ) from exc

        if not isinstance(raw, dict):
            raise ConfigError(f"Settings file {self._config_path} must hold a mapping.")

        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(dict(data), sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{serialized}", encoding="utf-8"
        )

    def _extract_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in env.items():
            if not key.startswith(ENV_PREFIX) or len(key) == len(ENV_PREFIX):
                continue
            try:
                parsed_value: Any = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                parsed_value = raw_value
            dotted = ".".join(segment.lower() for segment in key[len(ENV_PREFIX) :].split("__"))
            overrides[dotted] = parsed_value
        return overrides


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "VaultsortConfig",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
