"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from vaultsort.config import (
    ConfigError,
    ConfigManager,
    VaultsortConfig,
    flatten_for_env,
    resolve_with_precedence,
)
from vaultsort.organization.models import Rule


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".vaultsort" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "Vaultsort configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, VaultsortConfig)
    assert config.rules == []
    assert config.excluded_folders == ["Templates"]


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"schedule": {"interval_hours": 12, "organize_on_startup": False}})

    env = {"VAULTSORT__SCHEDULE__INTERVAL_HOURS": "6", "UNRELATED": "1"}

    from_env = manager.load(env_overrides=env)
    from_cli = manager.load(cli_overrides={"schedule.interval_hours": 3}, env_overrides=env)

    assert from_env.schedule.interval_hours == pytest.approx(6)
    assert from_env.schedule.organize_on_startup is False
    # CLI overrides take precedence over environment
    assert from_cli.schedule.interval_hours == pytest.approx(3)


def test_env_list_values_split_on_commas(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})

    config = manager.load(env_overrides={"VAULTSORT__EXCLUDED_FOLDERS": "Templates, Daily"})

    assert config.excluded_folders == ["Templates", "Daily"]


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_rule_field_raises(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.save({"rules": [{"folder": "Archive", "colour": "red"}]})

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(VaultsortConfig())

    assert flat["VAULTSORT__SCHEDULE__INTERVAL_HOURS"] == "24.0"
    assert flat["VAULTSORT__EXCLUDED_FOLDERS"] == "[Templates]"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=VaultsortConfig(),
            file_overrides={"schedule": {"interval_hours": 0}},
        )


def test_update_rules_persists_order(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.ensure_exists()

    manager.update_rules(lambda rules: rules.add(Rule(tag="#archive", folder="Archive")))
    manager.update_rules(lambda rules: rules.add(Rule(file_type="png", folder="Images"), 0))

    config = manager.load()
    assert [rule.folder for rule in config.rules] == ["Images", "Archive"]
    assert config.rules[1].tag == "#archive"


def test_update_excluded_folders_validates_and_writes(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.ensure_exists()

    updated = manager.update_excluded_folders(lambda folders: [*folders, " Daily ", ""])

    assert updated == ["Templates", "Daily"]
    assert manager.load().excluded_folders == ["Templates", "Daily"]
