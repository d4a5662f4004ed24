"""CLI tests for rule and exclusion management commands."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from vaultsort.cli import cli
from vaultsort.config import ConfigManager, VaultsortConfig


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("VAULTSORT__")}
    env["HOME"] = str(tmp_path)
    return env


def _load(tmp_path: Path) -> VaultsortConfig:
    return ConfigManager(config_path=tmp_path / ".vaultsort" / "config.yaml", env={}).load()


def _folders(tmp_path: Path) -> list[str]:
    return [rule.folder for rule in _load(tmp_path).rules]


def test_rules_add_and_reorder(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    added = runner.invoke(cli, ["rules", "add", "--folder", "Archive", "--tag", "archive"], env=env)
    assert added.exit_code == 0, added.output
    assert "Added rule 1" in added.output

    first = runner.invoke(
        cli, ["rules", "add", "--folder", "Images", "--type", "png", "--position", "1"], env=env
    )
    assert first.exit_code == 0, first.output
    assert _folders(tmp_path) == ["Images", "Archive"]

    assert runner.invoke(cli, ["rules", "up", "2"], env=env).exit_code == 0
    assert _folders(tmp_path) == ["Archive", "Images"]

    assert runner.invoke(cli, ["rules", "down", "1"], env=env).exit_code == 0
    assert _folders(tmp_path) == ["Images", "Archive"]

    assert runner.invoke(cli, ["rules", "move", "2", "1"], env=env).exit_code == 0
    assert _folders(tmp_path) == ["Archive", "Images"]


def test_rules_toggle_and_remove(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["rules", "add", "--folder", "Archive", "--tag", "archive"], env=env)
    runner.invoke(cli, ["rules", "add", "--folder", "Images", "--type", "png"], env=env)

    toggled = runner.invoke(cli, ["rules", "toggle", "1"], env=env)
    assert toggled.exit_code == 0
    assert "Rule 1 disabled" in toggled.output
    assert not _load(tmp_path).rules[0].enabled

    assert runner.invoke(cli, ["rules", "toggle", "1", "--on"], env=env).exit_code == 0
    assert _load(tmp_path).rules[0].enabled

    assert runner.invoke(cli, ["rules", "remove", "2"], env=env).exit_code == 0
    assert _folders(tmp_path) == ["Archive"]


def test_rules_invalid_positions_fail(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["rules", "add", "--folder", "Archive", "--tag", "archive"], env=env)

    assert runner.invoke(cli, ["rules", "up", "1"], env=env).exit_code != 0
    assert runner.invoke(cli, ["rules", "remove", "5"], env=env).exit_code != 0
    assert _folders(tmp_path) == ["Archive"]


def test_rules_add_requires_folder_value(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["rules", "add", "--folder", " / ", "--tag", "x"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert _load(tmp_path).rules == []


def test_rules_list_json(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["rules", "add", "--folder", "Screens", "--pattern", "screenshot"], env=env)

    result = runner.invoke(cli, ["rules", "list", "--json"], env=env)

    assert result.exit_code == 0, result.output
    rules = json.loads(result.output)["rules"]
    assert rules == [
        {
            "tag": None,
            "folder": "Screens",
            "file_type": None,
            "filename_pattern": "screenshot",
            "enabled": True,
        }
    ]


def test_exclude_add_list_remove(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    assert runner.invoke(cli, ["exclude", "add", "Daily/"], env=env).exit_code == 0
    assert runner.invoke(cli, ["exclude", "add", "Daily"], env=env).exit_code == 0
    assert _load(tmp_path).excluded_folders == ["Templates", "Daily"]

    listed = runner.invoke(cli, ["exclude", "list"], env=env)
    assert "- Templates" in listed.output
    assert "- Daily" in listed.output

    assert runner.invoke(cli, ["exclude", "remove", "Templates"], env=env).exit_code == 0
    assert runner.invoke(cli, ["exclude", "remove", "Missing"], env=env).exit_code != 0
    assert _load(tmp_path).excluded_folders == ["Daily"]
