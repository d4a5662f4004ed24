"""Command line interface for the Vaultsort project."""

from __future__ import annotations

import difflib
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from vaultsort.config import ConfigError, ConfigManager, VaultsortConfig, resolve_with_precedence
from vaultsort.logging_config import configure_logging
from vaultsort.notify import ConsoleNotifier
from vaultsort.organization.errors import RuleSequenceError
from vaultsort.organization.models import Rule, RunResult, RunSnapshot
from vaultsort.organization.rules import RuleSequence
from vaultsort.organization.service import OrganizationService
from vaultsort.schedule import ScheduleService
from vaultsort.state import StateError, StateRepository

console = Console()
err_console = Console(stderr=True)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    if summary_only and mode not in {"summary", "warning", "error"}:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _output_modes(
    ctx: click.Context,
    config: VaultsortConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Resolve quiet/summary flags against configuration defaults.

    Returns:
        tuple[bool, bool]: Effective quiet and summary-only settings.

    Raises:
        click.ClickException: If the requested modes conflict.
    """

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _load_config(json_output: bool = False) -> VaultsortConfig:
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        return manager.load()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        raise  # pragma: no cover - _handle_cli_error always raises


def _setup_logging(config: VaultsortConfig, root: Path | None = None) -> None:
    log_dir = StateRepository().state_dir(root) if root is not None else None
    configure_logging(config.logging, log_dir=log_dir, console=err_console)


def _result_payload(root: Path, result: RunResult) -> dict[str, Any]:
    return {
        "context": {"root": root.as_posix(), "dry_run": result.dry_run},
        "counts": {
            "moved": result.moved_count,
            "conflicts": len(result.conflicts),
            "failures": len(result.failures),
        },
        "moves": [move.model_dump(mode="json") for move in result.moves],
        "grouped": result.grouped_by_folder(),
        "conflicts": [record.model_dump(mode="json") for record in result.conflicts],
        "failures": [failure.model_dump(mode="json") for failure in result.failures],
        "notes": list(result.notes),
        "started_at": result.started_at.isoformat(),
        "finished_at": result.finished_at.isoformat() if result.finished_at else None,
    }


def _emit_result(root: Path, result: RunResult, *, quiet: bool, summary_only: bool) -> None:
    """Render a run result as a table plus warning and summary lines."""

    if result.moves:
        title = "Planned moves" if result.dry_run else "Moved files"
        table = Table(title=f"{title} in {root}")
        table.add_column("Source", overflow="fold")
        table.add_column("Destination", overflow="fold")
        table.add_column("Rule", justify="right")
        for move in result.moves:
            table.add_row(move.source, move.destination, str(move.rule_index + 1))
        _emit_message(table, mode="detail", quiet=quiet, summary_only=summary_only)

    for note in result.notes:
        _emit_message(
            f"[yellow]{note}[/yellow]", mode="warning", quiet=quiet, summary_only=summary_only
        )

    for record in result.conflicts:
        _emit_message(
            f"[yellow]Conflict: {record.path} not moved; "
            f"{record.destination} already exists.[/yellow]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )

    for failure in result.failures:
        _emit_message(
            f"[red]Failed to move {failure.source}: {failure.error}[/red]",
            mode="error",
            quiet=quiet,
            summary_only=summary_only,
        )

    metrics = {
        "planned" if result.dry_run else "moved": result.moved_count,
        "conflicts": len(result.conflicts),
        "failures": len(result.failures),
    }
    _emit_message(
        _format_summary_line("Organize", root, metrics),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


def _rule_table(rules: RuleSequence) -> Table:
    table = Table(title="Organization rules (checked top to bottom)")
    table.add_column("#", justify="right")
    table.add_column("Tag")
    table.add_column("Type")
    table.add_column("Name contains")
    table.add_column("Folder")
    table.add_column("Enabled")
    for index, rule in enumerate(rules):
        table.add_row(
            str(index + 1),
            rule.tag or "-",
            rule.file_type or "-",
            rule.filename_pattern or "-",
            rule.folder or "[red]<missing>[/red]",
            "yes" if rule.enabled else "no",
        )
    return table


def _update_rules(change: Callable[[RuleSequence], RuleSequence]) -> RuleSequence:
    """Apply a rule-sequence change through the settings store."""

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        return manager.update_rules(change)
    except (ConfigError, RuleSequenceError) as exc:
        raise click.ClickException(str(exc)) from exc


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="vaultsort")
def cli() -> None:
    """Vaultsort moves vault files into folders using ordered matching rules."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--dry-run", is_flag=True, help="Preview moves without modifying files.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the run.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def organize(
    ctx: click.Context,
    path: str,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Organize the vault at PATH once using the configured rules.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Vault root directory.
        dry_run: If True, report planned moves without moving anything.
        json_output: If True, emit JSON describing the run.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
    """

    config = _load_config(json_output)
    quiet_enabled, summary_only = _output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )

    root = Path(path).expanduser().resolve()
    _setup_logging(config, None if dry_run else root)

    if not config.rules:
        _emit_message(
            "[yellow]No rules configured. Add one with `vaultsort rules add`.[/yellow]",
            mode="warning",
            quiet=quiet_enabled or json_output,
            summary_only=summary_only,
        )

    service = OrganizationService.for_vault(root, config)
    result = service.run_organization(RunSnapshot.from_config(config), dry_run=dry_run)
    if result is None:  # pragma: no cover - a fresh service is never busy
        return

    if json_output:
        console.print_json(data=_result_payload(root, result))
        return

    _emit_result(root, result, quiet=quiet_enabled, summary_only=summary_only)


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--once", is_flag=True, help="Run the startup hook and one due check, then exit.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def schedule(
    ctx: click.Context,
    path: str,
    once: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Organize PATH on startup and whenever the configured interval elapses.

    Args:
        ctx: Click context for parameter source inspection.
        path: Vault root directory.
        once: When True, perform one startup run and one due check, then exit.
        summary_mode: When True, restrict output to summary/warning lines.
        quiet: When True, suppress non-error output entirely.
    """

    config = _load_config()
    quiet_enabled, summary_only = _output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=False
    )
    root = Path(path).expanduser().resolve()
    _setup_logging(config, root)

    manager = ConfigManager()
    repository = StateRepository()
    service = OrganizationService.for_vault(
        root,
        config,
        notifier=None if quiet_enabled else ConsoleNotifier(console),
        state_repository=repository,
    )
    scheduler = ScheduleService(
        root,
        service,
        config_loader=manager.load,
        state_repository=repository,
    )

    def _on_result(result: RunResult) -> None:
        _emit_result(root, result, quiet=quiet_enabled, summary_only=summary_only)

    if once:
        ran = False
        for trigger in (scheduler.on_startup, scheduler.check_and_organize):
            result = trigger()
            if result is not None:
                ran = True
                _on_result(result)
        if not ran:
            _emit_message(
                "[yellow]No organization run was due.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        return

    _emit_message(
        f"[cyan]Scheduling organization for {root}. Press Ctrl+C to stop.[/cyan]",
        mode="detail",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )
    try:
        scheduler.run_forever(_on_result)
    except KeyboardInterrupt:
        scheduler.stop()
        _emit_message(
            "[yellow]Scheduler stopped by user request.[/yellow]",
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit status information as JSON.")
def status(path: str, json_output: bool) -> None:
    """Display when PATH was last organized and the active settings.

    Args:
        path: Vault root directory.
        json_output: When True, emit JSON instead of textual output.
    """

    config = _load_config(json_output)
    root = Path(path).expanduser().resolve()

    try:
        last = StateRepository().last_organized_at(root)
    except StateError as exc:
        _handle_cli_error(str(exc), code="state_error", json_output=json_output, original=exc)
        return

    next_due: Optional[datetime] = None
    if config.schedule.automatic_organization:
        if last is None:
            next_due = datetime.now(timezone.utc)
        else:
            next_due = last + timedelta(hours=config.schedule.interval_hours)

    due = next_due is not None and next_due <= datetime.now(timezone.utc)
    enabled_rules = sum(1 for rule in config.rules if rule.enabled)
    payload = {
        "context": {"root": root.as_posix()},
        "last_organized_at": last.isoformat() if last else None,
        "next_due_at": next_due.isoformat() if next_due else None,
        "due": due,
        "rules": {"total": len(config.rules), "enabled": enabled_rules},
        "excluded_folders": list(config.excluded_folders),
        "schedule": config.schedule.model_dump(mode="json"),
    }

    if json_output:
        console.print_json(data=payload)
        return

    table = Table(title=f"Status for {root}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Last organized", last.isoformat() if last else "never")
    table.add_row("Next automatic run", next_due.isoformat() if next_due else "disabled")
    table.add_row("Due now", "yes" if due else "no")
    table.add_row("Rules (enabled/total)", f"{enabled_rules}/{len(config.rules)}")
    table.add_row("Excluded folders", ", ".join(config.excluded_folders) or "-")
    table.add_row("Organize on startup", "yes" if config.schedule.organize_on_startup else "no")
    console.print(table)


@cli.group()
def rules() -> None:
    """List and edit the ordered organization rules."""


@rules.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit rules as JSON.")
def rules_list(json_output: bool) -> None:
    """Show rules in priority order (position 1 is checked first)."""

    config = _load_config(json_output)
    sequence = RuleSequence(config.rules)
    if json_output:
        console.print_json(data={"rules": [rule.model_dump(mode="json") for rule in sequence]})
        return
    if not len(sequence):
        console.print("[yellow]No rules configured.[/yellow]")
        return
    console.print(_rule_table(sequence))


@rules.command("add")
@click.option("--folder", required=True, help="Destination folder for matching files.")
@click.option("--tag", help="Tag a note must carry (with or without #).")
@click.option("--type", "file_type", help="File extension to match, e.g. png.")
@click.option("--pattern", "filename_pattern", help="Text the filename must contain.")
@click.option("--position", type=int, help="Insert at this 1-based position instead of last.")
@click.option("--disabled", is_flag=True, help="Add the rule without enabling it.")
def rules_add(
    folder: str,
    tag: str | None,
    file_type: str | None,
    filename_pattern: str | None,
    position: int | None,
    disabled: bool,
) -> None:
    """Add a rule routing matching files into FOLDER."""

    rule = Rule(
        tag=tag,
        folder=folder,
        file_type=file_type,
        filename_pattern=filename_pattern,
        enabled=not disabled,
    )
    if not rule.is_valid:
        raise click.ClickException("--folder must name a destination folder.")
    if not rule.has_criteria:
        console.print(
            "[yellow]Rule has no tag, type, or pattern and will never match any file.[/yellow]"
        )
    index = None if position is None else position - 1
    updated = _update_rules(lambda current: current.add(rule, index))
    added_at = len(updated) if position is None else position
    console.print(f"[green]Added rule {added_at}: {rule.describe()}.[/green]")


@rules.command("remove")
@click.argument("position", type=int)
def rules_remove(position: int) -> None:
    """Remove the rule at POSITION."""

    _update_rules(lambda current: current.remove(position - 1))
    console.print(f"[green]Removed rule {position}.[/green]")


@rules.command("up")
@click.argument("position", type=int)
def rules_up(position: int) -> None:
    """Raise the priority of the rule at POSITION by one place."""

    _update_rules(lambda current: current.swap_adjacent(position - 1, "up"))
    console.print(f"[green]Moved rule {position} to position {position - 1}.[/green]")


@rules.command("down")
@click.argument("position", type=int)
def rules_down(position: int) -> None:
    """Lower the priority of the rule at POSITION by one place."""

    _update_rules(lambda current: current.swap_adjacent(position - 1, "down"))
    console.print(f"[green]Moved rule {position} to position {position + 1}.[/green]")


@rules.command("move")
@click.argument("position", type=int)
@click.argument("target", type=int)
def rules_move(position: int, target: int) -> None:
    """Move the rule at POSITION to TARGET."""

    _update_rules(lambda current: current.move_to(position - 1, target - 1))
    console.print(f"[green]Moved rule {position} to position {target}.[/green]")


@rules.command("toggle")
@click.argument("position", type=int)
@click.option("--on/--off", "enabled", default=None, help="Set the state instead of flipping it.")
def rules_toggle(position: int, enabled: bool | None) -> None:
    """Enable or disable the rule at POSITION."""

    updated = _update_rules(lambda current: current.toggle(position - 1, enabled))
    state = "enabled" if updated[position - 1].enabled else "disabled"
    console.print(f"[green]Rule {position} {state}.[/green]")


@cli.group()
def exclude() -> None:
    """Manage folders whose contents are never moved."""


@exclude.command("list")
def exclude_list() -> None:
    """Show excluded folders."""

    config = _load_config()
    if not config.excluded_folders:
        console.print("[yellow]No excluded folders.[/yellow]")
        return
    for folder in config.excluded_folders:
        console.print(f"- {folder}")


@exclude.command("add")
@click.argument("folder")
def exclude_add(folder: str) -> None:
    """Protect FOLDER so its contents are never moved."""

    normalized = folder.strip().replace("\\", "/").strip("/")
    if not normalized:
        raise click.ClickException("FOLDER must not be empty.")

    def _add(current: list[str]) -> list[str]:
        return current if normalized in current else [*current, normalized]

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        manager.update_excluded_folders(_add)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Excluded {normalized}.[/green]")


@exclude.command("remove")
@click.argument("folder")
def exclude_remove(folder: str) -> None:
    """Stop protecting FOLDER."""

    normalized = folder.strip().replace("\\", "/").strip("/")
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        before = manager.load(include_env=False).excluded_folders
        if normalized not in before:
            raise click.ClickException(f"{normalized} is not excluded.")
        manager.update_excluded_folders(
            lambda current: [entry for entry in current if entry != normalized]
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Removed exclusion {normalized}.[/green]")


@cli.group()
def config() -> None:
    """Manage Vaultsort configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.
    """

    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'schedule.interval_hours'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        node = file_data
        for segment in segments[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"Cannot assign into non-mapping value at '{segment}'.")
            node = child
        node[segments[-1]] = parsed_value
        resolve_with_precedence(defaults=VaultsortConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if "# Last updated:" not in line
    ]

    changed = [
        line for line in diff if line.startswith(("+", "-")) and not line.startswith(("+++", "---"))
    ]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session."""

    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=VaultsortConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
