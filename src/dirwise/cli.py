"""Command line interface for dirwise."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, NoReturn, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from dirwise.config import ConfigError, ConfigManager, DirwiseConfig
from dirwise.config.resolver import parse_scalar, require_known_key
from dirwise.errors import DirwiseError
from dirwise.organization import APPROVAL_PHRASE
from dirwise.tools import FileTools

console = Console()
error_console = Console(stderr=True)

T = TypeVar("T")


@dataclass(slots=True)
class Session:
    """Per-invocation state shared by commands."""

    working_directory: str | None
    verbose: int
    overrides: dict[str, Any] = field(default_factory=dict)
    _config: DirwiseConfig | None = None
    _tools: FileTools | None = None

    @property
    def config(self) -> DirwiseConfig:
        if self._config is None:
            self._config = ConfigManager().load(overrides=self.overrides)
        return self._config

    @property
    def tools(self) -> FileTools:
        if self._tools is None:
            self._tools = FileTools.from_config(
                self.config, working_directory=self.working_directory
            )
        return self._tools


def _configure_logging(level_name: str, verbose: int) -> None:
    """Attach a Rich handler to the ``dirwise`` logger.

    Args:
        level_name: Configured level name such as ``WARNING``.
        verbose: Count of ``-v`` flags; each one lowers the threshold a step.
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbose:
        level = logging.INFO if verbose == 1 else logging.DEBUG

    logger = logging.getLogger("dirwise")
    logger.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=error_console, show_path=False))


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command appropriately.

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


def _emit_message(message: Any, *, quiet: bool) -> None:
    """Print ``message`` unless quiet mode is active."""
    if not quiet:
        console.print(message)


def _run(json_output: bool, action: Callable[[], T]) -> T:
    """Run ``action`` and translate dirwise errors into CLI errors."""
    try:
        return action()
    except DirwiseError as exc:
        _handle_cli_error(str(exc), code=exc.code, json_output=json_output, original=exc)
    except OSError as exc:
        _handle_cli_error(
            str(exc),
            code="io_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


def _session(ctx: click.Context) -> Session:
    session = ctx.find_object(Session) or Session(working_directory=None, verbose=0)
    try:
        config = session.config
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    _configure_logging(config.logging.level, session.verbose)
    return session


def _json_enabled(session: Session, json_output: bool) -> bool:
    return json_output or session.config.cli.json_default


def _quiet_enabled(session: Session, quiet: bool, json_enabled: bool) -> bool:
    return not json_enabled and (quiet or session.config.cli.quiet_default)


def _parse_assignments(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, Any]:
    """Turn repeated ``--set KEY=VALUE`` options into dotted overrides."""
    overrides: dict[str, Any] = {}
    for item in values:
        key, separator, raw = item.partition("=")
        if not separator:
            raise click.BadParameter(f"'{item}' is not KEY=VALUE.", ctx=ctx, param=param)
        try:
            overrides[require_known_key(key)] = parse_scalar(raw)
        except ConfigError as exc:
            raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc
    return overrides


def _session_overrides(ctx: click.Context) -> dict[str, Any]:
    session = ctx.find_object(Session)
    return dict(session.overrides) if session is not None else {}


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="dirwise")
@click.option(
    "--cwd",
    "working_directory",
    type=click.Path(exists=True, file_okay=False, path_type=str),
    help="Working directory used to interpret relative descriptions.",
)
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    callback=_parse_assignments,
    help="Override a setting for this run, e.g. search.max_depth=2 (repeatable).",
)
@click.option("--no-index", is_flag=True, help="Skip the OS search index; walk directories only.")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable).")
@click.pass_context
def cli(
    ctx: click.Context,
    working_directory: str | None,
    assignments: dict[str, Any],
    no_index: bool,
    verbose: int,
) -> None:
    """dirwise finds folders from loose descriptions and tidies them by file type."""
    overrides = dict(assignments)
    if no_index:
        overrides["search.index_enabled"] = False
    ctx.obj = Session(working_directory=working_directory, verbose=verbose, overrides=overrides)


@cli.command()
@click.argument("description")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON.")
@click.pass_context
def resolve(ctx: click.Context, description: str, json_output: bool) -> None:
    """Resolve DESCRIPTION (a path, file name, or "<file> in <folder>") to a path."""
    session = _session(ctx)
    json_enabled = _json_enabled(session, json_output)
    payload = _run(json_enabled, lambda: session.tools.resolve_path(description))

    if json_enabled:
        console.print_json(data=payload)
        return
    if not payload["exists"]:
        _handle_cli_error(
            f"Could not resolve '{description}' to an existing path.",
            code="not_found",
            json_output=False,
        )
    console.print(f"[green]{payload['type']}[/green] {payload['resolvedPath']}")


@cli.command()
@click.argument("description")
@click.option("--root", "search_root", type=str, help="Directory (or description) to search under.")
@click.option("-n", "--max-results", type=click.IntRange(min=1), help="Maximum matches to return.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON.")
@click.pass_context
def find(
    ctx: click.Context,
    description: str,
    search_root: str | None,
    max_results: int | None,
    json_output: bool,
) -> None:
    """Search for directories whose names match DESCRIPTION."""
    session = _session(ctx)
    json_enabled = _json_enabled(session, json_output)
    payload = _run(
        json_enabled,
        lambda: session.tools.find_directory(description, search_root, max_results),
    )

    if json_enabled:
        console.print_json(data=payload)
        return

    if not payload["matches"]:
        console.print(f"[yellow]No directories matched '{description}'.[/yellow]")
    else:
        table = Table(title=f"Directories matching '{description}'")
        table.add_column("Score", justify="right")
        table.add_column("Path", overflow="fold")
        table.add_column("Source")
        for match in payload["matches"]:
            table.add_row(str(match["matchScore"]), match["path"], match["source"])
        console.print(table)
    if payload["skipped"]:
        console.print(f"[yellow]{len(payload['skipped'])} directories could not be read.[/yellow]")


@cli.command("ls")
@click.argument("path")
@click.option("-d", "--dirs", "include_subdirectories", is_flag=True, help="Include subdirectories.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON.")
@click.pass_context
def list_command(
    ctx: click.Context, path: str, include_subdirectories: bool, json_output: bool
) -> None:
    """List the files in PATH (a path or folder description)."""
    session = _session(ctx)
    json_enabled = _json_enabled(session, json_output)
    payload = _run(
        json_enabled, lambda: session.tools.list_directory(path, include_subdirectories)
    )

    if json_enabled:
        console.print_json(data=payload)
        return

    table = Table(title=f"{payload['resolvedPath']} ({payload['fileCount']} files)")
    table.add_column("Name", overflow="fold")
    table.add_column("Size", justify="right")
    table.add_column("Modified (UTC)")
    for entry in payload.get("subdirectories", []):
        table.add_row(f"[bold]{entry['name']}/[/bold]", "-", entry["lastWriteTimeUtc"])
    for entry in payload["files"]:
        table.add_row(entry["name"], str(entry["sizeBytes"]), entry["lastWriteTimeUtc"])
    console.print(table)


@cli.command()
@click.argument("path")
@click.option("--pattern", default="*", show_default=True, help="Glob matched against file names.")
@click.option("--ext", "extension", type=str, help="Only files with this extension.")
@click.option("--min-size", type=click.IntRange(min=0), help="Minimum size in bytes.")
@click.option("--max-size", type=click.IntRange(min=0), help="Maximum size in bytes.")
@click.option("-r", "--recursive", is_flag=True, help="Include subdirectories.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON.")
@click.pass_context
def search(
    ctx: click.Context,
    path: str,
    pattern: str,
    extension: str | None,
    min_size: int | None,
    max_size: int | None,
    recursive: bool,
    json_output: bool,
) -> None:
    """Search PATH for files by name pattern, extension, and size."""
    session = _session(ctx)
    json_enabled = _json_enabled(session, json_output)
    payload = _run(
        json_enabled,
        lambda: session.tools.search_files(
            path,
            file_name_pattern=pattern,
            extension=extension,
            min_size_bytes=min_size,
            max_size_bytes=max_size,
            recursive=recursive,
        ),
    )

    if json_enabled:
        console.print_json(data=payload)
        return

    table = Table(title=f"{payload['matchCount']} file(s) in {payload['resolvedPath']}")
    table.add_column("Path", overflow="fold")
    table.add_column("Size", justify="right")
    for entry in payload["matches"]:
        table.add_row(entry["fullPath"], str(entry["sizeBytes"]))
    console.print(table)


@cli.group()
def org() -> None:
    """Preview and apply organize-by-extension plans."""


@org.command("preview")
@click.argument("path")
@click.option("--include-hidden", is_flag=True, help="Plan hidden files too.")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the plan document to this file for a later `org apply`.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def org_preview(
    ctx: click.Context,
    path: str,
    include_hidden: bool,
    output: Path | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Preview how the files in PATH would be sorted into folders. Nothing is moved."""
    session = _session(ctx)
    json_enabled = _json_enabled(session, json_output)
    quiet_enabled = _quiet_enabled(session, quiet, json_enabled)
    hidden = include_hidden or session.config.organization.include_hidden
    payload = _run(
        json_enabled,
        lambda: session.tools.preview_organize_by_extension(path, include_hidden=hidden),
    )

    if output is not None:
        output.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    if json_enabled:
        console.print_json(data=payload)
        return

    plan = payload["plan"]
    table = Table(title=f"Organization preview for {plan['directoryPath']}")
    table.add_column("File", overflow="fold")
    table.add_column("Destination", overflow="fold")
    for move in plan["moves"]:
        table.add_row(Path(move["source"]).name, move["destination"])
    _emit_message(table, quiet=quiet_enabled)

    for entry in payload["summary"]:
        _emit_message(f"  {entry['count']:>4}  {entry['destinationFolder']}", quiet=quiet_enabled)
    _emit_message(f"[green]{len(plan['moves'])} move(s) planned.[/green]", quiet=quiet_enabled)
    if output is not None:
        _emit_message(
            f"Plan saved to {output}. Apply with: "
            f"dirwise org apply {output} --approve {APPROVAL_PHRASE}",
            quiet=quiet_enabled,
        )


@org.command("apply")
@click.argument("plan_file", type=click.File("r", encoding="utf-8"))
@click.option(
    "--approve",
    "approval",
    default="",
    help=f"Approval phrase; must be exactly {APPROVAL_PHRASE}.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def org_apply(
    ctx: click.Context, plan_file: Any, approval: str, json_output: bool, quiet: bool
) -> None:
    """Apply the plan document in PLAN_FILE (use - for stdin)."""
    session = _session(ctx)
    json_enabled = _json_enabled(session, json_output)
    quiet_enabled = _quiet_enabled(session, quiet, json_enabled)
    document = plan_file.read()
    payload = _run(
        json_enabled, lambda: session.tools.apply_organization_plan(document, approval)
    )

    if json_enabled:
        console.print_json(data=payload)
        return

    for move in payload["appliedMoves"]:
        _emit_message(f"  {move['source']} -> {move['destination']}", quiet=quiet_enabled)
    _emit_message(
        f"[green]Applied {payload['appliedCount']} move(s) in "
        f"{payload['planDirectoryPath']}.[/green]",
        quiet=quiet_enabled,
    )


@cli.group()
def config() -> None:
    """Show and change dirwise settings."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore DIRWISE__ environment variables.")
@click.option("--file", "show_file", is_flag=True, help="Print the settings file as stored.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool, show_file: bool) -> None:
    """Show every setting, its effective value, and where the value comes from."""
    manager = ConfigManager()
    if show_file:
        console.print(Syntax(manager.read_text(), "yaml", word_wrap=True))
        return
    try:
        rows = manager.explain(overrides=_session_overrides(ctx), use_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    table = Table(title=str(manager.config_path))
    table.add_column("Key")
    table.add_column("Value")
    table.add_column("Source")
    for key, value, source in rows:
        style = "dim" if source == "default" else "cyan"
        table.add_row(key, json.dumps(value), f"[{style}]{source}[/{style}]")
    console.print(table)


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Store VALUE for KEY (for example `search.max_depth 3`) in the settings file."""
    manager = ConfigManager()
    try:
        before, after = manager.set_value(key, parse_scalar(value))
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    name = require_known_key(key)
    if before == after:
        console.print(f"[yellow]{name} is already {json.dumps(after)}; nothing to change.[/yellow]")
        return
    console.print(f"[green]{name}: {json.dumps(before)} -> {json.dumps(after)}[/green]")


@config.command("reset")
@click.argument("key")
def config_reset(key: str) -> None:
    """Remove KEY from the settings file so its default applies."""
    try:
        removed = ConfigManager().reset_value(key)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    name = require_known_key(key)
    if removed:
        console.print(f"[green]{name} reset to its default.[/green]")
    else:
        console.print(f"[yellow]{name} is not set in the settings file.[/yellow]")


@config.command("edit")
def config_edit() -> None:
    """Edit the settings file; the result is validated before it is saved."""
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes made.[/yellow]")
        return

    try:
        manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Saved {manager.config_path}.[/green]")


@config.command("path")
def config_path() -> None:
    """Print the location of the settings file."""
    click.echo(str(ConfigManager().config_path))


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
