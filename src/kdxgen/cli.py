"""Command line interface for kdxgen."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from kdxgen.config import (
    ConfigError,
    ConfigManager,
    KdxgenConfig,
    assign_nested,
    flatten_for_env,
    resolve_with_precedence,
)
from kdxgen.ingestion import ScanError
from kdxgen.ingestion.pipeline import CollectionPipeline, GenerationResult
from kdxgen.log_setup import configure_logging
from kdxgen.state import CollectionRepository, MissingStateError, StateError

console = Console()
err_console = Console(stderr=True)


def _emit_message(message: Any, *, quiet: bool) -> None:
    """Print a status message to stderr unless quiet mode is active.

    Args:
        message: Renderable or string to emit.
        quiet: Whether quiet mode is active.
    """
    if quiet:
        return
    err_console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        root: Device root relevant to the command.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _load_config(max_length: int | None = None, uppercase_hex: bool = False) -> KdxgenConfig:
    """Load configuration, layering explicit CLI flags on top.

    Raises:
        click.ClickException: If configuration loading or validation fails.
    """
    overrides: dict[str, Any] = {}
    if max_length is not None:
        overrides["collections.max_name_length"] = max_length
    if uppercase_hex:
        overrides["collections.uppercase_hex"] = True
    try:
        return ConfigManager().load(cli_overrides=overrides)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _resolve_flag(ctx: click.Context, name: str, value: bool, default: bool) -> bool:
    if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE:
        return value
    return default


def _run_pipeline(config: KdxgenConfig, root: str) -> GenerationResult:
    """Scan the device at ``root``, turning fatal scan errors into CLI errors."""
    pipeline = CollectionPipeline.from_config(config)
    try:
        return pipeline.run(Path(root).expanduser().resolve())
    except ScanError as exc:
        raise click.ClickException(str(exc)) from exc


def _emit_report(command: str, result: GenerationResult, *, quiet: bool) -> None:
    for skipped in result.report.skipped:
        _emit_message(f"[yellow]Skipped {skipped.name}: {skipped.reason}.[/yellow]", quiet=quiet)
    _emit_message(
        _format_summary_line(
            command,
            result.device_root,
            {
                "collections": len(result.store),
                "items": result.report.items_collected,
                "skipped": len(result.report.skipped),
            },
        ),
        quiet=quiet,
    )


_root_argument = click.argument(
    "root", type=click.Path(exists=True, file_okay=False, path_type=str)
)
_max_length_option = click.option(
    "-l",
    "--max-length",
    type=click.IntRange(min=4),
    help="Maximum number of characters in a collection name (default 48).",
)
_verbose_option = click.option(
    "-v", "--verbose", is_flag=True, help="Echo log records on the console."
)
_quiet_option = click.option("--quiet", is_flag=True, help="Suppress non-error output.")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="kdxgen")
def cli() -> None:
    """kdxgen builds Kindle collections from the folders on your device."""


@cli.command()
@_root_argument
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=str),
    help="Write the collections file here instead of standard output.",
)
@_max_length_option
@click.option("--uppercase-hex", is_flag=True, help="Use uppercase hexadecimal checksum keys.")
@_verbose_option
@_quiet_option
@click.pass_context
def generate(
    ctx: click.Context,
    root: str,
    output: str | None,
    max_length: int | None,
    uppercase_hex: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Generate collections for the device mounted at ROOT.

    Args:
        ctx: Click context used for parameter source inspection.
        root: Root directory of the mounted device.
        output: Optional destination file for the collections data.
        max_length: Maximum collection name length.
        uppercase_hex: Whether checksum keys use uppercase digits.
        verbose: Whether log records are echoed to the console.
        quiet: Whether non-error output is suppressed.
    """
    config = _load_config(max_length, uppercase_hex)
    quiet = _resolve_flag(ctx, "quiet", quiet, config.cli.quiet_default)
    configure_logging(
        config.logging, verbose=_resolve_flag(ctx, "verbose", verbose, config.cli.verbose_default)
    )

    result = _run_pipeline(config, root)

    if output:
        try:
            CollectionRepository().write(Path(output).expanduser(), result.payload)
        except StateError as exc:
            raise click.ClickException(str(exc)) from exc
        _emit_message(f"[green]Collections written to {output}.[/green]", quiet=quiet)
    else:
        click.echo(result.payload)
    _emit_report("Generate", result, quiet=quiet)


@cli.command()
@_root_argument
@click.option("--no-backup", is_flag=True, help="Overwrite the existing collections file.")
@_max_length_option
@_verbose_option
@_quiet_option
@click.pass_context
def save(
    ctx: click.Context,
    root: str,
    no_backup: bool,
    max_length: int | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Generate collections and install them on the device mounted at ROOT.

    The existing collections file is kept with a timestamp suffix unless
    backups are disabled.

    Args:
        ctx: Click context used for parameter source inspection.
        root: Root directory of the mounted device.
        no_backup: Whether to skip backing up the existing file.
        max_length: Maximum collection name length.
        verbose: Whether log records are echoed to the console.
        quiet: Whether non-error output is suppressed.
    """
    config = _load_config(max_length)
    quiet = _resolve_flag(ctx, "quiet", quiet, config.cli.quiet_default)
    configure_logging(
        config.logging, verbose=_resolve_flag(ctx, "verbose", verbose, config.cli.verbose_default)
    )

    result = _run_pipeline(config, root)
    repository = CollectionRepository(config.device.collections_file)
    backup = config.device.backup_existing and not no_backup
    try:
        backup_path = repository.save_to_device(result.device_root, result.payload, backup=backup)
    except StateError as exc:
        raise click.ClickException(str(exc)) from exc

    if backup_path is not None:
        _emit_message(f"[cyan]Previous collections kept at {backup_path}.[/cyan]", quiet=quiet)
    _emit_message(
        f"[green]Collections saved to {repository.device_path(result.device_root)}.[/green]",
        quiet=quiet,
    )
    _emit_report("Save", result, quiet=quiet)


@cli.command()
@_root_argument
@_max_length_option
def tree(root: str, max_length: int | None) -> None:
    """Show the collections that would be generated for ROOT.

    Args:
        root: Root directory of the mounted device.
        max_length: Maximum collection name length.
    """
    config = _load_config(max_length)
    configure_logging(config.logging)
    result = _run_pipeline(config, root)

    view = Tree(f"[bold]{result.device_root}[/bold]")
    for collection in result.store.sorted_collections():
        branch = view.add(f"[cyan]{collection.name}[/cyan] ({len(collection.items)})")
        for item in collection.items:
            branch.add(item.name)
    console.print(view)


@cli.command()
@_root_argument
def show(root: str) -> None:
    """List the collections currently stored on the device at ROOT.

    Args:
        root: Root directory of the mounted device.
    """
    config = _load_config()
    repository = CollectionRepository(config.device.collections_file)
    try:
        data = repository.load(Path(root).expanduser())
    except MissingStateError as exc:
        console.print(f"[yellow]{exc}.[/yellow]")
        return
    except StateError as exc:
        raise click.ClickException(str(exc)) from exc

    table = Table(title="Device collections")
    table.add_column("Collection")
    table.add_column("Items", justify="right")
    for name in sorted(data):
        entry = data[name]
        items = entry.get("items", []) if isinstance(entry, dict) else []
        table.add_row(name, str(len(items)))
    console.print(table)


@cli.group()
def config() -> None:
    """Manage kdxgen configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option(
    "--env",
    "as_env",
    is_flag=True,
    help="Print the configuration as KDXGEN__SECTION__KEY environment assignments.",
)
def config_view(no_env: bool, as_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.
        as_env: If True, render one environment variable assignment per line.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_env:
        for key, value in flatten_for_env(loaded).items():
            click.echo(f"{key}={value}")
        return

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'collections.max_name_length'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        assign_nested(file_data, segments, parsed_value, source_name="config file")
        resolve_with_precedence(defaults=KdxgenConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None or edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=KdxgenConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
