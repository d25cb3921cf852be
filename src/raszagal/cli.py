"""
Raszagal CLI - Command Line Interface for Brood War replay analysis

Provides commands for:
- Running analyzers over replay files (CSV, JSON or table output)
- Listing the available analyzers
- Showing environment information
- Generating a default configuration file
"""

import json
import logging
import platform
import shutil
import sys
import tomllib
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from raszagal import __version__
from raszagal.analyzers import get_analyzers, new_analyzer_context
from raszagal.core.config import (
    RaszagalConfig,
    configure_logging,
    generate_default_config,
    load_config,
    set_config,
)
from raszagal.core.utils import unmarshal_arguments
from raszagal.executor import AnalyzerExecutor, discover_replays, parse_analyzer_request
from raszagal.output import OUTPUT_FORMATS, make_output
from raszagal.replay import ScrepParser
from raszagal.scheduling import FILTER_NOT_PREFIX, FILTER_PREFIX

app = typer.Typer(
    name="raszagal",
    help="Analyze StarCraft: Brood War replays and filter them with composable analyzers",
    add_completion=False,
)
# Results go to stdout; everything else goes to stderr
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]Raszagal[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output",
    ),
) -> None:
    """Raszagal - Brood War replay analyzer"""
    ctx.obj = {"verbose": verbose}


@app.command()
def analyze(
    ctx: typer.Context,
    replay: Optional[list[str]] = typer.Option(
        None,
        "--replay",
        "-r",
        help="Path to a replay file (repeatable)",
    ),
    replays: str = typer.Option(
        "",
        "--replays",
        help="Comma-separated paths to replay files",
    ),
    replay_dir: Optional[Path] = typer.Option(
        None,
        "--replay-dir",
        help="Folder with replays (searched recursively)",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    analyzer: Optional[list[str]] = typer.Option(
        None,
        "--analyzer",
        "-a",
        help="Analyzer to run as NAME or NAME=ARG1,ARG2 (repeatable). "
        "Prefix with filter-- or filter-not-- to filter replays instead",
    ),
    me: Optional[str] = typer.Option(
        None,
        "--me",
        help="Comma-separated player names to identify as the main player",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-o",
        help=f"Output format: {', '.join(OUTPUT_FORMATS)} (default from config: csv)",
    ),
    copy_to: Optional[str] = typer.Option(
        None,
        "--copy-to-if-matches-filters",
        help="Copy replays that pass all filters to this directory",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (YAML, TOML or JSON)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Run analyzers over replays and print one row per matching replay.

    Examples:
    - raszagal analyze --replay-dir replays -a my-race -a matchup --me adultrabbit
    - raszagal analyze -r game.rep -a filter--is-1v1 -a my-matchup-is=ZvT --me adultrabbit
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    config = _load_config_or_exit(config_file)
    set_config(config)
    configure_logging(config.logging, level="DEBUG" if verbose else None)

    replay_paths = list(replay or []) + unmarshal_arguments(replays)
    if replay_dir is not None:
        replay_paths += discover_replays(replay_dir, config.parser.replay_extension)
    if not replay_paths:
        err_console.print("[red]Error:[/red] at least one replay is required (--replay, --replays or --replay-dir)")
        raise typer.Exit(1)

    requests = [parse_analyzer_request(a) for a in analyzer or [] if a.strip()]
    if not requests:
        err_console.print("[red]Error:[/red] at least one analyzer is required (--analyzer)")
        raise typer.Exit(1)

    try:
        output = make_output(output_format or config.export.default_format, sys.stdout)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    me_names = unmarshal_arguments(me) if me is not None else config.analysis.me
    executor = AnalyzerExecutor(
        replay_paths,
        requests,
        new_analyzer_context(me_names),
        output=output,
        copy_path=copy_to or config.analysis.copy_to or "",
        parser=ScrepParser(config.parser.screp_path, config.parser.timeout_seconds),
        replay_extension=config.parser.replay_extension,
    )
    errors = executor.errors + executor.execute()
    _report_errors(errors)


def _load_config_or_exit(config_file: Optional[Path]) -> RaszagalConfig:
    """Load configuration; an unreadable or malformed file ends the command."""
    try:
        return load_config(config_file)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError, OSError) as e:
        err_console.print(f"[red]Error:[/red] could not load configuration: {e}", highlight=False)
        raise typer.Exit(1)


def _report_errors(errors: list[Exception]) -> None:
    """Print non-fatal errors to stderr. They never change the exit code."""
    if not errors:
        return
    for error in errors:
        err_console.print(f"[yellow]Warning:[/yellow] {error}", highlight=False)
    err_console.print(f"[yellow]{len(errors)} error(s) while analyzing replays[/yellow]")


@app.command(name="analyzers")
def list_analyzers() -> None:
    """
    List every available analyzer.

    Boolean-result analyzers can also be used as filters with the filter--
    and filter-not-- prefixes.
    """
    table = Table(title="Analyzers")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments")
    table.add_column("Filters", style="magenta")
    table.add_column("Commands", justify="center")
    table.add_column("Description")

    for name, prototype in get_analyzers().items():
        filters = ""
        if prototype.is_boolean_result:
            filters = f"{FILTER_PREFIX}{name}\n{FILTER_NOT_PREFIX}{name}"
        table.add_row(
            name,
            "yes" if prototype.is_string_flag else "",
            filters,
            "yes" if prototype.requires_parsing_commands else "",
            prototype.description,
        )

    console.print(table)


@app.command()
def info(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (YAML, TOML or JSON)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Display information about Raszagal and the environment.
    """
    config = _load_config_or_exit(config_file)

    console.print(f"\n[bold blue]Raszagal[/bold blue] v{__version__}\n")

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Python", platform.python_version())
    table.add_row("Platform", platform.system())
    table.add_row("Architecture", platform.machine())
    table.add_row("Analyzers", str(len(get_analyzers())))

    screp = shutil.which(config.parser.screp_path)
    screp_status = screp if screp else f"[red]not found[/red] ({config.parser.screp_path})"
    table.add_row("screp", screp_status)
    table.add_row("Replay extension", config.parser.replay_extension)
    table.add_row("Me", ", ".join(config.analysis.me) or "[yellow]not set[/yellow]")

    console.print(table)


@app.command(name="init-config")
def init_config(
    path: Path = typer.Argument(
        Path("raszagal.yaml"),
        help="Where to write the config (.yaml, .yml or .json)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
) -> None:
    """
    Write a default configuration file.
    """
    if path.exists() and not force:
        err_console.print(f"[red]Error:[/red] {path} already exists (use --force to overwrite)")
        raise typer.Exit(1)

    try:
        generate_default_config(path)
    except (OSError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Config written to:[/green] {path}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
