"""Main CLI interface for the time tracker."""

import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from time_tracker.core.config import ConfigError, TrackerConfig, load_config
from time_tracker.core.durations import format_duration_long
from time_tracker.core.history_store import (
    MAX_SESSION_LENGTH,
    TIME_FORMAT,
    HistoryStore,
    render_report,
)
from time_tracker.models.session import Session

console = Console()
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
TABLE_DATE_FORMAT = "%a %b %d, %Y"
SESSION_TIME_FORMATS = ["%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M"]


def configure_logging(config: TrackerConfig, verbose: bool, interactive: bool) -> None:
    """Send log records to the configured file, or to stderr when verbose.

    The interactive UI owns the terminal, so it only ever logs to a file.
    """
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    if config.log_file is not None:
        logging.basicConfig(
            level=level, format=LOG_FORMAT, filename=str(config.log_file), force=True
        )
    elif verbose and not interactive:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def _store(ctx: click.Context) -> HistoryStore:
    config: TrackerConfig = ctx.obj["config"]
    return HistoryStore(config.history_file)


@click.group(invoke_without_command=True)
@click.version_option(package_name="time-tracker")
@click.option(
    "--history-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="History report to read and write (default: ./history.txt, or TIME_TRACKER_HISTORY_FILE)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON config file (or TIME_TRACKER_CONFIG)",
)
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Write logs to this file")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.pass_context
def main(
    ctx: click.Context,
    history_file: Optional[Path],
    config_file: Optional[Path],
    log_file: Optional[Path],
    verbose: bool,
):
    """Time Tracker - track work sessions from the terminal."""
    try:
        config = load_config(
            config_file,
            overrides={"history_file": history_file, "log_file": log_file},
        )
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort() from e

    interactive = ctx.invoked_subcommand in (None, "ui")
    configure_logging(config, verbose, interactive)
    logger.debug("Using history file %s", config.history_file)
    ctx.obj = {"config": config}

    if ctx.invoked_subcommand is None:
        ctx.invoke(ui)


@main.command()
@click.pass_context
def ui(ctx: click.Context):
    """Start the interactive tracker."""
    from time_tracker.ui.runner import run

    run(_store(ctx), console=console)


@main.command()
@click.pass_context
def history(ctx: click.Context):
    """List recorded sessions."""
    sessions = _store(ctx).load()

    if not sessions:
        console.print("[yellow]No sessions recorded yet[/yellow]")
        return

    table = Table(title="Tracked Sessions")
    table.add_column("#", style="cyan", no_wrap=True, justify="right")
    table.add_column("Date", style="green")
    table.add_column("Start", style="magenta")
    table.add_column("End", style="magenta")
    table.add_column("Duration", style="blue")

    for index, session in enumerate(sessions, start=1):
        table.add_row(
            str(index),
            session.start.strftime(TABLE_DATE_FORMAT),
            session.start.strftime(TIME_FORMAT),
            session.end.strftime(TIME_FORMAT),
            format_duration_long(session.duration),
        )

    console.print(table)


@main.command()
@click.argument("start", type=click.DateTime(formats=SESSION_TIME_FORMATS))
@click.argument("end", type=click.DateTime(formats=SESSION_TIME_FORMATS))
@click.pass_context
def add(ctx: click.Context, start: datetime, end: datetime):
    """Record a session manually, e.g. add "2024-05-01 09:00" "2024-05-01 10:30"."""
    if end < start:
        raise click.BadParameter("END must not be before START", param_hint="END")
    if end - start >= MAX_SESSION_LENGTH:
        raise click.BadParameter(
            "sessions of 24 hours or more cannot be stored", param_hint="END"
        )

    store = _store(ctx)
    sessions = store.load()
    session = Session(start=start, end=end)
    sessions.append(session)
    try:
        store.save(sessions)
    except OSError as e:
        console.print(f"[red]Error: could not save history: {e}[/red]")
        raise click.Abort() from e

    console.print(
        f"[green]✅ Recorded session #{len(sessions)} "
        f"({format_duration_long(session.duration)})[/green]"
    )


@main.command()
@click.argument("index", type=int)
@click.pass_context
def delete(ctx: click.Context, index: int):
    """Delete the session at position INDEX (as shown by 'history')."""
    store = _store(ctx)
    sessions = store.load()
    if not 1 <= index <= len(sessions):
        console.print(f"[red]Error: no session #{index} ({len(sessions)} recorded)[/red]")
        raise click.Abort()

    removed = sessions.pop(index - 1)
    try:
        store.save(sessions)
    except OSError as e:
        console.print(f"[red]Error: could not save history: {e}[/red]")
        raise click.Abort() from e

    console.print(
        f"[green]Deleted session #{index} from "
        f"{removed.start.strftime('%b %d %H:%M')}[/green]"
    )


@main.command()
@click.pass_context
def summary(ctx: click.Context):
    """Show the number of sessions and total tracked time."""
    store = _store(ctx)
    sessions = store.load()
    total = sum((s.duration for s in sessions), timedelta())
    console.print(f"[bold]History file:[/bold] {store.path}")
    console.print(f"[bold]Total sessions:[/bold] {len(sessions)}")
    console.print(f"[bold]Total time:[/bold] {format_duration_long(total)}")


@main.command()
@click.pass_context
def report(ctx: click.Context):
    """Print the history report as it is written to disk."""
    sessions = _store(ctx).load()
    click.echo(render_report(sessions), nl=False)


if __name__ == "__main__":
    main()
