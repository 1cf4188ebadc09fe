"""CLI entry point for the TimeCamp client."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from tc import commands
from tc.api import TimeCampClient
from tc.cache import DEFAULT_CACHE_DIR, DEFAULT_TTL_MS, TaskCache
from tc.errors import TimeCampError

EPILOG = """\b
Notes:
  - TIMECAMP_API_KEY must be set in the environment.
  - Duration accepts seconds or 1h/30m/45s format.
  - Task selectors accept task_id or part of the task name.
"""


@dataclass
class Settings:
    """Options shared by every command."""

    cache_dir: Path = DEFAULT_CACHE_DIR
    cache_ttl_ms: int = DEFAULT_TTL_MS
    api_url: str | None = None

    def task_cache(self) -> TaskCache:
        return TaskCache(self.cache_dir, ttl_ms=self.cache_ttl_ms)


def _run(ctx: click.Context, handler: Callable[..., Any], **options: Any) -> None:
    """Build the client, run a handler and print its result as JSON.

    Any TimeCampError is printed to stderr and exits with status 1.
    """
    settings = ctx.find_object(Settings) or Settings()
    try:
        client = TimeCampClient(api_url=settings.api_url)
        result = handler(client, settings.task_cache(), **options)
    except TimeCampError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(json.dumps(result, indent=2))


def task_option(f: Callable[..., Any]) -> Callable[..., Any]:
    f = click.option(
        "--refresh",
        is_flag=True,
        help="Refresh tasks cache before resolving task",
    )(f)
    return click.option("--task", "--task-id", "--task_id", "task", help="Task id or name")(f)


def note_option(help_text: str) -> Callable[..., Any]:
    return click.option("--note", "--description", "note", help=help_text)


def time_range_options(f: Callable[..., Any]) -> Callable[..., Any]:
    f = click.option("--end", "--end-time", "--end_time", "end", help="End time HH:MM or HH:MM:SS")(f)
    f = click.option("--start", "--start-time", "--start_time", "start", help="Start time HH:MM or HH:MM:SS")(f)
    return click.option("--duration", help="Duration in seconds or 1h/30m/45s")(f)


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.version_option(None, "--version", "-v", package_name="timecamp-cli")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_CACHE_DIR,
    envvar="TIMECAMP_CACHE_DIR",
    show_default=True,
    help="Directory for the tasks cache",
)
@click.option(
    "--api-url",
    envvar="TIMECAMP_API_URL",
    default=None,
    help="TimeCamp API base URL",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def main(ctx: click.Context, cache_dir: Path, api_url: str | None, verbose: bool) -> None:
    """TimeCamp CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.obj = Settings(cache_dir=cache_dir, api_url=api_url)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command("start")
@task_option
@note_option("Timer note")
@click.option("--started-at", "--started_at", "started_at", help="Start time (YYYY-MM-DD HH:MM:SS)")
@click.pass_context
def start_command(
    ctx: click.Context,
    task: str | None,
    refresh: bool,
    note: str | None,
    started_at: str | None,
) -> None:
    """Start a timer."""
    _run(ctx, commands.handle_start, task=task, note=note, started_at=started_at, refresh=refresh)


@main.command("stop")
@click.option("--stopped-at", "--stopped_at", "stopped_at", help="Stop time (YYYY-MM-DD HH:MM:SS)")
@click.pass_context
def stop_command(ctx: click.Context, stopped_at: str | None) -> None:
    """Stop the current timer."""
    _run(ctx, commands.handle_stop, stopped_at=stopped_at)


@main.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """Show current timer status."""
    _run(ctx, commands.handle_status)


main.add_command(status_command, "current")


@main.command("entries")
@click.option("--date", "day", help="Date in YYYY-MM-DD (overrides from/to)")
@click.option("--from", "--date-from", "--date_from", "date_from", help="Start date YYYY-MM-DD")
@click.option("--to", "--date-to", "--date_to", "date_to", help="End date YYYY-MM-DD")
@task_option
@click.pass_context
def entries_command(
    ctx: click.Context,
    day: str | None,
    date_from: str | None,
    date_to: str | None,
    task: str | None,
    refresh: bool,
) -> None:
    """List time entries (default today).

    Example:
        tc entries --from 2025-01-20 --to 2025-01-26 --task "code review"
    """
    _run(
        ctx,
        commands.handle_entries,
        day=day,
        date_from=date_from,
        date_to=date_to,
        task=task,
        refresh=refresh,
    )


@main.command("add-entry")
@click.option("--date", "day", help="Entry date YYYY-MM-DD (default: today)")
@time_range_options
@note_option("Entry note")
@task_option
@click.pass_context
def add_entry_command(
    ctx: click.Context,
    day: str | None,
    duration: str | None,
    start: str | None,
    end: str | None,
    note: str | None,
    task: str | None,
    refresh: bool,
) -> None:
    """Add a time entry.

    Example:
        tc add-entry --date 2025-01-28 --start 09:00 --end 10:30 --task 1234
    """
    _run(
        ctx,
        commands.handle_add_entry,
        day=day,
        start=start,
        end=end,
        duration=duration,
        note=note,
        task=task,
        refresh=refresh,
    )


@main.command("update-entry")
@click.argument("positional_id", metavar="[ENTRY_ID]", required=False)
@click.option("--id", "entry_id", help="Entry id")
@click.option("--date", "day", help="Entry date YYYY-MM-DD")
@time_range_options
@note_option("Entry note")
@task_option
@click.pass_context
def update_entry_command(
    ctx: click.Context,
    positional_id: str | None,
    entry_id: str | None,
    day: str | None,
    duration: str | None,
    start: str | None,
    end: str | None,
    note: str | None,
    task: str | None,
    refresh: bool,
) -> None:
    """Update a time entry."""
    _run(
        ctx,
        commands.handle_update_entry,
        entry_id=entry_id,
        positional_id=positional_id,
        day=day,
        start=start,
        end=end,
        duration=duration,
        note=note,
        task=task,
        refresh=refresh,
    )


@main.command("remove-entry")
@click.argument("positional_id", metavar="[ENTRY_ID]", required=False)
@click.option("--id", "entry_id", help="Entry id")
@click.pass_context
def remove_entry_command(ctx: click.Context, positional_id: str | None, entry_id: str | None) -> None:
    """Remove a time entry."""
    _run(ctx, commands.handle_remove_entry, entry_id=entry_id, positional_id=positional_id)


@main.command("tasks")
@click.option("--refresh", is_flag=True, help="Refresh tasks cache")
@click.option("--raw", is_flag=True, help="Print full task payload")
@click.option("--all-users", "--all_users", "all_users", is_flag=True, help="List every task in the account (bypasses cache)")
@click.pass_context
def tasks_command(ctx: click.Context, refresh: bool, raw: bool, all_users: bool) -> None:
    """List tasks (cached for 10 minutes)."""
    _run(ctx, commands.handle_tasks, refresh=refresh, raw=raw, all_users=all_users)


@main.command("help")
@click.pass_context
def help_command(ctx: click.Context) -> None:
    """Show help."""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


if __name__ == "__main__":
    main()
