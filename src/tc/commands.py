"""Command handlers.

Each handler takes the API client, the task cache and the command's options,
performs one remote operation and returns the result to print as JSON.
"""

from __future__ import annotations

import re
from datetime import date as date_type
from typing import Any

from tc.api import TimeCampClient
from tc.cache import TaskCache
from tc.errors import UsageError
from tc.models import TimeEntry
from tc.tasks import get_tasks, resolve_task
from tc.timeparse import (
    compute_duration_seconds,
    format_date,
    format_datetime,
    normalize_time,
    parse_duration_seconds,
)

_ENTRY_ID = re.compile(r"[0-9]+")


def _resolve_task_id(
    client: TimeCampClient,
    cache: TaskCache,
    query: str | None,
    refresh: bool,
) -> int | None:
    """Resolve a task selector flag, touching the cache only if one was given."""
    if not query:
        return None
    task = resolve_task(get_tasks(client, cache, refresh=refresh), query)
    return task.task_id if task is not None else None


def _entry_id(command: str, *candidates: str | None) -> int:
    """Return the first given entry id, which must be all digits."""
    value = next((c for c in candidates if c), None)
    if value is None or not _ENTRY_ID.fullmatch(str(value)):
        raise UsageError(f"{command} requires --id <entryId>.")
    return int(value)


def resolve_date_range(
    day: str | None,
    date_from: str | None,
    date_to: str | None,
    *,
    today: date_type | None = None,
) -> tuple[str, str]:
    """Work out the (from, to) range for listing entries.

    ``day`` sets both bounds. Otherwise a missing bound takes the other's
    value, and with neither both default to today.
    """
    if day:
        return day, day
    if not date_from and date_to:
        date_from = date_to
    if not date_to and date_from:
        date_to = date_from
    if not date_from or not date_to:
        date_from = date_to = format_date(today)
    return date_from, date_to


def handle_start(
    client: TimeCampClient,
    cache: TaskCache,
    *,
    task: str | None = None,
    note: str | None = None,
    started_at: str | None = None,
    refresh: bool = False,
) -> Any:
    task_id = _resolve_task_id(client, cache, task, refresh)
    if note:
        return client.start_timer_with_note(
            note,
            started_at=started_at or format_datetime(),
            task_id=task_id,
        )
    return client.start_timer(task_id=task_id, started_at=started_at)


def handle_stop(client: TimeCampClient, cache: TaskCache, *, stopped_at: str | None = None) -> Any:
    return client.stop_timer(stopped_at=stopped_at)


def handle_status(client: TimeCampClient, cache: TaskCache) -> Any:
    return client.timer_status()


def handle_entries(
    client: TimeCampClient,
    cache: TaskCache,
    *,
    day: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    task: str | None = None,
    refresh: bool = False,
) -> Any:
    date_from, date_to = resolve_date_range(day, date_from, date_to)
    task_id = _resolve_task_id(client, cache, task, refresh)
    return client.get_entries(
        date_from,
        date_to,
        task_id=str(task_id) if task_id is not None else None,
    )


def handle_add_entry(
    client: TimeCampClient,
    cache: TaskCache,
    *,
    start: str | None,
    end: str | None,
    day: str | None = None,
    duration: str | None = None,
    note: str | None = None,
    task: str | None = None,
    refresh: bool = False,
) -> Any:
    """Create a time entry.

    Start and end are required. Without an explicit duration it is computed
    from the date and the two times.
    """
    if not start or not end:
        raise UsageError("add-entry requires --start and --end.")

    day = day or format_date()
    start_time = normalize_time(start)
    end_time = normalize_time(end)
    seconds = parse_duration_seconds(duration)
    if seconds is None:
        seconds = compute_duration_seconds(day, start_time, end_time)

    entry = TimeEntry(
        date=day,
        start_time=start_time,
        end_time=end_time,
        duration=seconds,
        description=note or None,
    )
    entry.task_id = _resolve_task_id(client, cache, task, refresh)
    return client.create_entry(entry)


def handle_update_entry(
    client: TimeCampClient,
    cache: TaskCache,
    *,
    entry_id: str | None = None,
    positional_id: str | None = None,
    day: str | None = None,
    start: str | None = None,
    end: str | None = None,
    duration: str | None = None,
    note: str | None = None,
    task: str | None = None,
    refresh: bool = False,
) -> Any:
    """Update fields of an existing time entry.

    Start and end must be given together. If a date is also given the
    duration is recomputed, unless --duration sets it explicitly.
    """
    target_id = _entry_id("update-entry", entry_id, positional_id)
    entry = TimeEntry(date=day or None)

    if start or end:
        if not start or not end:
            raise UsageError("update-entry requires both --start and --end.")
        entry.start_time = normalize_time(start)
        entry.end_time = normalize_time(end)
        if entry.date:
            entry.duration = compute_duration_seconds(entry.date, entry.start_time, entry.end_time)

    if duration is not None:
        entry.duration = parse_duration_seconds(duration)

    if note:
        entry.description = note

    entry.task_id = _resolve_task_id(client, cache, task, refresh)

    if not entry.to_payload():
        raise UsageError("update-entry requires at least one field to update.")

    return client.update_entry(target_id, entry)


def handle_remove_entry(
    client: TimeCampClient,
    cache: TaskCache,
    *,
    entry_id: str | None = None,
    positional_id: str | None = None,
) -> Any:
    return client.delete_entry(_entry_id("remove-entry", entry_id, positional_id))


def handle_tasks(
    client: TimeCampClient,
    cache: TaskCache,
    *,
    refresh: bool = False,
    raw: bool = False,
    all_users: bool = False,
) -> list[dict[str, Any]]:
    tasks = get_tasks(client, cache, refresh=refresh, all_users=all_users)
    if raw:
        return [task.raw() for task in tasks]
    return [task.summary() for task in tasks]
