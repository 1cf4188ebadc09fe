"""Task retrieval (cache or service) and task query resolution."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from tc.api import TimeCampClient
from tc.cache import TaskCache
from tc.errors import AmbiguousTaskError, NoTaskMatchError
from tc.models import Task

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")


def get_tasks(
    client: TimeCampClient,
    cache: TaskCache,
    *,
    refresh: bool = False,
    all_users: bool = False,
) -> list[Task]:
    """Return the task list, from the cache when it is fresh.

    Args:
        client: TimeCamp API client.
        cache: Task cache.
        refresh: Skip the cache and re-fetch (the cache is still rewritten).
        all_users: Fetch every task in the account. Always remote; the cache
            is neither read nor written.

    Returns:
        List of tasks.

    Raises:
        ApiError: If the fetch fails. A stale cache is never used as fallback.
    """
    if all_users:
        return client.list_all_tasks()

    if not refresh:
        record = cache.read()
        if cache.is_fresh(record):
            logger.debug("Using %d cached tasks", len(record.tasks))
            return record.tasks

    logger.debug("Fetching tasks (refresh=%s)", refresh)
    tasks = client.list_active_user_tasks()
    cache.write(tasks)
    return tasks


def resolve_task(tasks: Sequence[Task], query: str | int | None) -> Task | None:
    """Resolve a user query to exactly one task.

    An all-digit query first matches ``task_id`` exactly. Otherwise, or when
    no id matches, the query is matched case-insensitively as a substring of
    task names.

    Args:
        tasks: Candidate tasks.
        query: Task id or part of a task name.

    Returns:
        The matching task, or None if the query is empty.

    Raises:
        NoTaskMatchError: If nothing matches.
        AmbiguousTaskError: If several tasks match by name.
    """
    if query is None:
        return None
    trimmed = str(query).strip()
    if not trimmed:
        return None

    if _DIGITS.fullmatch(trimmed):
        task_id = int(trimmed)
        for task in tasks:
            if task.task_id == task_id:
                return task

    needle = trimmed.lower()
    matches = [task for task in tasks if needle in task.name.lower()]

    if not matches:
        raise NoTaskMatchError(str(query))
    if len(matches) > 1:
        raise AmbiguousTaskError(str(query), matches)
    return matches[0]
