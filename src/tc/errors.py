"""Exceptions raised by the TimeCamp CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tc.models import Task


class TimeCampError(Exception):
    """Base exception for errors reported to the user."""

    pass


class InputFormatError(TimeCampError):
    """Raised when a time, duration or date flag cannot be parsed."""

    pass


class UsageError(TimeCampError):
    """Raised when a command is missing required flags or gets an invalid id."""

    pass


class TaskResolutionError(TimeCampError):
    """Base exception for task queries that do not resolve to one task."""

    pass


class NoTaskMatchError(TaskResolutionError):
    """Raised when no task matches a query."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f'No task matches "{query}".')


class AmbiguousTaskError(TaskResolutionError):
    """Raised when a query matches more than one task.

    The message lists at most ``preview_limit`` candidates; ``matches`` holds
    all of them.
    """

    def __init__(self, query: str, matches: list[Task], preview_limit: int = 10) -> None:
        self.query = query
        self.matches = matches
        preview = "\n".join(f"- {task.task_id}: {task.name}" for task in matches[:preview_limit])
        super().__init__(f"Task query matched multiple tasks:\n{preview}\nRefine your query.")


class CacheError(TimeCampError):
    """Raised when the task cache cannot be written."""

    pass


class ApiKeyNotSetError(TimeCampError):
    """Raised when TIMECAMP_API_KEY is not set."""

    def __init__(self) -> None:
        super().__init__("Missing TIMECAMP_API_KEY environment variable.")


class ApiError(TimeCampError):
    """Raised when the TimeCamp API call fails or reports failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
