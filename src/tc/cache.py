"""On-disk cache of the TimeCamp task list."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tc.errors import CacheError
from tc.models import Task, TaskCacheRecord

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".timecamp-cli"
CACHE_FILENAME = "tasks-cache.json"
DEFAULT_TTL_MS = 10 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class TaskCache:
    """Task list stored as JSON ``{"fetchedAt": <epoch ms>, "tasks": [...]}``.

    The cache is an optimization only: anything unreadable is treated as no
    cache, and every write replaces the whole file.
    """

    def __init__(
        self,
        cache_dir: Path = DEFAULT_CACHE_DIR,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """Initialize the cache.

        Args:
            cache_dir: Directory holding the cache file (created on write).
            ttl_ms: Freshness window in milliseconds.
            clock: Returns the current time in epoch milliseconds.
        """
        self.cache_dir = Path(cache_dir)
        self.ttl_ms = ttl_ms
        self._clock = clock

    @property
    def path(self) -> Path:
        return self.cache_dir / CACHE_FILENAME

    def read(self) -> TaskCacheRecord | None:
        """Read the cache file.

        Returns:
            The cache record, or None if the file is missing, unreadable or
            not shaped like a cache record.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No task cache at %s", self.path)
            return None
        except OSError as e:
            logger.debug("Cannot read task cache %s: %s", self.path, e)
            return None

        try:
            return TaskCacheRecord.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.debug("Ignoring invalid task cache %s: %s", self.path, e)
            return None

    def write(self, tasks: Sequence[Task]) -> TaskCacheRecord:
        """Replace the cache with ``tasks`` stamped with the current time."""
        record = TaskCacheRecord(fetched_at=self._clock(), tasks=list(tasks))
        payload = {"fetchedAt": record.fetched_at, "tasks": [task.raw() for task in record.tasks]}

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._replace(payload)
        except OSError as e:
            raise CacheError(f"Cannot write task cache {self.path}: {e}") from e

        logger.debug("Wrote %d tasks to %s", len(record.tasks), self.path)
        return record

    def _replace(self, payload: dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".tasks-cache-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def is_fresh(self, record: TaskCacheRecord | None) -> bool:
        """Return True if ``record`` was fetched less than ``ttl_ms`` ago."""
        if record is None:
            return False
        return self._clock() - record.fetched_at < self.ttl_ms
