"""Pydantic models for TimeCamp tasks, time entries and the task cache."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator


class Task(BaseModel):
    """A TimeCamp task.

    The mapping the task was validated from is kept unchanged so that
    ``tasks --raw`` and the cache file carry the service payload verbatim.
    """

    model_config = ConfigDict(extra="allow")

    task_id: int
    name: str = ""
    parent_id: int | None = None
    archived: bool = False

    _payload: dict[str, Any] | None = PrivateAttr(default=None)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_payload(cls, data: Any, handler: Any) -> Task:
        task = handler(data)
        if isinstance(data, dict):
            task._payload = dict(data)
        return task

    @field_validator("name", mode="before")
    @classmethod
    def _name_or_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("archived", mode="before")
    @classmethod
    def _null_archived_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("parent_id", mode="before")
    @classmethod
    def _blank_parent_is_none(cls, value: Any) -> Any:
        # The service sends "" for top-level tasks
        return None if value == "" else value

    def raw(self) -> dict[str, Any]:
        """Return the payload as the service sent it."""
        if self._payload is not None:
            return self._payload
        return self.model_dump(mode="json")

    def summary(self) -> dict[str, Any]:
        """Return the projection printed by the ``tasks`` command."""
        return {
            "task_id": self.task_id,
            "name": self.name,
            "parent_id": self.parent_id,
            "archived": self.archived,
        }


class TaskCacheRecord(BaseModel):
    """On-disk task cache: the last fetched task list and when it was fetched.

    ``fetchedAt`` is epoch milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    fetched_at: int = Field(alias="fetchedAt")
    tasks: list[Task]


class TimeEntry(BaseModel):
    """Time entry fields sent on create or update.

    Every field is optional; unset fields are left out of the request.
    """

    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration: int | None = None
    description: str | None = None
    task_id: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
