"""HTTP client for the TimeCamp API."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests
from pydantic import ValidationError

from tc.errors import ApiError, ApiKeyNotSetError
from tc.models import Task, TimeEntry

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://app.timecamp.com/third_party/api"
CLIENT_NAME = "timecamp-cli"
DEFAULT_TIMEOUT = 30


def _failure_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return fallback


def _as_task_list(data: Any) -> list[Task]:
    """Flatten a task payload into a list of tasks.

    The service returns tasks either as a list or as an object keyed by
    task id; some endpoints wrap either form in ``{"data": ...}``.
    """
    if isinstance(data, dict) and "data" in data and "task_id" not in data:
        data = data["data"]
    if data is None:
        return []
    if isinstance(data, dict):
        data = list(data.values())
    try:
        return [Task.model_validate(item) for item in data]
    except ValidationError as e:
        raise ApiError(f"Unexpected task payload from TimeCamp API: {e}") from e


class TimeCampClient:
    """Thin wrapper over the TimeCamp REST API.

    Every call performs exactly one request. Failures raise ApiError with the
    service's message; nothing is retried.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str | None = None,
        client_name: str = CLIENT_NAME,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: TimeCamp API token. If not provided, reads from TIMECAMP_API_KEY.
            api_url: Base API URL. If not provided, reads from TIMECAMP_API_URL
                or falls back to the public endpoint.
            client_name: Identifies this client to the service.
            timeout: Per-request timeout in seconds.
            session: Optional requests session (for testing).

        Raises:
            ApiKeyNotSetError: If no API key is available.
        """
        self._api_key = api_key or os.environ.get("TIMECAMP_API_KEY")
        if not self._api_key:
            raise ApiKeyNotSetError()
        self.api_url = (api_url or os.environ.get("TIMECAMP_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.client_name = client_name
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {self._api_key}",
                "Accept": "application/json",
            }
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            ApiError: On transport errors, HTTP error statuses, empty or
                non-JSON bodies, or a body with ``success: false``.
        """
        url = f"{self.api_url}/{path.lstrip('/')}"
        logger.debug("%s %s params=%s json=%s", method, url, params, json)
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f"Request to TimeCamp failed: {e}") from e

        body: Any = None
        if resp.content:
            try:
                body = resp.json()
            except ValueError:
                body = None

        if not resp.ok:
            fallback = f"TimeCamp API error: HTTP {resp.status_code}"
            raise ApiError(_failure_message(body, fallback), status_code=resp.status_code)
        if body is None:
            raise ApiError("Empty or invalid response from TimeCamp API.", status_code=resp.status_code)
        if isinstance(body, dict) and body.get("success") is False:
            raise ApiError(_failure_message(body, "TimeCamp API request failed."), status_code=resp.status_code)
        return body

    # Timer

    def timer_request(self, payload: dict[str, Any]) -> Any:
        """POST a raw payload to the timer endpoint."""
        return self.request("POST", "timer", json=payload)

    def start_timer(self, task_id: int | None = None, started_at: str | None = None) -> Any:
        payload: dict[str, Any] = {"action": "start"}
        if task_id is not None:
            payload["task_id"] = task_id
        if started_at:
            payload["started_at"] = started_at
        return self.timer_request(payload)

    def start_timer_with_note(
        self,
        note: str,
        started_at: str,
        task_id: int | None = None,
    ) -> Any:
        """Start a timer carrying a note.

        The plain start action ignores notes, so this sends the lower-level
        payload with the client name as ``service``.
        """
        payload: dict[str, Any] = {
            "action": "start",
            "started_at": started_at,
            "note": note,
            "service": self.client_name,
        }
        if task_id is not None:
            payload["task_id"] = task_id
        return self.timer_request(payload)

    def stop_timer(self, stopped_at: str | None = None) -> Any:
        payload: dict[str, Any] = {"action": "stop"}
        if stopped_at:
            payload["stopped_at"] = stopped_at
        return self.timer_request(payload)

    def timer_status(self) -> Any:
        return self.timer_request({"action": "status"})

    # Time entries

    def get_entries(self, date_from: str, date_to: str, task_id: str | None = None) -> Any:
        params: dict[str, Any] = {"from": date_from, "to": date_to, "user_ids": "me"}
        if task_id is not None:
            params["task_ids"] = task_id
        return self.request("GET", "entries", params=params)

    def create_entry(self, entry: TimeEntry) -> Any:
        return self.request("POST", "entries", json=entry.to_payload())

    def update_entry(self, entry_id: int, entry: TimeEntry) -> Any:
        return self.request("PUT", "entries", json={"id": entry_id, **entry.to_payload()})

    def delete_entry(self, entry_id: int) -> Any:
        return self.request("DELETE", "entries", json={"id": entry_id})

    # Tasks

    def list_active_user_tasks(self) -> list[Task]:
        """Active tasks the current user can track time on."""
        body = self.request(
            "GET",
            "tasks",
            params={"status": "active", "user": "me", "include_full_breadcrumb": 1},
        )
        return _as_task_list(body)

    def list_all_tasks(self) -> list[Task]:
        """Every task in the account, for all users and statuses."""
        return _as_task_list(self.request("GET", "tasks"))
