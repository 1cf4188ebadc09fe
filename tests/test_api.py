"""Tests for the TimeCamp HTTP client."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from tc.api import CLIENT_NAME, DEFAULT_API_URL, TimeCampClient
from tc.errors import ApiError, ApiKeyNotSetError
from tc.models import TimeEntry


def make_response(status: int = 200, body: Any = None, content: bytes | None = None) -> MagicMock:
    """Build a fake requests.Response."""
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    if content is None:
        content = json.dumps(body).encode() if body is not None else b""
    resp.content = content
    if body is not None:
        resp.json.return_value = body
    else:
        resp.json.side_effect = ValueError("No JSON")
    return resp


def make_client(response: MagicMock | None = None, **kwargs) -> tuple[TimeCampClient, MagicMock]:
    session = MagicMock()
    session.headers = {}
    session.request.return_value = response or make_response(body={"ok": True})
    return TimeCampClient("secret", session=session, **kwargs), session


class TestClientInit:
    """Tests for client construction and configuration."""

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("TIMECAMP_API_KEY", raising=False)
        with pytest.raises(ApiKeyNotSetError, match="Missing TIMECAMP_API_KEY"):
            TimeCampClient()

    def test_empty_key(self, monkeypatch):
        monkeypatch.setenv("TIMECAMP_API_KEY", "")
        with pytest.raises(ApiKeyNotSetError):
            TimeCampClient()

    def test_key_from_env(self, monkeypatch):
        monkeypatch.setenv("TIMECAMP_API_KEY", "from-env")
        session = MagicMock()
        session.headers = {}
        TimeCampClient(session=session)
        assert session.headers["Authorization"] == "Bearer from-env"

    def test_default_url(self, monkeypatch):
        monkeypatch.delenv("TIMECAMP_API_URL", raising=False)
        client, _ = make_client()
        assert client.api_url == DEFAULT_API_URL

    def test_url_from_env(self, monkeypatch):
        monkeypatch.setenv("TIMECAMP_API_URL", "http://localhost:9000/api/")
        client, _ = make_client()
        assert client.api_url == "http://localhost:9000/api"


class TestRequest:
    """Tests for response handling."""

    def test_returns_body(self):
        client, session = make_client(make_response(body={"entry_id": 5}))
        assert client.request("GET", "/entries") == {"entry_id": 5}
        args, kwargs = session.request.call_args
        assert args == ("GET", f"{DEFAULT_API_URL}/entries")
        assert kwargs["timeout"] == client.timeout

    def test_success_false_surfaces_message(self):
        client, _ = make_client(make_response(body={"success": False, "message": "Task is archived"}))
        with pytest.raises(ApiError, match="Task is archived"):
            client.request("POST", "timer")

    def test_success_false_surfaces_error_field(self):
        client, _ = make_client(make_response(body={"success": False, "error": "Bad task"}))
        with pytest.raises(ApiError, match="Bad task"):
            client.request("POST", "timer")

    def test_success_false_without_message(self):
        client, _ = make_client(make_response(body={"success": False}))
        with pytest.raises(ApiError, match="request failed"):
            client.request("POST", "timer")

    def test_http_error_with_message(self):
        client, _ = make_client(make_response(status=403, body={"message": "Forbidden token"}))
        with pytest.raises(ApiError, match="Forbidden token") as excinfo:
            client.request("GET", "entries")
        assert excinfo.value.status_code == 403

    def test_http_error_without_body(self):
        client, _ = make_client(make_response(status=500))
        with pytest.raises(ApiError, match="HTTP 500"):
            client.request("GET", "entries")

    def test_empty_body_is_failure(self):
        client, _ = make_client(make_response(status=200))
        with pytest.raises(ApiError, match="Empty"):
            client.request("GET", "entries")

    def test_non_json_body_is_failure(self):
        client, _ = make_client(make_response(status=200, content=b"<html>"))
        with pytest.raises(ApiError):
            client.request("GET", "entries")

    def test_transport_error(self):
        client, session = make_client()
        session.request.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(ApiError, match="connection refused"):
            client.request("GET", "entries")
        assert session.request.call_count == 1


class TestTimer:
    """Tests for timer calls."""

    def test_start_plain(self):
        client, session = make_client()
        client.start_timer()
        assert session.request.call_args.kwargs["json"] == {"action": "start"}

    def test_start_with_task_and_time(self):
        client, session = make_client()
        client.start_timer(task_id=12, started_at="2024-03-01 09:00:00")
        assert session.request.call_args.kwargs["json"] == {
            "action": "start",
            "task_id": 12,
            "started_at": "2024-03-01 09:00:00",
        }

    def test_start_with_note(self):
        client, session = make_client()
        client.start_timer_with_note("Reviewing", started_at="2024-03-01 09:00:00", task_id=1)
        args, kwargs = session.request.call_args
        assert args == ("POST", f"{DEFAULT_API_URL}/timer")
        assert kwargs["json"] == {
            "action": "start",
            "task_id": 1,
            "started_at": "2024-03-01 09:00:00",
            "note": "Reviewing",
            "service": CLIENT_NAME,
        }

    def test_stop(self):
        client, session = make_client()
        client.stop_timer(stopped_at="2024-03-01 10:00:00")
        assert session.request.call_args.kwargs["json"] == {
            "action": "stop",
            "stopped_at": "2024-03-01 10:00:00",
        }

    def test_status(self):
        client, session = make_client()
        client.timer_status()
        assert session.request.call_args.kwargs["json"] == {"action": "status"}


class TestEntries:
    """Tests for time entry calls."""

    def test_get_entries(self):
        client, session = make_client(make_response(body=[]))
        client.get_entries("2024-03-01", "2024-03-02", task_id="12")
        assert session.request.call_args.kwargs["params"] == {
            "from": "2024-03-01",
            "to": "2024-03-02",
            "user_ids": "me",
            "task_ids": "12",
        }

    def test_create_entry_omits_unset_fields(self):
        client, session = make_client()
        client.create_entry(TimeEntry(date="2024-03-01", duration=60))
        assert session.request.call_args.kwargs["json"] == {"date": "2024-03-01", "duration": 60}

    def test_update_entry(self):
        client, session = make_client()
        client.update_entry(77, TimeEntry(description="New note"))
        args, kwargs = session.request.call_args
        assert args[0] == "PUT"
        assert kwargs["json"] == {"id": 77, "description": "New note"}

    def test_delete_entry(self):
        client, session = make_client()
        client.delete_entry(77)
        args, kwargs = session.request.call_args
        assert args[0] == "DELETE"
        assert kwargs["json"] == {"id": 77}


class TestTasks:
    """Tests for task listing."""

    def test_keyed_object_flattened(self):
        body = {
            "1": {"task_id": "1", "name": "Alpha", "parent_id": "0", "archived": "0"},
            "12": {"task_id": "12", "name": "Alphabet", "parent_id": "1", "archived": "1"},
        }
        client, _ = make_client(make_response(body=body))
        tasks = client.list_active_user_tasks()
        assert [(t.task_id, t.name, t.parent_id, t.archived) for t in tasks] == [
            (1, "Alpha", 0, False),
            (12, "Alphabet", 1, True),
        ]

    def test_wrapped_list(self):
        body = {"success": True, "data": [{"task_id": 3, "name": "C", "parent_id": ""}]}
        client, _ = make_client(make_response(body=body))
        tasks = client.list_all_tasks()
        assert tasks[0].task_id == 3
        assert tasks[0].parent_id is None

    def test_active_user_params(self):
        client, session = make_client(make_response(body=[]))
        assert client.list_active_user_tasks() == []
        params = session.request.call_args.kwargs["params"]
        assert params["user"] == "me"
        assert params["status"] == "active"

    def test_all_tasks_has_no_filter(self):
        client, session = make_client(make_response(body=[]))
        client.list_all_tasks()
        assert session.request.call_args.kwargs["params"] is None

    def test_null_archived_is_false(self):
        body = {"1": {"task_id": "1", "name": "A", "parent_id": "0", "archived": None}}
        client, _ = make_client(make_response(body=body))
        assert client.list_active_user_tasks()[0].archived is False

    def test_missing_task_id_is_api_error(self):
        body = [{"name": "No id"}]
        client, _ = make_client(make_response(body=body))
        with pytest.raises(ApiError, match="Unexpected task payload"):
            client.list_active_user_tasks()

    def test_payload_kept_verbatim(self):
        item = {"task_id": "7", "name": "Seven", "parent_id": "", "archived": "0", "color": "#fff"}
        client, _ = make_client(make_response(body={"7": item}))
        task = client.list_all_tasks()[0]
        assert task.task_id == 7
        assert task.raw() == item
