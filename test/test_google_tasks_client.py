import asyncio
from datetime import datetime
from types import SimpleNamespace

import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from integration.google_tasks import GoogleTasksClient, end_of_today
from mindlyst.errors import NotAuthenticated, UnknownError

FAKE_CREDENTIALS = object()


async def _credentials():
    return FAKE_CREDENTIALS


async def _no_credentials():
    return None


def _http_error(status: int) -> HttpError:
    return HttpError(SimpleNamespace(status=status, reason="error"), b'{"error": {"message": "denied"}}')


def _client(monkeypatch, insert, loader=_credentials):
    client = GoogleTasksClient(loader, tasklist="@default", due_factory=lambda: "2026-10-19T23:59:59.000Z")
    monkeypatch.setattr(client, "_insert", insert)
    return client


def test_end_of_today_uses_local_date():
    assert end_of_today(datetime(2026, 3, 5, 8, 30)) == "2026-03-05T23:59:59.000Z"


def test_create_task_sends_body_and_echoes_client_id(monkeypatch):
    seen = {}

    def insert(credentials, body):
        seen["credentials"] = credentials
        seen["body"] = body
        return {"id": "g-123", "title": body["title"]}

    client = _client(monkeypatch, insert)
    confirmation = asyncio.run(client.create_task("Call mom", "by end of day", client_id="ui-1"))

    assert seen["credentials"] is FAKE_CREDENTIALS
    assert seen["body"] == {
        "title": "Call mom",
        "notes": "by end of day",
        "status": "needsAction",
        "due": "2026-10-19T23:59:59.000Z",
    }
    assert confirmation.task_id == "g-123"
    assert confirmation.client_id == "ui-1"
    assert confirmation.message == 'Task "Call mom" created successfully!'


def test_missing_credentials_is_not_authenticated(monkeypatch):
    def insert(credentials, body):
        raise AssertionError("should not call Google without credentials")

    client = _client(monkeypatch, insert, loader=_no_credentials)
    with pytest.raises(NotAuthenticated):
        asyncio.run(client.create_task("X"))


@pytest.mark.parametrize("status", [401, 403])
def test_auth_http_errors_ask_to_sign_in_again(monkeypatch, status):
    def insert(credentials, body):
        raise _http_error(status)

    with pytest.raises(NotAuthenticated) as exc:
        asyncio.run(_client(monkeypatch, insert).create_task("X"))
    assert "sign in again" in exc.value.message


def test_refresh_error_is_not_authenticated(monkeypatch):
    def insert(credentials, body):
        raise RefreshError("invalid_grant")

    with pytest.raises(NotAuthenticated):
        asyncio.run(_client(monkeypatch, insert).create_task("X"))


def test_other_failures_are_unknown(monkeypatch):
    def insert(credentials, body):
        raise _http_error(500)

    with pytest.raises(UnknownError) as exc:
        asyncio.run(_client(monkeypatch, insert).create_task("X"))
    assert exc.value.message.startswith("Failed to create Google Task:")


def test_no_due_date_when_policy_disabled(monkeypatch):
    seen = {}

    def insert(credentials, body):
        seen.update(body)
        return {"id": "g-1", "title": "X"}

    client = GoogleTasksClient(_credentials, due_factory=None)
    monkeypatch.setattr(client, "_insert", insert)
    asyncio.run(client.create_task("X"))
    assert "due" not in seen
    assert "notes" not in seen
