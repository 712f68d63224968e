import asyncio
import logging
import os
from datetime import datetime
from typing import Awaitable, Callable, Optional

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from mindlyst.errors import NotAuthenticated, UnknownError
from mindlyst.models import TaskConfirmation

logger = logging.getLogger(__name__)

GOOGLE_TASKS_LIST_ID = os.getenv("GOOGLE_TASKS_LIST_ID", "@default")

REAUTH_MESSAGE = "Authentication error with Google Tasks API. Please sign in again."

CredentialsLoader = Callable[[], Awaitable[Optional[Credentials]]]


def end_of_today(now: Optional[datetime] = None) -> str:
    """Default due date: the end of the current local day, RFC 3339."""
    today = (now or datetime.now()).date()
    return f"{today.isoformat()}T23:59:59.000Z"


class GoogleTasksClient:
    """Remote task-creation client backed by the Google Tasks v1 API."""

    def __init__(
        self,
        credentials_loader: CredentialsLoader,
        tasklist: str = GOOGLE_TASKS_LIST_ID,
        due_factory: Optional[Callable[[], Optional[str]]] = end_of_today,
    ):
        self.credentials_loader = credentials_loader
        self.tasklist = tasklist
        self.due_factory = due_factory

    def _insert(self, credentials: Credentials, body: dict) -> dict:
        service = build("tasks", "v1", credentials=credentials, cache_discovery=False)
        return service.tasks().insert(tasklist=self.tasklist, body=body).execute()

    async def create_task(
        self,
        title: str,
        notes: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> TaskConfirmation:
        credentials = await self.credentials_loader()
        if credentials is None:
            raise NotAuthenticated(
                "User not authenticated or access token missing. Please sign in again."
            )

        body = {"title": title, "status": "needsAction"}
        if notes:
            body["notes"] = notes
        due = self.due_factory() if self.due_factory else None
        if due:
            body["due"] = due

        try:
            # googleapiclient is blocking; keep the event loop free
            created = await asyncio.to_thread(self._insert, credentials, body)
        except HttpError as e:
            logger.error(f"Error creating Google Task: {e}")
            if e.resp.status in (401, 403):
                raise NotAuthenticated(REAUTH_MESSAGE) from e
            raise UnknownError(f"Failed to create Google Task: {e}") from e
        except RefreshError as e:
            logger.error(f"Google credentials could not be refreshed: {e}")
            raise NotAuthenticated(REAUTH_MESSAGE) from e
        except Exception as e:
            logger.error(f"Error creating Google Task: {e}")
            raise UnknownError(f"Failed to create Google Task: {e}") from e

        if not created or not created.get("id"):
            raise UnknownError("Failed to create Google Task: empty response from Google.")

        task_title = created.get("title", title)
        logger.info(f"Task created: {task_title}")
        return TaskConfirmation(
            task_id=created["id"],
            task_title=task_title,
            message=f'Task "{task_title}" created successfully!',
            client_id=client_id,
        )
