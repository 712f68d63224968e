import asyncio
import uuid
from datetime import datetime

import pytest

from api import state
from mindlyst.models import DailyTask, TaskConfirmation


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls = 0

    def generate(self, *, system: str, user: str, model=None) -> str:
        self.calls += 1
        return self._response_text


class FailingProvider:
    def __init__(self, error: Exception):
        self._error = error

    def generate(self, *, system: str, user: str, model=None) -> str:
        raise self._error


class FakeCreator:
    """Scripted task-creation client.

    `failures` maps a title to the exception raised for it; `gates` maps a
    title to an asyncio.Event the call waits on before answering.
    """

    def __init__(self, failures=None, gates=None):
        self.failures = dict(failures or {})
        self.gates = dict(gates or {})
        self.calls = []

    async def create_task(self, title, notes=None, client_id=None):
        self.calls.append(title)
        if title in self.gates:
            await self.gates[title].wait()
        else:
            await asyncio.sleep(0)
        if title in self.failures:
            raise self.failures[title]
        return TaskConfirmation(
            task_id=f"g-{len(self.calls)}",
            task_title=title,
            message=f'Task "{title}" created successfully!',
            client_id=client_id,
        )


class FakeDailyTaskStore:
    def __init__(self):
        self.tasks = {}

    async def get_tasks_by_date(self, user_id, day):
        found = [t for (uid, _), t in self.tasks.items() if uid == user_id and t.date == day]
        return sorted(found, key=lambda t: (t.completed, t.position))

    async def create_task(self, user_id, text, day, position=None):
        if position is None:
            same_day = [t.position for t in await self.get_tasks_by_date(user_id, day)]
            position = max(same_day, default=-1) + 1
        task = DailyTask(
            id=str(uuid.uuid4()),
            text=text.strip(),
            position=position,
            date=day,
            created_at=datetime(2026, 1, 1, 9, 0),
        )
        self.tasks[(user_id, task.id)] = task
        return task

    async def _update(self, user_id, task_id, **changes):
        task = self.tasks.get((user_id, task_id))
        if task is None:
            return None
        task = task.model_copy(update=changes)
        self.tasks[(user_id, task_id)] = task
        return task

    async def set_completed(self, user_id, task_id, completed):
        return await self._update(user_id, task_id, completed=completed)

    async def update_task_text(self, user_id, task_id, text):
        return await self._update(user_id, task_id, text=text.strip())

    async def delete_task(self, user_id, task_id):
        return self.tasks.pop((user_id, task_id), None) is not None


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture(autouse=True)
def reset_state():
    state.batches.clear()
    state.task_extractor = None
    yield
    state.batches.clear()
    state.task_extractor = None
