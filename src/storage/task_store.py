"""
Daily task list for Mindlyst.

PostgreSQL-backed, date-scoped to-do items: one list per user per day,
ordered with open items first and then by their position.
"""

import logging
import uuid
from datetime import date
from typing import List, Optional

from mindlyst.models import DailyTask
from storage import db

logger = logging.getLogger(__name__)


def _from_record(record) -> DailyTask:
    return DailyTask(
        id=str(record["id"]),
        text=record["text"],
        position=record["position"],
        date=record["date"],
        completed=record["completed"],
        created_at=record["created_at"],
    )


def _parse_id(task_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(task_id)
    except ValueError:
        return None


class DailyTaskStore:
    _COLUMNS = "id, text, position, date, completed, created_at"

    async def get_tasks_by_date(self, user_id: str, day: date) -> List[DailyTask]:
        query = f"""
            SELECT {self._COLUMNS} FROM daily_tasks
            WHERE user_id = $1 AND date = $2
            ORDER BY completed ASC, position ASC, created_at ASC
        """
        records = await db.fetch(query, user_id, day)
        return [_from_record(r) for r in records]

    async def create_task(
        self,
        user_id: str,
        text: str,
        day: date,
        position: Optional[int] = None,
    ) -> DailyTask:
        """
        Add a task to the given day.

        Without an explicit position the task goes after the current last one.
        """
        if position is None:
            max_position = await db.fetchval(
                "SELECT MAX(position) FROM daily_tasks WHERE user_id = $1 AND date = $2",
                user_id,
                day,
            )
            position = -1 if max_position is None else max_position
            position += 1

        query = f"""
            INSERT INTO daily_tasks (user_id, text, position, date)
            VALUES ($1, $2, $3, $4)
            RETURNING {self._COLUMNS}
        """
        record = await db.fetchrow(query, user_id, text.strip(), position, day)
        task = _from_record(record)
        logger.info(f"Created daily task {task.id} for {day.isoformat()}")
        return task

    async def set_completed(
        self, user_id: str, task_id: str, completed: bool
    ) -> Optional[DailyTask]:
        return await self._update(user_id, task_id, "completed = $3", completed)

    async def update_task_text(
        self, user_id: str, task_id: str, text: str
    ) -> Optional[DailyTask]:
        return await self._update(user_id, task_id, "text = $3", text.strip())

    async def _update(self, user_id: str, task_id: str, assignment: str, value) -> Optional[DailyTask]:
        parsed = _parse_id(task_id)
        if parsed is None:
            return None
        query = f"""
            UPDATE daily_tasks SET {assignment}, updated_at = NOW()
            WHERE id = $1 AND user_id = $2
            RETURNING {self._COLUMNS}
        """
        record = await db.fetchrow(query, parsed, user_id, value)
        return _from_record(record) if record else None

    async def delete_task(self, user_id: str, task_id: str) -> bool:
        parsed = _parse_id(task_id)
        if parsed is None:
            return False
        status = await db.execute(
            "DELETE FROM daily_tasks WHERE id = $1 AND user_id = $2", parsed, user_id
        )
        deleted = status == "DELETE 1"
        if deleted:
            logger.info(f"Deleted daily task {task_id}")
        return deleted
