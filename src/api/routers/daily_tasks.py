import logging
import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from api.dependencies import get_daily_task_store, get_user_id
from storage.task_store import DailyTaskStore

router = APIRouter()
logger = logging.getLogger(__name__)


class _TextIn(BaseModel):
    text: str = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("text must not be blank")
        return v2


class CreateDailyTaskIn(_TextIn):
    date: Optional[dt.date] = None
    position: Optional[int] = Field(default=None, ge=0)


class UpdateTextIn(_TextIn):
    pass


class SetCompletedIn(BaseModel):
    completed: bool


@router.get("/daily-tasks")
async def get_daily_tasks(
    day: Optional[dt.date] = Query(default=None, alias="date"),
    user_id: str = Depends(get_user_id),
    store: DailyTaskStore = Depends(get_daily_task_store),
) -> dict:
    """Tasks for one day (defaults to today), open ones first."""
    day = day or dt.date.today()
    tasks = await store.get_tasks_by_date(user_id, day)
    return {"date": day.isoformat(), "tasks": [t.model_dump(mode="json") for t in tasks]}


@router.post("/daily-tasks", status_code=201)
async def create_daily_task(
    payload: CreateDailyTaskIn,
    user_id: str = Depends(get_user_id),
    store: DailyTaskStore = Depends(get_daily_task_store),
) -> dict:
    task = await store.create_task(
        user_id, payload.text, payload.date or dt.date.today(), position=payload.position
    )
    return {"status": "created", "task": task.model_dump(mode="json")}


@router.patch("/daily-tasks/{task_id}/completed")
async def set_daily_task_completed(
    task_id: str,
    payload: SetCompletedIn,
    user_id: str = Depends(get_user_id),
    store: DailyTaskStore = Depends(get_daily_task_store),
) -> dict:
    task = await store.set_completed(user_id, task_id, payload.completed)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "updated", "task": task.model_dump(mode="json")}


@router.patch("/daily-tasks/{task_id}/text")
async def update_daily_task_text(
    task_id: str,
    payload: UpdateTextIn,
    user_id: str = Depends(get_user_id),
    store: DailyTaskStore = Depends(get_daily_task_store),
) -> dict:
    task = await store.update_task_text(user_id, task_id, payload.text)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "updated", "task": task.model_dump(mode="json")}


@router.delete("/daily-tasks/{task_id}")
async def delete_daily_task(
    task_id: str,
    user_id: str = Depends(get_user_id),
    store: DailyTaskStore = Depends(get_daily_task_store),
) -> dict:
    if not await store.delete_task(user_id, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "deleted"}
