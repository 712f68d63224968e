import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.dependencies import get_task_creator
from api.metrics import REQUESTS_TOTAL
from mindlyst.errors import MindlystError
from submission.batch_coordinator import TaskCreator

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateGoogleTaskIn(BaseModel):
    title: str = Field(..., min_length=1)
    notes: Optional[str] = None
    client_id: str


@router.post("/google-tasks")
async def create_google_task(
    payload: CreateGoogleTaskIn,
    creator: TaskCreator = Depends(get_task_creator),
) -> dict:
    """Create one Google Task directly, echoing the caller's correlation id."""
    try:
        confirmation = await creator.create_task(
            payload.title, payload.notes, client_id=payload.client_id
        )
    except MindlystError as e:
        REQUESTS_TOTAL.labels(endpoint="/google-tasks", status=e.kind).inc()
        raise

    REQUESTS_TOTAL.labels(endpoint="/google-tasks", status="created").inc()
    return {
        "success": True,
        "task_id": confirmation.task_id,
        "task_title": confirmation.task_title,
        "message": confirmation.message,
        "client_id": confirmation.client_id or payload.client_id,
    }
