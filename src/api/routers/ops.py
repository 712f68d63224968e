import logging
from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api import state
from api.metrics import PENDING_SUBMISSIONS
from mindlyst.models import TaskStatus
from storage import db

router = APIRouter()
logger = logging.getLogger(__name__)


def _pending_count() -> int:
    return sum(
        1
        for coordinator in state.batches.values()
        for task in coordinator.tasks
        if task.status == TaskStatus.PENDING
    )


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "healthy",
        "database": {"status": "disabled"},
        "pending_submissions": _pending_count(),
    }

    if db.is_configured():
        db_health = await db.health_check()
        health["database"] = db_health
        if db_health["status"] != "healthy":
            health["status"] = "degraded"

    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    PENDING_SUBMISSIONS.set(_pending_count())
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
