import logging
import time

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_coordinator
from api.metrics import REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL, TASK_SUBMISSIONS_TOTAL
from submission.batch_coordinator import BatchSubmissionCoordinator

router = APIRouter()
logger = logging.getLogger(__name__)


def batch_view(coordinator: BatchSubmissionCoordinator) -> dict:
    outcome = coordinator.outcome()
    return {
        "tasks": [t.model_dump(mode="json") for t in coordinator.tasks],
        "busy": coordinator.busy,
        "outcome": outcome.model_dump() if outcome else None,
    }


def _ensure_idle(coordinator: BatchSubmissionCoordinator) -> None:
    # add actions are disabled until the running batch settles
    if coordinator.busy:
        raise HTTPException(status_code=409, detail="Tasks are still being added, please wait")


@router.get("/batch")
async def get_batch(
    coordinator: BatchSubmissionCoordinator = Depends(get_coordinator),
) -> dict:
    """Current tracked tasks with their statuses and the aggregate outcome."""
    return batch_view(coordinator)


@router.post("/batch/tasks/{client_id}/submit")
async def submit_task(
    client_id: str,
    wait: bool = False,
    coordinator: BatchSubmissionCoordinator = Depends(get_coordinator),
) -> dict:
    """Send one tracked task to Google Tasks."""
    _ensure_idle(coordinator)

    try:
        job = coordinator.submit_one(client_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown task {client_id}")

    if job is not None:
        TASK_SUBMISSIONS_TOTAL.labels(mode="single").inc()
        if wait:
            await coordinator.wait_idle()

    REQUESTS_TOTAL.labels(
        endpoint="/batch/tasks/submit", status="submitted" if job else "ignored"
    ).inc()
    return {"submitted": [client_id] if job is not None else [], **batch_view(coordinator)}


@router.post("/batch/submit-all")
async def submit_all_tasks(
    wait: bool = False,
    coordinator: BatchSubmissionCoordinator = Depends(get_coordinator),
) -> dict:
    """Send every idle or failed tracked task to Google Tasks concurrently."""
    start = time.time()
    _ensure_idle(coordinator)

    submitted = coordinator.submit_all()
    if submitted:
        logger.info(f"Add-all started for {len(submitted)} tasks")
        TASK_SUBMISSIONS_TOTAL.labels(mode="batch").inc(len(submitted))
        if wait:
            await coordinator.wait_idle()

    REQUESTS_TOTAL.labels(
        endpoint="/batch/submit-all", status="submitted" if submitted else "nothing_to_submit"
    ).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/batch/submit-all").observe(time.time() - start)
    return {"submitted": submitted, **batch_view(coordinator)}
