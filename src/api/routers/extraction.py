import asyncio
import logging
import time

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_coordinator, get_task_extractor
from api.metrics import REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL, TASKS_EXTRACTED_TOTAL
from api.routers.batch import batch_view
from extraction.task_extractor import TaskExtractor
from mindlyst.errors import MindlystError
from submission.batch_coordinator import BatchSubmissionCoordinator

router = APIRouter()
logger = logging.getLogger(__name__)


class ExtractIn(BaseModel):
    text: str


@router.post("/extract")
async def extract_tasks(
    payload: ExtractIn,
    extractor: TaskExtractor = Depends(get_task_extractor),
    coordinator: BatchSubmissionCoordinator = Depends(get_coordinator),
) -> dict:
    """Extract candidate tasks from free text and start a new batch with them.

    A failed extraction leaves the current batch as it is.
    """
    start = time.time()
    logger.info(f"Received extraction request: {payload.text[:50]}...")

    try:
        # the provider uses a blocking HTTP client
        candidates = await asyncio.to_thread(extractor.extract, payload.text)
    except MindlystError as e:
        logger.warning(f"Extraction failed ({e.kind}): {e.message}")
        REQUESTS_TOTAL.labels(endpoint="/extract", status=e.kind).inc()
        raise

    coordinator.load_candidates(candidates)

    REQUESTS_TOTAL.labels(endpoint="/extract", status="extracted").inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/extract").observe(time.time() - start)
    TASKS_EXTRACTED_TOTAL.inc(len(candidates))

    return {"success": True, **batch_view(coordinator)}
