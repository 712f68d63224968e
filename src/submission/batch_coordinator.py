"""
Batch submission coordinator.

Owns the tracked tasks produced by one extraction and drives each of them
through ``idle -> pending -> success | failed`` (and ``failed -> pending`` on
retry) while independent creation calls settle on the event loop.

The collection is an insertion-ordered mapping ``id -> TrackedTask`` that is
replaced wholesale on every change, so a completion handler never observes a
half-applied update. Busy state and the aggregate outcome are computed from
the collection on demand rather than stored.
"""

import asyncio
import logging
import os
from typing import Dict, Iterable, List, Optional, Protocol, Set

from mindlyst.errors import MindlystError
from mindlyst.models import (
    BatchOutcome,
    CandidateTask,
    TaskConfirmation,
    TaskStatus,
    TrackedTask,
)

logger = logging.getLogger(__name__)


def parse_timeout(raw: Optional[str]) -> Optional[float]:
    """Seconds from a SUBMIT_TIMEOUT_S value; blank, invalid or non-positive means no timeout."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid SUBMIT_TIMEOUT_S={raw!r}; submissions will not time out")
        return None
    if not value > 0:
        logger.warning(f"Ignoring non-positive SUBMIT_TIMEOUT_S={raw!r}; submissions will not time out")
        return None
    return value


SUBMIT_TIMEOUT_S: Optional[float] = parse_timeout(os.getenv("SUBMIT_TIMEOUT_S"))

NOTHING_TO_SUBMIT = BatchOutcome(
    kind="nothing_to_submit",
    message="No tasks available to add or all have been processed.",
)


class TaskCreator(Protocol):
    async def create_task(
        self,
        title: str,
        notes: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> TaskConfirmation: ...


def summarize(tasks: Iterable[TrackedTask]) -> Optional[BatchOutcome]:
    """Aggregate outcome over every task that has been attempted."""
    attempted = [t for t in tasks if t.status != TaskStatus.IDLE]
    succeeded = sum(1 for t in attempted if t.status == TaskStatus.SUCCESS)
    failed = sum(1 for t in attempted if t.status == TaskStatus.FAILED)

    if succeeded and not failed:
        return BatchOutcome(
            kind="all_succeeded",
            succeeded=succeeded,
            message=f"Successfully added {succeeded} tasks to Google Tasks!",
        )
    if succeeded and failed:
        return BatchOutcome(
            kind="partial",
            succeeded=succeeded,
            failed=failed,
            message=(
                f"Added {succeeded} tasks. {failed} tasks failed. "
                "Check specific task statuses."
            ),
        )
    if failed:
        return BatchOutcome(
            kind="all_failed",
            failed=failed,
            message="All tasks failed to add to Google Tasks. Check specific task statuses.",
        )
    return None


class BatchSubmissionCoordinator:
    def __init__(self, creator: TaskCreator, timeout_s: Optional[float] = SUBMIT_TIMEOUT_S):
        self.creator = creator
        self.timeout_s = timeout_s
        self._tasks: Dict[str, TrackedTask] = {}
        self._notice: Optional[BatchOutcome] = None
        # strong refs so the loop does not garbage-collect running jobs
        self._inflight: Set[asyncio.Task] = set()

    @property
    def tasks(self) -> List[TrackedTask]:
        return list(self._tasks.values())

    def get(self, client_id: str) -> Optional[TrackedTask]:
        return self._tasks.get(client_id)

    @property
    def busy(self) -> bool:
        return any(t.status == TaskStatus.PENDING for t in self._tasks.values())

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def outcome(self) -> Optional[BatchOutcome]:
        if self.busy:
            return None
        return self._notice or summarize(self._tasks.values())

    def load_candidates(self, candidates: Iterable[CandidateTask]) -> List[TrackedTask]:
        """Replace the whole batch with fresh idle tasks.

        Calls still in flight for the previous batch keep running; their
        completions find no matching id and are dropped.
        """
        fresh = [TrackedTask.from_candidate(c) for c in candidates]
        if self.busy:
            logger.warning("Replacing a batch that still has pending submissions")
        self._tasks = {t.id: t for t in fresh}
        self._notice = None
        logger.info(f"Loaded batch of {len(fresh)} tasks")
        return fresh

    def _replace(self, updates: Dict[str, TrackedTask]) -> None:
        self._tasks = {
            task_id: updates.get(task_id, task) for task_id, task in self._tasks.items()
        }

    def _spawn(self, task: TrackedTask) -> asyncio.Task:
        job = asyncio.create_task(self._deliver(task))
        self._inflight.add(job)
        job.add_done_callback(self._inflight.discard)
        return job

    def submit_one(self, client_id: str) -> Optional[asyncio.Task]:
        """Start creating one task; a no-op for pending or confirmed tasks."""
        task = self._tasks.get(client_id)
        if task is None:
            raise KeyError(client_id)
        if task.status in (TaskStatus.PENDING, TaskStatus.SUCCESS):
            logger.debug(f"Ignoring submit for task {client_id} in state {task.status.value}")
            return None

        pending = task.transition(TaskStatus.PENDING)
        self._replace({client_id: pending})
        self._notice = None
        return self._spawn(pending)

    def submit_all(self) -> List[str]:
        """Start creating every idle or failed task; returns the submitted ids."""
        selected = [
            t for t in self._tasks.values()
            if t.status in (TaskStatus.IDLE, TaskStatus.FAILED)
        ]
        if not selected:
            self._notice = NOTHING_TO_SUBMIT
            return []

        pending = {t.id: t.transition(TaskStatus.PENDING) for t in selected}
        self._replace(pending)
        self._notice = None
        logger.info(f"Submitting {len(pending)} tasks")

        for task in pending.values():
            self._spawn(task)
        return list(pending)

    async def _create(self, task: TrackedTask) -> TaskConfirmation:
        call = self.creator.create_task(task.title, task.notes, client_id=task.id)
        if self.timeout_s is None:
            return await call
        return await asyncio.wait_for(call, self.timeout_s)

    async def _deliver(self, task: TrackedTask) -> None:
        try:
            confirmation = await self._create(task)
        except asyncio.TimeoutError:
            self._settle(
                task.id,
                TaskStatus.FAILED,
                f"Timed out after {self.timeout_s:g}s waiting for Google Tasks.",
            )
        except MindlystError as e:
            self._settle(task.id, TaskStatus.FAILED, e.message)
        except Exception as e:
            logger.exception(f"Unexpected error creating task {task.id}")
            self._settle(task.id, TaskStatus.FAILED, str(e) or "Unknown error")
        else:
            if confirmation.client_id and confirmation.client_id != task.id:
                logger.warning(
                    f"Confirmation for task {task.id} echoed id {confirmation.client_id}"
                )
            # each job settles only the task it was started for
            self._settle(task.id, TaskStatus.SUCCESS, confirmation.message)

    def _settle(self, client_id: str, status: TaskStatus, message: str) -> None:
        task = self._tasks.get(client_id)
        if task is None or task.status != TaskStatus.PENDING:
            logger.debug(f"Dropping late completion for task {client_id}")
            return
        self._replace({client_id: task.transition(status, message)})
        logger.info(f"Task {client_id} settled as {status.value}")

    async def wait_idle(self) -> None:
        """Wait until every creation call started so far has settled."""
        while self._inflight:
            await asyncio.wait(set(self._inflight))
