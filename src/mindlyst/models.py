from __future__ import annotations

import uuid
import datetime as dt
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


# retry is failed -> pending; success is terminal
ALLOWED_TRANSITIONS = {
    TaskStatus.IDLE: {TaskStatus.PENDING},
    TaskStatus.PENDING: {TaskStatus.SUCCESS, TaskStatus.FAILED},
    TaskStatus.FAILED: {TaskStatus.PENDING},
    TaskStatus.SUCCESS: set(),
}


class InvalidTransition(ValueError):
    def __init__(self, current: TaskStatus, target: TaskStatus):
        super().__init__(f"cannot move task from {current.value} to {target.value}")
        self.current = current
        self.target = target


class CandidateTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2


class TrackedTask(CandidateTask):
    """A candidate task plus its client-local submission state."""

    id: str
    status: TaskStatus = TaskStatus.IDLE
    message: Optional[str] = None

    @classmethod
    def from_candidate(cls, candidate: CandidateTask) -> "TrackedTask":
        return cls(id=uuid.uuid4().hex, title=candidate.title, notes=candidate.notes)

    def transition(self, target: TaskStatus, message: Optional[str] = None) -> "TrackedTask":
        """Return a copy moved to `target`; pending always drops the message."""
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(self.status, target)
        if target == TaskStatus.PENDING:
            message = None
        return self.model_copy(update={"status": target, "message": message})


class TaskConfirmation(BaseModel):
    task_id: str
    task_title: str
    message: str
    client_id: Optional[str] = None


OutcomeKind = Literal["all_succeeded", "partial", "all_failed", "nothing_to_submit"]


class BatchOutcome(BaseModel):
    kind: OutcomeKind
    succeeded: int = 0
    failed: int = 0
    message: str


class DailyTask(BaseModel):
    id: str
    text: str = Field(..., min_length=1)
    position: int = 0
    date: dt.date
    completed: bool = False
    created_at: Optional[dt.datetime] = None
