import pytest

from mindlyst.models import (
    CandidateTask,
    InvalidTransition,
    TaskStatus,
    TrackedTask,
)


def test_candidate_title_is_stripped():
    c = CandidateTask(title="  Call mom  ")
    assert c.title == "Call mom"
    assert c.notes is None


def test_candidate_blank_title_rejected():
    with pytest.raises(Exception):
        CandidateTask(title="   ")


def test_candidate_is_immutable():
    c = CandidateTask(title="Pay bills")
    with pytest.raises(Exception):
        c.title = "Other"


def test_tracked_task_from_candidate_gets_fresh_id():
    c = CandidateTask(title="Buy groceries", notes="milk, eggs")
    a = TrackedTask.from_candidate(c)
    b = TrackedTask.from_candidate(c)
    assert a.id != b.id
    assert a.status == TaskStatus.IDLE
    assert (a.title, a.notes, a.message) == ("Buy groceries", "milk, eggs", None)


def test_retry_clears_message():
    t = TrackedTask.from_candidate(CandidateTask(title="X"))
    failed = t.transition(TaskStatus.PENDING).transition(TaskStatus.FAILED, "boom")
    assert failed.message == "boom"

    retried = failed.transition(TaskStatus.PENDING)
    assert retried.status == TaskStatus.PENDING
    assert retried.message is None
    assert retried.id == t.id


@pytest.mark.parametrize(
    "path",
    [
        [TaskStatus.SUCCESS],
        [TaskStatus.PENDING, TaskStatus.PENDING],
        [TaskStatus.PENDING, TaskStatus.SUCCESS, TaskStatus.PENDING],
        [TaskStatus.PENDING, TaskStatus.FAILED, TaskStatus.SUCCESS],
    ],
)
def test_forbidden_transitions(path):
    t = TrackedTask.from_candidate(CandidateTask(title="X"))
    with pytest.raises(InvalidTransition):
        for status in path:
            t = t.transition(status)
