import pytest

from conftest import FailingProvider, FakeProvider
from extraction.task_extractor import TaskExtractor
from llm.llm_client import LLMClient
from mindlyst.errors import InputTooShort, ServiceBusy, UnknownError
from mindlyst.models import CandidateTask

LONG_TEXT = (
    "I need to buy groceries: milk, eggs, bread. Also, call mom by end of day "
    "and prepare the slides for tomorrow."
)


def test_short_input_rejected_before_calling_out():
    provider = FakeProvider("[]")
    extractor = TaskExtractor(LLMClient(provider), min_chars=50)
    with pytest.raises(InputTooShort):
        extractor.extract("   call mom   ")
    assert provider.calls == 0


def test_length_is_measured_after_trimming():
    provider = FakeProvider("[]")
    extractor = TaskExtractor(LLMClient(provider), min_chars=10)
    with pytest.raises(InputTooShort):
        extractor.extract("  abc  " + " " * 20)


def test_extract_returns_candidates():
    provider = FakeProvider(
        '[{"title":"Buy groceries","notes":"milk, eggs, bread"},{"title":"Call mom","notes":""}]'
    )
    tasks = TaskExtractor(LLMClient(provider)).extract(LONG_TEXT)
    assert tasks == [
        CandidateTask(title="Buy groceries", notes="milk, eggs, bread"),
        CandidateTask(title="Call mom"),
    ]


def test_typed_errors_pass_through():
    extractor = TaskExtractor(LLMClient(FailingProvider(ServiceBusy("loading", retry_after_s=20.0))))
    with pytest.raises(ServiceBusy) as exc:
        extractor.extract(LONG_TEXT)
    assert exc.value.retry_after_s == 20.0


def test_unexpected_errors_become_unknown():
    extractor = TaskExtractor(LLMClient(FailingProvider(KeyError("choices"))))
    with pytest.raises(UnknownError) as exc:
        extractor.extract(LONG_TEXT)
    assert exc.value.message.startswith("Failed to extract tasks")
