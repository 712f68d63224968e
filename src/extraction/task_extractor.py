import logging
import os
from typing import Optional

from llm.llm_client import LLMClient
from mindlyst.errors import InputTooShort, MindlystError, UnknownError
from mindlyst.models import CandidateTask

logger = logging.getLogger(__name__)

EXTRACTION_MIN_CHARS = int(os.getenv("EXTRACTION_MIN_CHARS", "50"))


class TaskExtractor:
    """Remote extraction client: free text in, candidate tasks out."""

    def __init__(self, llm_client: LLMClient, min_chars: Optional[int] = None):
        self.llm_client = llm_client
        self.min_chars = EXTRACTION_MIN_CHARS if min_chars is None else min_chars

    def extract(self, text: str) -> list[CandidateTask]:
        trimmed = (text or "").strip()
        if len(trimmed) < self.min_chars:
            raise InputTooShort(
                f"Please enter at least {self.min_chars} characters for effective task extraction"
            )

        try:
            extracted = self.llm_client.extract_tasks(trimmed)
        except MindlystError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure while extracting tasks")
            raise UnknownError(f"Failed to extract tasks: {e}") from e

        tasks = [CandidateTask(title=t.title, notes=t.notes) for t in extracted]
        logger.info(f"Extracted {len(tasks)} candidate tasks")
        return tasks
