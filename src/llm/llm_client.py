import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from llm.providers.base import LLMProvider
from llm.schemas import ExtractedTask, TaskExtractionResult
from mindlyst.errors import MalformedResponse

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You are a helpful assistant. From the user's text, extract a list of distinct, "
    'actionable tasks. For each task, provide a "title" and optional "notes". '
    "Respond ONLY with a JSON array of tasks. Do not include any other text or explanation."
)

EXTRACTION_EXAMPLES = """Example Input:
"I need to buy groceries: milk, eggs, bread. Also, call mom by end of day."
Example Output:
[
  {"title": "Buy groceries", "notes": "milk, eggs, bread"},
  {"title": "Call mom", "notes": "by end of day"}
]"""

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def _find_json(text: str) -> Any:
    """Decode the first task payload embedded in model output.

    That is the first JSON array, or the first object carrying a "tasks" key.
    Other objects are skipped whole, including anything nested inside them.
    """
    fenced = _FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1)

    decoder = json.JSONDecoder()
    i = 0
    while i < len(text):
        if text[i] not in "[{":
            i += 1
            continue
        try:
            value, end = decoder.raw_decode(text, i)
        except json.JSONDecodeError:
            i += 1
            continue
        if isinstance(value, list) or (isinstance(value, dict) and "tasks" in value):
            return value
        i = end
    raise ValueError("no JSON array of tasks found in model output")


class LLMClient:
    """Turns free text into validated task records through an LLMProvider."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    def build_prompt(self, text: str) -> str:
        return f'{EXTRACTION_EXAMPLES}\n\nNow, extract tasks from this text:\n"{text}"'

    def complete(self, text: str) -> str:
        return self.provider.generate(
            system=EXTRACTION_SYSTEM_PROMPT, user=self.build_prompt(text)
        )

    def extract_tasks(self, text: str) -> list[ExtractedTask]:
        raw = self.complete(text)

        try:
            parsed = _find_json(raw)
            # tolerate {"tasks": [...]} as well as a bare array
            if isinstance(parsed, dict):
                result = TaskExtractionResult.model_validate(parsed)
            else:
                result = TaskExtractionResult(tasks=parsed)
        except (ValueError, ValidationError) as e:
            logger.error(f"Failed to parse AI output as task JSON: {e}")
            logger.debug(f"AI raw output for tasks: {raw}")
            raise MalformedResponse(
                f"AI returned unparseable or invalid JSON for tasks: {e}. "
                "Please refine your input or try again."
            ) from e

        return result.tasks
