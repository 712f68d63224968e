from __future__ import annotations
import json
from llm.providers.base import LLMProvider

class MockProvider(LLMProvider):
    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        """
        Returns a canned extraction for local development without a model token.
        """
        return json.dumps([
            {"title": "Finish the quarterly report", "notes": "send it to Sarah"},
            {"title": "Call mom", "notes": "ask about Sunday dinner"},
            {"title": "Pay the bills online", "notes": "by the end of the week"},
        ])
