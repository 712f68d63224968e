from __future__ import annotations
from abc import ABC, abstractmethod

class LLMProvider(ABC):
    @abstractmethod
    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        """
        Must return the model output as TEXT (we parse/validate JSON in LLMClient).
        Remote failures are raised as mindlyst.errors.ExtractionError subclasses.
        """
        raise NotImplementedError
