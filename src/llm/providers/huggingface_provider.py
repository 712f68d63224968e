from __future__ import annotations
import logging
import os
import httpx
from pydantic import ValidationError

from llm.schemas import ChatCompletionsResponse, HFErrorResponse
from mindlyst.errors import (
    MalformedResponse,
    NotFound,
    ServiceBusy,
    UnknownError,
    UnsupportedModel,
)
from .base import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://router.huggingface.co/v1/chat/completions"
DEFAULT_MODEL = "mistralai/Mistral-7B-Instruct-v0.3"


def _error_detail(response: httpx.Response) -> tuple[str, float | None, str | None]:
    """Best-effort detail, wait hint and error code from a failed inference response."""
    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        return response.text, None, None

    try:
        body = HFErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.warning(f"Unexpected error body from Hugging Face: {e}")
        return response.text, None, None

    detail = body.detail()
    if body.estimated_time is not None:
        detail += f" (Estimated wait: {body.estimated_time:.1f}s)"
    return detail, body.estimated_time, body.code()


class HuggingFaceProvider(LLMProvider):
    def __init__(self, client: httpx.Client | None = None):
        self.api_key = os.getenv("HF_ACCESS_TOKEN", "").strip()
        self.model = os.getenv("HF_TASK_EXTRACTION_MODEL", DEFAULT_MODEL).strip()
        self.url = os.getenv("HF_API_URL", DEFAULT_API_URL).strip()
        self.timeout_s = float(os.getenv("HF_TIMEOUT_S", "60"))
        self._client = client

        if not self.api_key:
            raise RuntimeError("HF_ACCESS_TOKEN is missing")

    def _post(self, payload: dict) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self._client is not None:
            return self._client.post(self.url, headers=headers, json=payload)
        with httpx.Client(timeout=self.timeout_s) as client:
            return client.post(self.url, headers=headers, json=payload)

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return

        detail, estimated_time, code = _error_detail(response)
        logger.error(f"Hugging Face extraction error {response.status_code}: {detail}")

        if response.status_code == 503:
            raise ServiceBusy(
                f"Hugging Face model is loading or busy for task extraction: {detail}. "
                "Please try again in a few moments.",
                retry_after_s=estimated_time,
            )
        if response.status_code == 400 and (
            code == "model_not_supported" or "model_not_supported" in detail
        ):
            raise UnsupportedModel(
                f"Task extraction model '{self.model}' is not supported by your "
                "enabled providers/plan for this endpoint. Please verify the model "
                "string and access."
            )
        if response.status_code == 404:
            raise NotFound(
                f"Task extraction model '{self.model}' might be incorrect, private, "
                "or not available on the inference API."
            )
        raise UnknownError(
            f"Hugging Face task extraction error ({response.status_code}): {detail}"
        )

    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        payload = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "max_tokens": 500,
            "temperature": 0.0,
        }

        try:
            r = self._post(payload)
        except httpx.HTTPError as e:
            raise UnknownError(f"Could not reach Hugging Face: {e}") from e

        self._raise_for_status(r)

        try:
            data = ChatCompletionsResponse.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            raise MalformedResponse(
                f"Hugging Face returned an unexpected response shape: {e}"
            ) from e

        if not data.choices or not data.choices[0].message.content:
            raise MalformedResponse("No text generated from Hugging Face for task extraction.")

        return data.choices[0].message.content
