import os
from typing import Optional

from fastapi import Depends, HTTPException
from google.oauth2.credentials import Credentials

from api import state
from extraction.task_extractor import TaskExtractor
from integration.google_tasks import GoogleTasksClient
from llm.llm_client import LLMClient
from llm.providers.base import LLMProvider
from llm.providers.huggingface_provider import HuggingFaceProvider
from llm.providers.mock_provider import MockProvider
from storage.google_auth import GoogleAuthStore
from storage.task_store import DailyTaskStore
from submission.batch_coordinator import BatchSubmissionCoordinator, TaskCreator

# Configuration
DEFAULT_USER_ID = os.getenv("MINDLYST_USER_ID", "default")
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "huggingface").strip().lower()


def get_user_id() -> str:
    return DEFAULT_USER_ID


def get_google_auth_store() -> Optional[GoogleAuthStore]:
    return state.google_auth_store


def get_daily_task_store() -> DailyTaskStore:
    if state.daily_task_store is None:
        raise HTTPException(status_code=503, detail="Task store not initialized")
    return state.daily_task_store


def build_provider(name: str = LLM_PROVIDER) -> LLMProvider:
    if name == "mock":
        return MockProvider()
    if name == "huggingface":
        return HuggingFaceProvider()
    raise ValueError(f"Unknown LLM_PROVIDER: {name}")


def get_task_extractor() -> TaskExtractor:
    if state.task_extractor is None:
        try:
            provider = build_provider()
        except (RuntimeError, ValueError) as e:
            raise HTTPException(status_code=500, detail=f"Task extraction not configured: {e}")
        state.task_extractor = TaskExtractor(LLMClient(provider))
    return state.task_extractor


def get_task_creator(user_id: str = Depends(get_user_id)) -> TaskCreator:
    async def load_credentials() -> Optional[Credentials]:
        store = state.google_auth_store
        if store is None:
            return None
        return await store.get_credentials(user_id)

    return GoogleTasksClient(load_credentials)


def get_coordinator(
    user_id: str = Depends(get_user_id),
    creator: TaskCreator = Depends(get_task_creator),
) -> BatchSubmissionCoordinator:
    coordinator = state.batches.get(user_id)
    if coordinator is None:
        coordinator = BatchSubmissionCoordinator(creator)
        state.batches[user_id] = coordinator
    return coordinator
