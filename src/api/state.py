from typing import Dict, Optional

from extraction.task_extractor import TaskExtractor
from storage.google_auth import GoogleAuthStore
from storage.task_store import DailyTaskStore
from submission.batch_coordinator import BatchSubmissionCoordinator

# One in-memory batch per user; nothing here survives a restart
batches: Dict[str, BatchSubmissionCoordinator] = {}

# Global instances initialized at startup (None when no database is configured)
google_auth_store: Optional[GoogleAuthStore] = None
daily_task_store: Optional[DailyTaskStore] = None

# Built lazily on the first extraction request
task_extractor: Optional[TaskExtractor] = None
