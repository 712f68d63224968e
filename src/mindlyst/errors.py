"""
Error taxonomy shared by the extraction and task-creation clients.

Every error carries a human-readable message that is forwarded to the user
as-is, a stable ``kind`` string and the HTTP status the API answers with.
"""

from typing import Optional


class MindlystError(Exception):
    kind = "unknown"
    http_status = 502

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ExtractionError(MindlystError):
    """Raised by the extraction flow; never touches the tracked tasks."""


class CreationError(MindlystError):
    """Raised by the task-creation client; scoped to one tracked task."""


class InputTooShort(ExtractionError):
    kind = "input_too_short"
    http_status = 422


class ServiceBusy(ExtractionError):
    kind = "service_busy"
    http_status = 503

    def __init__(self, message: str, retry_after_s: Optional[float] = None):
        super().__init__(message)
        self.retry_after_s = retry_after_s

    def to_dict(self) -> dict:
        out = super().to_dict()
        if self.retry_after_s is not None:
            out["retry_after_s"] = self.retry_after_s
        return out


class UnsupportedModel(ExtractionError):
    kind = "unsupported_model"


class NotFound(ExtractionError):
    kind = "not_found"


class MalformedResponse(ExtractionError):
    kind = "malformed_response"


class NotAuthenticated(CreationError):
    kind = "not_authenticated"
    http_status = 401


class UnknownError(ExtractionError, CreationError):
    kind = "unknown"
