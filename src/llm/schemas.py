from __future__ import annotations
from typing import Optional, List, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

class ExtractedTask(BaseModel):
    title: str = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes_are_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class TaskExtractionResult(BaseModel):
    tasks: List[ExtractedTask] = Field(default_factory=list)

class ChatMessage(BaseModel):
    content: str

class ChatChoice(BaseModel):
    message: ChatMessage

class ChatCompletionsResponse(BaseModel):
    choices: List[ChatChoice]

class ErrorDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str
    type: Optional[str] = None
    code: Optional[str] = None

class HFErrorResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    error: Union[str, ErrorDetail]
    estimated_time: Optional[float] = None

    def detail(self) -> str:
        if isinstance(self.error, str):
            return self.error
        return self.error.message

    def code(self) -> Optional[str]:
        if isinstance(self.error, str):
            return None
        return self.error.code
