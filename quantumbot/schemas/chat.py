from typing import Optional

from pydantic import BaseModel, field_validator


class ChatCompletionRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def message_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Message is required")
        return v.strip()


class CreateSessionRequest(BaseModel):
    title: Optional[str] = None
