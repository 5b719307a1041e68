from __future__ import annotations

from datetime import UTC, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"] = Field(..., description="Who sent the message")
    content: str = Field(..., description="Plain text content")
    timestamp: Optional[str] = Field(default=None, description="ISO-8601 creation time")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(default="")
    conversation_history: List[ChatMessage] = Field(
        default_factory=list,
        alias="conversationHistory",
    )


class ChatResponse(BaseModel):
    response: str
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())


class ErrorResponse(BaseModel):
    error: str
    fallback: Optional[str] = None
