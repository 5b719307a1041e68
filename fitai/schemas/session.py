from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from fitai.schemas.chat import ChatMessage


class SessionMessageRequest(BaseModel):
    message: str = Field(default="")


class SessionView(BaseModel):
    session_id: str
    phase: str
    current_step_index: int
    messages: List[ChatMessage] = Field(default_factory=list)
    quick_replies: List[str] = Field(default_factory=list)
    lead: Dict[str, str] = Field(default_factory=dict)
    ready_for_booking: bool = False
    has_sent_scheduling_link: bool = False
    open_url: Optional[str] = None
