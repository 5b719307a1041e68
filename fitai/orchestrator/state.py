from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fitai.orchestrator.phases import ConversationPhase


@dataclass
class SessionState:
    session_id: str = ""
    phase: ConversationPhase = ConversationPhase.GREETING
    current_step_index: int = 0
    lead_record: Dict[str, str] = field(default_factory=dict)
    transcript: List[Dict[str, str]] = field(default_factory=list)
    ready_for_booking: bool = False
    has_sent_scheduling_link: bool = False
    user_message: str = ""
    open_url: Optional[str] = None

    def copy(self) -> "SessionState":
        return SessionState(
            session_id=self.session_id,
            phase=self.phase,
            current_step_index=self.current_step_index,
            lead_record=dict(self.lead_record),
            transcript=list(self.transcript),
            ready_for_booking=self.ready_for_booking,
            has_sent_scheduling_link=self.has_sent_scheduling_link,
            user_message=self.user_message,
            open_url=self.open_url,
        )

    @property
    def last_reply(self) -> str:
        for message in reversed(self.transcript):
            if message.get("role") == "assistant":
                return message.get("content", "")
        return ""
