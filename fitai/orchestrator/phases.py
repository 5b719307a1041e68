from __future__ import annotations

from enum import Enum


class ConversationPhase(str, Enum):
    GREETING = "GREETING"
    QUALIFYING = "QUALIFYING"
    AWAITING_BOOKING_CONFIRMATION = "AWAITING_BOOKING_CONFIRMATION"
    COMPLETE = "COMPLETE"

    @classmethod
    def from_label(cls, label: str) -> "ConversationPhase":
        try:
            return cls(label)
        except ValueError as exc:
            raise ValueError(f"Unsupported conversation phase: {label}") from exc


class InvalidTransitionError(Exception):
    """Raised when an action is not allowed in the session's current phase."""

    def __init__(self, phase: ConversationPhase, action: str) -> None:
        super().__init__(f"Cannot {action} while the conversation is in phase {phase.value}")
        self.phase = phase
        self.action = action
