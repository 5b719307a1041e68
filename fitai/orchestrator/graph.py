from __future__ import annotations

import logging
import random
import uuid
from dataclasses import asdict, fields
from datetime import UTC, datetime
from typing import Any, Dict, Optional, Tuple

from langgraph.graph import END, StateGraph

from fitai.orchestrator.phases import ConversationPhase, InvalidTransitionError
from fitai.orchestrator.state import SessionState
from fitai.services.booking import BookingService, is_positive_response, pick_nudge
from fitai.services.generator import ResponseGenerator
from fitai.services.qualification import QualificationSequencer

logger = logging.getLogger(__name__)

GREETING_MESSAGE = (
    "👋 **Welcome to FitAI!** \n\n"
    "I'm here to help you achieve your fitness goals!\n\n"
    "What would you like to accomplish with your fitness journey?"
)

_STATE_FIELDS = tuple(item.name for item in fields(SessionState))


def make_message(role: str, content: str) -> Dict[str, str]:
    return {"role": role, "content": content, "timestamp": datetime.now(UTC).isoformat()}


class ChatOrchestrator:
    """LangGraph state machine driving one chat session turn at a time.

    Phases run GREETING -> QUALIFYING -> AWAITING_BOOKING_CONFIRMATION ->
    COMPLETE. Every turn appends the user message, then exactly one
    assistant message.
    """

    def __init__(
        self,
        sequencer: QualificationSequencer,
        booking_service: BookingService,
        response_generator: ResponseGenerator,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._sequencer = sequencer
        self._booking = booking_service
        self._generator = response_generator
        self._rng = rng or random.Random()
        self._graph = self._build_graph().compile()

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(SessionState)

        graph.add_node("intake", self._intake_node)
        graph.add_node("qualify", self._qualify_node)
        graph.add_node("book", self._book_node)
        graph.add_node("respond", self._respond_node)
        graph.add_node("nudge", self._nudge_node)

        graph.set_entry_point("intake")
        graph.add_conditional_edges(
            "intake",
            self._route,
            {
                "qualify": "qualify",
                "book": "book",
                "respond": "respond",
                "nudge": "nudge",
            },
        )
        for node in ("qualify", "book", "respond", "nudge"):
            graph.add_edge(node, END)

        return graph

    def new_session(self, session_id: Optional[str] = None) -> SessionState:
        return SessionState(
            session_id=session_id or uuid.uuid4().hex,
            phase=ConversationPhase.GREETING,
            transcript=[make_message("assistant", GREETING_MESSAGE)],
        )

    def quick_replies(self, state: SessionState) -> Tuple[str, ...]:
        if state.phase in (ConversationPhase.GREETING, ConversationPhase.QUALIFYING):
            return self._sequencer.options_for(state.current_step_index)
        return ()

    def run(self, state: SessionState, user_message: str) -> SessionState:
        payload = asdict(state)
        payload["user_message"] = user_message
        payload["open_url"] = None
        result = self._graph.invoke(payload)
        final_state = self._as_state(result)
        logger.info(
            "Turn handled: phase=%s step=%d",
            final_state.phase.value,
            final_state.current_step_index,
        )
        return final_state

    def book(self, state: SessionState) -> SessionState:
        """Explicit "Book Consult" action, only valid while awaiting booking confirmation."""
        if state.phase is not ConversationPhase.AWAITING_BOOKING_CONFIRMATION:
            raise InvalidTransitionError(state.phase, "book a consultation")
        updated = state.copy()
        updated.transcript.append(
            make_message("assistant", self._booking.button_message(updated.lead_record))
        )
        updated.has_sent_scheduling_link = True
        updated.phase = ConversationPhase.COMPLETE
        updated.open_url = self._booking.scheduling_url
        updated.user_message = ""
        logger.info("Scheduling link sent via booking action")
        return updated

    def _route(self, state: Any) -> str:
        current = self._as_state(state)
        if current.phase is ConversationPhase.COMPLETE:
            return "nudge"
        if current.phase is ConversationPhase.AWAITING_BOOKING_CONFIRMATION:
            if is_positive_response(current.user_message):
                return "book"
            return "respond"
        return "qualify"

    def _intake_node(self, state: Any) -> Dict[str, Any]:
        current = self._as_state(state)
        transcript = [*current.transcript, make_message("user", current.user_message)]
        return {"transcript": transcript}

    def _qualify_node(self, state: Any) -> Dict[str, Any]:
        current = self._as_state(state)
        result = self._sequencer.advance(
            current.current_step_index,
            current.user_message,
            current.lead_record,
        )
        if result.is_complete:
            return {
                "lead_record": result.lead_record,
                "current_step_index": result.next_step_index,
                "phase": ConversationPhase.AWAITING_BOOKING_CONFIRMATION,
                "ready_for_booking": True,
                "transcript": [*current.transcript, make_message("assistant", result.summary)],
            }
        return {
            "lead_record": result.lead_record,
            "current_step_index": result.next_step_index,
            "phase": ConversationPhase.QUALIFYING,
            "transcript": [*current.transcript, make_message("assistant", result.next_prompt)],
        }

    def _book_node(self, state: Any) -> Dict[str, Any]:
        current = self._as_state(state)
        logger.info("Affirmative reply received, sending scheduling link")
        return {
            "phase": ConversationPhase.COMPLETE,
            "has_sent_scheduling_link": True,
            "open_url": self._booking.scheduling_url,
            "transcript": [
                *current.transcript,
                make_message("assistant", self._booking.confirmation_message()),
            ],
        }

    def _respond_node(self, state: Any) -> Dict[str, Any]:
        current = self._as_state(state)
        history = current.transcript[:-1]
        reply = self._generator.generate(current.user_message, history)
        return {"transcript": [*current.transcript, make_message("assistant", reply)]}

    def _nudge_node(self, state: Any) -> Dict[str, Any]:
        current = self._as_state(state)
        return {"transcript": [*current.transcript, make_message("assistant", pick_nudge(self._rng))]}

    @staticmethod
    def _as_state(value: Any) -> SessionState:
        if isinstance(value, SessionState):
            return value
        if isinstance(value, dict):
            data = {key: value[key] for key in _STATE_FIELDS if key in value}
            phase = data.get("phase", ConversationPhase.GREETING)
            if not isinstance(phase, ConversationPhase):
                data["phase"] = ConversationPhase.from_label(phase)
            data["lead_record"] = dict(data.get("lead_record") or {})
            data["transcript"] = list(data.get("transcript") or [])
            return SessionState(**data)
        raise TypeError(f"Unsupported state result from graph: {type(value)!r}")
