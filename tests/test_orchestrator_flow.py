from __future__ import annotations

import random

import pytest

from fitai.orchestrator.graph import GREETING_MESSAGE, ChatOrchestrator
from fitai.orchestrator.phases import ConversationPhase, InvalidTransitionError
from fitai.services.booking import ENCOURAGEMENT_NUDGES, BookingService
from fitai.services.qualification import QUALIFICATION_STEPS, QualificationSequencer

SCHEDULING_URL = "https://calendly.com/test-coach/fitai-consultation"
ANSWERS = ["I want to lose weight", "Beginner", "3 days per week", "ASAP", "Jane", "jane@example.com"]


class RecordingGenerator:
    def __init__(self, reply: str = "Here is some free-form advice.") -> None:
        self.reply = reply
        self.calls = []

    def generate(self, user_message, history=()):
        self.calls.append({"message": user_message, "history": list(history)})
        return self.reply


class CountingSequencer(QualificationSequencer):
    def __init__(self) -> None:
        super().__init__()
        self.advance_calls = 0

    def advance(self, current_step_index, user_answer, lead_record=None):
        self.advance_calls += 1
        return super().advance(current_step_index, user_answer, lead_record)


def _build(seed: int = 3):
    generator = RecordingGenerator()
    sequencer = CountingSequencer()
    orchestrator = ChatOrchestrator(
        sequencer=sequencer,
        booking_service=BookingService(SCHEDULING_URL),
        response_generator=generator,
        rng=random.Random(seed),
    )
    return orchestrator, sequencer, generator


def _qualify(orchestrator):
    state = orchestrator.new_session("session-1")
    for answer in ANSWERS:
        state = orchestrator.run(state, answer)
    return state


def test_new_session_starts_with_greeting_and_goal_options():
    orchestrator, _, _ = _build()

    state = orchestrator.new_session()

    assert state.session_id
    assert state.phase is ConversationPhase.GREETING
    assert [message["content"] for message in state.transcript] == [GREETING_MESSAGE]
    assert orchestrator.quick_replies(state) == QUALIFICATION_STEPS[0].options


def test_first_reply_moves_to_qualifying_and_asks_experience():
    orchestrator, _, generator = _build()

    state = orchestrator.run(orchestrator.new_session(), "🔥 Weight Loss")

    assert state.phase is ConversationPhase.QUALIFYING
    assert state.current_step_index == 1
    assert state.lead_record == {"goal": "🔥 Weight Loss"}
    assert [message["role"] for message in state.transcript] == ["assistant", "user", "assistant"]
    assert state.transcript[-1]["content"] == QUALIFICATION_STEPS[1].question
    assert orchestrator.quick_replies(state) == QUALIFICATION_STEPS[1].options
    assert generator.calls == []


def test_step_index_moves_one_step_per_answer():
    orchestrator, _, _ = _build()
    state = orchestrator.new_session()
    indices = []

    for answer in ANSWERS:
        state = orchestrator.run(state, answer)
        indices.append(state.current_step_index)

    assert indices == [1, 2, 3, 4, 5, 6]


def test_end_to_end_qualification_then_booking():
    orchestrator, _, generator = _build()

    state = _qualify(orchestrator)

    assert state.phase is ConversationPhase.AWAITING_BOOKING_CONFIRMATION
    assert state.ready_for_booking is True
    assert state.has_sent_scheduling_link is False
    assert "Jane" in state.last_reply
    assert "jane@example.com" in state.last_reply
    assert state.lead_record == dict(zip([step.key for step in QUALIFICATION_STEPS], ANSWERS))
    assert orchestrator.quick_replies(state) == ()

    state = orchestrator.run(state, "yes")

    assert state.phase is ConversationPhase.COMPLETE
    assert state.has_sent_scheduling_link is True
    assert SCHEDULING_URL in state.last_reply
    assert state.open_url == SCHEDULING_URL
    assert generator.calls == []
    assert len(state.transcript) == 1 + 2 * (len(ANSWERS) + 1)


def test_non_affirmative_reply_while_awaiting_uses_response_generator():
    orchestrator, sequencer, generator = _build()
    state = _qualify(orchestrator)

    state = orchestrator.run(state, "how much is a session?")

    assert state.phase is ConversationPhase.AWAITING_BOOKING_CONFIRMATION
    assert state.last_reply == generator.reply
    assert generator.calls[0]["message"] == "how much is a session?"
    assert generator.calls[0]["history"][-1]["content"] != "how much is a session?"
    assert sequencer.advance_calls == len(ANSWERS)
    assert state.lead_record["email"] == "jane@example.com"


def test_completed_conversation_only_nudges():
    orchestrator, sequencer, generator = _build()
    state = orchestrator.run(_qualify(orchestrator), "sure")
    advance_calls = sequencer.advance_calls

    for text in ["what now?", "yes", "tell me about nutrition"]:
        state = orchestrator.run(state, text)
        assert state.last_reply in ENCOURAGEMENT_NUDGES
        assert state.phase is ConversationPhase.COMPLETE
        assert state.open_url is None

    assert generator.calls == []
    assert sequencer.advance_calls == advance_calls


def test_nudges_are_deterministic_for_a_seed():
    replies = []
    for _ in range(2):
        orchestrator, _, _ = _build(seed=11)
        state = orchestrator.run(_qualify(orchestrator), "ok")
        picked = []
        for _ in range(4):
            state = orchestrator.run(state, "still here")
            picked.append(state.last_reply)
        replies.append(picked)

    assert replies[0] == replies[1]


def test_book_action_sends_link_with_lead_recap():
    orchestrator, _, _ = _build()
    state = _qualify(orchestrator)

    booked = orchestrator.book(state)

    assert booked.phase is ConversationPhase.COMPLETE
    assert booked.has_sent_scheduling_link is True
    assert booked.open_url == SCHEDULING_URL
    assert SCHEDULING_URL in booked.last_reply
    assert "I want to lose weight" in booked.last_reply
    assert state.phase is ConversationPhase.AWAITING_BOOKING_CONFIRMATION


@pytest.mark.parametrize("answers", [[], ANSWERS[:3]])
def test_book_action_rejected_before_qualification(answers):
    orchestrator, _, _ = _build()
    state = orchestrator.new_session()
    for answer in answers:
        state = orchestrator.run(state, answer)

    with pytest.raises(InvalidTransitionError):
        orchestrator.book(state)


def test_book_action_rejected_after_link_sent():
    orchestrator, _, _ = _build()
    state = orchestrator.run(_qualify(orchestrator), "yes")

    with pytest.raises(InvalidTransitionError):
        orchestrator.book(state)


def test_messages_are_never_rewritten():
    orchestrator, _, _ = _build()
    state = orchestrator.new_session()
    state = orchestrator.run(state, ANSWERS[0])
    snapshot = [dict(message) for message in state.transcript]

    state = orchestrator.run(state, ANSWERS[1])

    assert state.transcript[: len(snapshot)] == snapshot
