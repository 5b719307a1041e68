from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class QualificationStep:
    key: str
    question: str
    options: Optional[Tuple[str, ...]] = None


QUALIFICATION_STEPS: Tuple[QualificationStep, ...] = (
    QualificationStep(
        key="goal",
        question="What's your main fitness goal?",
        options=(
            "💪 Strength Training",
            "🏋️ Muscle Building",
            "🔥 Weight Loss",
            "🎯 General Fitness",
            "⚡ Sports Performance",
            "🔄 Toning",
        ),
    ),
    QualificationStep(
        key="experience",
        question="What's your current experience level?",
        options=(
            "🚀 Beginner (0-6 months)",
            "📈 Intermediate (6 months - 2 years)",
            "🏆 Advanced (2+ years)",
        ),
    ),
    QualificationStep(
        key="frequency",
        question="How many days per week can you train?",
        options=("2-3 days per week", "4-5 days per week"),
    ),
    QualificationStep(
        key="timeline",
        question="When would you like to get started?",
        options=(
            "💨 ASAP - Ready to start now",
            "📅 Within 2 weeks",
            "🗓️ Within a month",
        ),
    ),
    QualificationStep(key="name", question="Great! What's your name?"),
    QualificationStep(key="email", question="Perfect! What's the best email to reach you?"),
)

SUMMARY_TEMPLATE = (
    "**Perfect! Here's your fitness profile:**\n"
    "\n"
    "🎯 **Goal:** {goal}\n"
    "💪 **Experience:** {experience}\n"
    "📅 **Availability:** {frequency}\n"
    "🚀 **Timeline:** {timeline}\n"
    "👤 **Name:** {name}\n"
    "📧 **Email:** {email}\n"
    "\n"
    "Based on your goals, you're a great fit for our program! "
    "**Ready to book your free consultation?**"
)

SUMMARY_FIELDS = ("goal", "experience", "frequency", "timeline", "name", "email")


@dataclass
class AdvanceResult:
    next_step_index: int
    lead_record: Dict[str, str]
    is_complete: bool = False
    next_prompt: Optional[str] = None
    next_options: Tuple[str, ...] = ()
    summary: Optional[str] = None


class QualificationSequencer:
    """Walks a visitor through the fixed qualification questions, one answer at a time.

    Answers are stored verbatim. Name and email are free text and are not
    validated.
    """

    def __init__(self, steps: Sequence[QualificationStep] = QUALIFICATION_STEPS) -> None:
        if not steps:
            raise ValueError("At least one qualification step is required")
        self._steps = tuple(steps)

    def step(self, index: int) -> QualificationStep:
        if not 0 <= index < len(self._steps):
            raise ValueError(f"No qualification step at index {index}")
        return self._steps[index]

    def options_for(self, index: int) -> Tuple[str, ...]:
        if not 0 <= index < len(self._steps):
            return ()
        return self._steps[index].options or ()

    def advance(
        self,
        current_step_index: int,
        user_answer: str,
        lead_record: Optional[Mapping[str, str]] = None,
    ) -> AdvanceResult:
        step = self.step(current_step_index)
        record = dict(lead_record or {})
        record[step.key] = user_answer

        next_index = current_step_index + 1
        if next_index < len(self._steps):
            upcoming = self._steps[next_index]
            return AdvanceResult(
                next_step_index=next_index,
                lead_record=record,
                next_prompt=upcoming.question,
                next_options=upcoming.options or (),
            )

        return AdvanceResult(
            next_step_index=next_index,
            lead_record=record,
            is_complete=True,
            summary=self.build_summary(record),
        )

    def build_summary(self, lead_record: Mapping[str, str]) -> str:
        fields = {key: lead_record.get(key, "") for key in SUMMARY_FIELDS}
        return SUMMARY_TEMPLATE.format(**fields)
