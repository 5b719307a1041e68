from __future__ import annotations

import random
from typing import Mapping, Optional, Tuple

POSITIVE_TOKENS: Tuple[str, ...] = (
    "yes",
    "sure",
    "ready",
    "book",
    "schedule",
    "consult",
    "lets go",
    "let's go",
    "ok",
    "okay",
    "yeah",
    "yep",
    "yup",
    "absolutely",
    "definitely",
)

ENCOURAGEMENT_NUDGES: Tuple[str, ...] = (
    "I'm really excited to work with you! Have you had a chance to check the booking link? "
    "Spots are filling up fast this week! 🚀",
    "Just a friendly reminder - the consultation is completely free and we can get started right away. "
    "Did the booking link work for you?",
    "I noticed you're still here! If you're having any trouble with the booking link or have questions, "
    "let me know. Otherwise, I'd grab a spot soon! ⏰",
    "The best time to start your fitness journey is now! Have you picked a consultation time yet? "
    "I'm excited to help you achieve your goals! 💪",
    "Don't wait too long to book - motivation is highest right after making the decision! "
    "Need help with the booking process?",
    "I'm here if you have any questions about the consultation! Otherwise, I'd recommend booking soon "
    "to secure your preferred time. 📅",
)


def is_positive_response(text: str) -> bool:
    lowered = (text or "").lower()
    return any(token in lowered for token in POSITIVE_TOKENS)


def pick_nudge(rng: Optional[random.Random] = None) -> str:
    """Uniformly pick an encouragement nudge; pass a seeded Random for repeatable picks."""
    chooser = rng or random
    return chooser.choice(ENCOURAGEMENT_NUDGES)


class BookingService:
    """Builds the scheduling hand-off messages for qualified leads."""

    def __init__(self, scheduling_url: str) -> None:
        if not scheduling_url:
            raise ValueError("A scheduling URL must be configured")
        self._scheduling_url = scheduling_url

    @property
    def scheduling_url(self) -> str:
        return self._scheduling_url

    def confirmation_message(self) -> str:
        return (
            "✅ **Perfect! Let's get you scheduled!**\n\n"
            "Here's my Calendly link to book your free consultation:\n\n"
            f"📅 **Book Your Session:** {self._scheduling_url}\n\n"
            "I recommend booking soon as spots fill up quickly! Once you've picked a time, "
            "you'll get a confirmation email with all the details.\n\n"
            "**Pro tip:** Book now while you're motivated! "
            "I'm excited to help you achieve your fitness goals! 🏋️‍♂️"
        )

    def button_message(self, lead_record: Mapping[str, str]) -> str:
        return (
            "✅ **Let's get you scheduled!**\n\n"
            "Here's my Calendly link to book your free consultation:\n\n"
            f"📅 **Book Your Session:** {self._scheduling_url}\n\n"
            "I recommend booking soon as spots fill up quickly! I'm excited to help you achieve:\n"
            f"• {lead_record.get('goal', '')}\n"
            f"• {lead_record.get('experience', '')} level training\n"
            f"• {lead_record.get('frequency', '')}\n\n"
            "**Don't wait** - the best time to start is now! 🏋️‍♂️"
        )
