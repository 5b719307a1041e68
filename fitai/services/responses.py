from __future__ import annotations

import re
from typing import Dict, List, Sequence, Tuple

SYSTEM_PROMPT = """
You are FitAI, an intelligent assistant for a personal training business. Be helpful, encouraging, and focus on qualifying leads for the trainer.

IMPORTANT FORMATTING RULES:
- Use **bold text** for key points and section headers
- Use line breaks to separate different sections
- Include relevant emojis to make the response engaging (💪, 🏋️, 🔥, ⚡, 🎯, 🥗, 📅, 💰, 👋)
- Keep responses concise but informative (3-5 sentences max)
- Always end by suggesting booking a free consultation

Key guidelines:
- Provide brief, helpful fitness advice with emojis
- Always suggest booking a free consultation with 📅 emoji
- Be professional but friendly and motivational
- Never give medical advice
- Focus on qualifying leads for the personal trainer
- If asked about topics not related to fitness politely redirect them back to fitness advice

Trainer specialties: weight loss, muscle building, functional training
Services: 1-on-1 training ($75/session), small groups ($35/session), online coaching
Free consultation: 15-minute strategy session

Example response format:
**Great question!** 💭

I recommend starting with 3-4 weekly workouts combining strength + cardio.

🏋️ **Key Focus:**
• Compound exercises
• Proper form
• Consistency

📅 **Next Step:**
Want to book a free consultation to create your personalized plan?
""".strip()

ALTERNATE_PROMPT = "As a fitness assistant, provide brief, engaging advice with emojis about: {message}"

CALL_TO_ACTION = "\n\n📅 **Ready to start?**\nBook a free consultation to create your personalized plan!"

# Insertion order matters: terms are decorated in this order.
EMOJI_MAP: Dict[str, str] = {
    "workout": "💪",
    "exercise": "🏋️",
    "nutrition": "🥗",
    "diet": "🍎",
    "weight loss": "🔥",
    "muscle": "💪",
    "strength": "🏋️",
    "beginner": "🎯",
    "consultation": "📅",
    "session": "⏱️",
    "price": "💰",
    "goal": "🎯",
    "help": "⚡",
    "plan": "📊",
}

# First match wins, in declaration order.
FALLBACK_RESPONSES: Tuple[Tuple[str, str], ...] = (
    (
        "workout",
        "💪 **Workout Plan Ready!** \n\nI recommend starting with 3-4 weekly sessions combining strength + cardio."
        "\n\n🏋️ **Sample Routine:**\n• Full body workouts\n• Progressive overload\n• Proper form focus"
        "\n\n📅 Want to book a free consultation for your personalized plan?",
    ),
    (
        "exercise",
        "⚡ **Exercise Guidance!** \n\nPerfect! For effective training:\n\n🎯 **Key Principles:**"
        "\n• Compound movements\n• Proper technique\n• Consistency over intensity"
        "\n\n🏋️ Our trainer can design a personalized program - interested in a free session?",
    ),
    (
        "lose weight",
        "🔥 **Weight Loss Strategy!** \n\nExcellent goal! Sustainable weight loss combines:"
        "\n\n🥗 Smart nutrition\n💪 Regular exercise\n📊 Consistent habits"
        "\n\n🎯 Most clients see results in 4-6 weeks! Want to schedule a free strategy session?",
    ),
    (
        "fat",
        "⚡ **Fat Loss Formula!** \n\nEffective fat reduction requires:"
        "\n\n💪 Strength training (metabolism boost)\n🏃 Cardio sessions\n🥗 Calorie management"
        "\n\n📅 Our trainer creates customized programs - interested in a consultation?",
    ),
    (
        "muscle",
        "💪 **Muscle Building Blueprint!** \n\nBuilding muscle requires:"
        "\n\n🏋️ Progressive overload\n🥗 Protein focus\n😴 Proper recovery"
        "\n\n🎯 Want to try a free introductory session with our strength specialists?",
    ),
    (
        "strength",
        "🏋️ **Strength Training Program!** \n\nStrength training builds:"
        "\n\n💪 Muscle mass\n⚡ Metabolism\n🛡️ Joint protection"
        "\n\n🔥 Interested in learning about our strength packages during a free consultation?",
    ),
    (
        "beginner",
        "🎯 **Welcome to Fitness!** \n\nStarting safely is crucial! Our beginner program includes:"
        "\n\n✅ Form instruction\n✅ Gradual progression\n✅ Confidence building"
        "\n\n😊 Want to schedule a free introductory session?",
    ),
    (
        "start",
        "🚀 **Perfect Time to Begin!** \n\nWe start with a comprehensive assessment:"
        "\n\n📊 Fitness evaluation\n🎯 Goal setting\n💪 Custom program design"
        "\n\n📅 Want to experience the difference with a free trial session?",
    ),
    (
        "price",
        "💰 **Investment in Your Health!** \n\nWe offer competitive pricing:"
        "\n\n💎 1-on-1: $75/session\n👥 Groups: $35/session\n📦 Packages: Save 15-20%"
        "\n\n🎯 Want to book a free consultation to discuss options?",
    ),
    (
        "cost",
        "📊 **Budget-Friendly Options!** \n\nOur packages fit various budgets:"
        "\n\n💎 Personal training\n👥 Small groups\n🌐 Online coaching"
        "\n\n🔥 Package deals offer the best value. Free consultation available!",
    ),
    (
        "nutrition",
        "🥗 **Nutrition Accelerator!** \n\nNutrition enhances results by:"
        "\n\n⚡ Boosting energy\n💪 Supporting recovery\n🔥 Enhancing fat loss"
        "\n\n🍎 Want to discuss nutrition in a free consultation?",
    ),
    (
        "diet",
        "🍎 **Fuel for Results!** \n\nProper nutrition accelerates fitness results!"
        "\n\n🥗 Meal timing\n💪 Protein optimization\n🎯 Nutrient density"
        "\n\n📊 Free consultation includes nutrition guidance!",
    ),
)

DEFAULT_RESPONSE = (
    "💭 **Great Question!** \n\nOur certified trainer would love to provide personalized advice!"
    "\n\n🎯 **Free consultation includes:**\n• Goal assessment\n• Custom plan outline\n• Pricing options"
    "\n\n📅 Would you like to book a session?"
)


def fallback_response(user_message: str) -> str:
    lowered = (user_message or "").lower()
    for keyword, response in FALLBACK_RESPONSES:
        if keyword in lowered:
            return response
    return DEFAULT_RESPONSE


def fallback_keyword(user_message: str) -> str | None:
    lowered = (user_message or "").lower()
    for keyword, _ in FALLBACK_RESPONSES:
        if keyword in lowered:
            return keyword
    return None


def build_prompt(user_message: str, history: Sequence[Dict[str, str]], window: int = 3) -> str:
    recent: List[Dict[str, str]] = list(history)[-window:] if window > 0 else []
    history_block = "\n".join(
        f"{message.get('role', 'user')}: {message.get('content', '')}" for message in recent
    )
    return (
        f"{SYSTEM_PROMPT}\n\n"
        f"Previous conversation: {history_block}\n\n"
        f"User: {user_message}\n\n"
        "Assistant:"
    )


def format_ai_response(response: str) -> str:
    formatted = response.replace("```", "").strip()

    for term, emoji in EMOJI_MAP.items():
        if term in formatted.lower() and emoji not in formatted:
            formatted = re.sub(
                rf"\b({re.escape(term)})\b",
                lambda match: f"{emoji} {match.group(1)}",
                formatted,
                flags=re.IGNORECASE,
            )

    if "consultation" not in formatted and "📅" not in formatted:
        formatted += CALL_TO_ACTION
    return formatted
