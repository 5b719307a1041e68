from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from fitai.adapters.gemini_client import GenerationError, GenerationErrorKind, TextGenerationClient
from fitai.services.responses import (
    ALTERNATE_PROMPT,
    build_prompt,
    fallback_keyword,
    fallback_response,
    format_ai_response,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEYS = frozenset({"", "your_actual_key_here"})


class ResponseGenerator:
    """Answers free-form fitness questions.

    Delegates to the text-generation service when one is configured. A
    "model not found" failure walks the alternate models in order; every
    other failure, or exhausting the alternates, falls back to the
    keyword-matched response table. Callers always get a non-empty message.
    """

    def __init__(
        self,
        client: Optional[TextGenerationClient],
        model: str = "gemini-2.5-flash",
        alternate_models: Sequence[str] = (),
        history_window: int = 3,
    ) -> None:
        self._client = client
        self._model = model
        self._alternate_models = tuple(alternate_models)
        self._history_window = history_window

    def generate(self, user_message: str, history: Sequence[Dict[str, str]] = ()) -> str:
        if self._client is None:
            return self._fallback(user_message, reason="no_client")

        prompt = build_prompt(user_message, history, window=self._history_window)
        try:
            text = self._client.generate(self._model, prompt)
            if not text or not text.strip():
                raise GenerationError(GenerationErrorKind.EMPTY)
            return format_ai_response(text)
        except GenerationError as exc:
            logger.warning("Primary model %s failed (%s)", self._model, exc.kind.value)
            if exc.kind is GenerationErrorKind.NOT_FOUND:
                return self._try_alternates(user_message)
            return self._fallback(user_message, reason=exc.kind.value)
        except Exception:
            logger.exception("Unexpected error from text-generation client")
            return self._fallback(user_message, reason="unexpected")

    def _try_alternates(self, user_message: str) -> str:
        prompt = ALTERNATE_PROMPT.format(message=user_message)
        for model_name in self._alternate_models:
            try:
                text = self._client.generate(model_name, prompt)
            except GenerationError as exc:
                logger.info("Alternate model %s failed (%s)", model_name, exc.kind.value)
                continue
            except Exception:
                logger.exception("Unexpected error from alternate model %s", model_name)
                continue
            if text and text.strip():
                logger.info("Alternate model %s succeeded", model_name)
                return format_ai_response(text)
        return self._fallback(user_message, reason="alternates_exhausted")

    def _fallback(self, user_message: str, reason: str) -> str:
        logger.warning(
            "Using fallback response (reason=%s, keyword=%s)",
            reason,
            fallback_keyword(user_message) or "default",
        )
        return fallback_response(user_message)
