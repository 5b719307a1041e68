from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

try:
    from google import genai  # type: ignore[attr-defined]
except ImportError:  # pragma: no cover - optional dependency guard
    genai = None  # type: ignore


class GenerationErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    AUTH = "auth"
    UNAVAILABLE = "unavailable"
    EMPTY = "empty"


class GenerationError(RuntimeError):
    """Failure reported by the text-generation service, tagged with a kind."""

    def __init__(self, kind: GenerationErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


class TextGenerationClient(Protocol):
    def generate(self, model: str, prompt: str) -> str:  # pragma: no cover - interface
        ...


def classify_error(error: Exception) -> GenerationErrorKind:
    """Map a client library exception onto a GenerationErrorKind."""
    code = getattr(error, "code", None) or getattr(error, "status_code", None)
    message = str(error).lower()
    if code == 404 or "404" in message or "not found" in message:
        return GenerationErrorKind.NOT_FOUND
    if code in (401, 403) or "api key" in message or "permission" in message:
        return GenerationErrorKind.AUTH
    return GenerationErrorKind.UNAVAILABLE


class GeminiClient:
    """Wraps the Gemini content generation API."""

    def __init__(self, api_key: str, client: Any = None) -> None:
        if client is None:
            if genai is None:
                raise RuntimeError("google-genai package is required for response generation")
            if not api_key:
                raise RuntimeError("Gemini API key is required for response generation")
            client = genai.Client(api_key=api_key)
        self._client = client

    def generate(self, model: str, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(model=model, contents=prompt)
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(classify_error(exc), str(exc)) from exc
        return self._extract_text(response)

    def _extract_text(self, response) -> str:
        text = getattr(response, "text", None)
        if text:
            return text
        candidates = getattr(response, "candidates", None) or []
        for candidate in candidates:
            content = getattr(candidate, "content", None)
            parts = (getattr(content, "parts", None) or []) if content else []
            for part in parts:
                value = getattr(part, "text", None)
                if value:
                    return value
        raise GenerationError(GenerationErrorKind.EMPTY, "Gemini did not return text")
