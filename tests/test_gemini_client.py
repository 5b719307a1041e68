from __future__ import annotations

from types import SimpleNamespace

import pytest

from fitai.adapters.gemini_client import (
    GeminiClient,
    GenerationError,
    GenerationErrorKind,
    classify_error,
)


class APIFailure(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"{code} {message}")
        self.code = code


class FakeModels:
    def __init__(self, outcome) -> None:
        self.outcome = outcome
        self.requests = []

    def generate_content(self, model, contents):
        self.requests.append({"model": model, "contents": contents})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _client(outcome):
    models = FakeModels(outcome)
    return GeminiClient(api_key="", client=SimpleNamespace(models=models)), models


def test_returns_response_text():
    client, models = _client(SimpleNamespace(text="Lift heavy, rest well."))

    assert client.generate("gemini-2.5-flash", "prompt") == "Lift heavy, rest well."
    assert models.requests == [{"model": "gemini-2.5-flash", "contents": "prompt"}]


def test_falls_back_to_candidate_parts():
    part = SimpleNamespace(text="From parts")
    response = SimpleNamespace(
        text=None,
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
    )
    client, _ = _client(response)

    assert client.generate("m", "p") == "From parts"


def test_empty_response_is_an_error():
    client, _ = _client(SimpleNamespace(text="", candidates=[]))

    with pytest.raises(GenerationError) as excinfo:
        client.generate("m", "p")

    assert excinfo.value.kind is GenerationErrorKind.EMPTY


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (APIFailure(404, "models/gemini-9 is not found"), GenerationErrorKind.NOT_FOUND),
        (APIFailure(403, "PERMISSION_DENIED"), GenerationErrorKind.AUTH),
        (APIFailure(401, "UNAUTHENTICATED"), GenerationErrorKind.AUTH),
        (ConnectionError("connection reset"), GenerationErrorKind.UNAVAILABLE),
        (APIFailure(503, "overloaded"), GenerationErrorKind.UNAVAILABLE),
    ],
)
def test_library_errors_are_classified(error, kind):
    client, _ = _client(error)

    with pytest.raises(GenerationError) as excinfo:
        client.generate("m", "p")

    assert excinfo.value.kind is kind
    assert excinfo.value.__cause__ is error


def test_classify_error_reads_message_without_code():
    assert classify_error(RuntimeError("Model not found for API version v1")) is GenerationErrorKind.NOT_FOUND
    assert classify_error(RuntimeError("API key not valid")) is GenerationErrorKind.AUTH
