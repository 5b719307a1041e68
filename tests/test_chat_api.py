from __future__ import annotations

import pytest

from fitai.adapters.gemini_client import GenerationError, GenerationErrorKind
from fitai.app.dependencies import get_response_generator
from fitai.app.main import app
from fitai.services.responses import DEFAULT_RESPONSE, FALLBACK_RESPONSES


def test_health(api):
    client, _ = api

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_chat_returns_generated_reply(api):
    client, deps = api
    payload = {
        "message": "How often should I train?",
        "conversationHistory": [
            {"role": "assistant", "content": "Hi! I'm FitAI."},
            {"role": "user", "content": "I'm new to the gym"},
        ],
    }

    response = client.post("/chat", json=payload)
    data = response.json()

    assert response.status_code == 200
    assert data["response"].startswith("Great question!")
    assert data["timestamp"]
    prompt = deps["text_client"].calls[0]["prompt"]
    assert "user: I'm new to the gym" in prompt
    assert "User: How often should I train?" in prompt


@pytest.mark.parametrize("message", ["", "   \n\t"])
def test_empty_message_is_rejected_without_calling_service(api, message):
    client, deps = api

    response = client.post("/chat", json={"message": message})

    assert response.status_code == 400
    assert response.json() == {"error": "Message is required"}
    assert deps["text_client"].calls == []


def test_missing_message_field_is_rejected(api):
    client, deps = api

    response = client.post("/chat", json={"conversationHistory": []})

    assert response.status_code == 400
    assert deps["text_client"].calls == []


def test_over_length_message_is_rejected(api):
    client, deps = api

    response = client.post("/chat", json={"message": "x" * 501})

    assert response.status_code == 400
    assert response.json() == {"error": "Message too long"}
    assert deps["text_client"].calls == []


def test_message_at_length_ceiling_is_accepted(api):
    client, _ = api

    response = client.post("/chat", json={"message": "x" * 500})

    assert response.status_code == 200


def test_malformed_body_is_a_client_error(api):
    client, deps = api

    response = client.post("/chat", json={"message": 42})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request"}
    assert deps["text_client"].calls == []


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Can you suggest a muscle program?", dict(FALLBACK_RESPONSES)["muscle"]),
        ("What's the weather like?", DEFAULT_RESPONSE),
    ],
)
def test_model_not_found_still_answers_from_fallback_table(api, text_client, message, expected):
    client, _ = api
    text_client.outcome = GenerationError(GenerationErrorKind.NOT_FOUND, "404 model not found")

    response = client.post("/chat", json={"message": message})

    assert response.status_code == 200
    assert response.json()["response"] == expected
    assert [call["model"] for call in text_client.calls] == ["primary", "alt"]


class ExplodingGenerator:
    def generate(self, user_message, history=()):
        raise RuntimeError("unexpected")


def test_internal_failure_returns_contact_fallback(api):
    client, _ = api
    app.dependency_overrides[get_response_generator] = lambda: ExplodingGenerator()

    response = client.post("/chat", json={"message": "hello"})
    data = response.json()

    assert response.status_code == 500
    assert data["error"] == "Unable to process your message at the moment."
    assert "hello@trainer.com" in data["fallback"]


def test_internal_failure_can_always_answer_ok(api, settings):
    client, _ = api
    settings.always_respond_ok = True
    app.dependency_overrides[get_response_generator] = lambda: ExplodingGenerator()

    response = client.post("/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert "(555) 123-4567" in response.json()["response"]
