from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fitai.app.config import Settings, get_settings
from fitai.app.dependencies import (
    get_email_client,
    get_leads_collection,
    get_response_generator,
    get_session_store,
)
from fitai.app.main import app
from fitai.adapters.mongo_client import InMemoryCollection
from fitai.services.generator import ResponseGenerator
from fitai.services.session_store import InMemorySessionStore

SCHEDULING_URL = "https://calendly.com/test-coach/fitai-consultation"


class RecordingClient:
    """Text-generation client stub that records prompts and replays one outcome."""

    def __init__(self, outcome="Great question! Book a consultation 📅") -> None:
        self.outcome = outcome
        self.calls = []

    def generate(self, model, prompt):
        self.calls.append({"model": model, "prompt": prompt})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class StubEmailClient:
    configured = True

    def __init__(self) -> None:
        self.sent = []

    def send(self, recipient: str, subject: str, body: str):
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})
        return {"status": 202}


@pytest.fixture()
def settings():
    return Settings(
        _env_file=None,
        scheduling_url=SCHEDULING_URL,
        max_message_length=500,
        always_respond_ok=False,
        trainer_email="coach@example.com",
        contact_email="hello@trainer.com",
        contact_phone="(555) 123-4567",
    )


@pytest.fixture()
def text_client():
    return RecordingClient()


@pytest.fixture()
def api(settings, text_client):
    """Wire the app against in-memory collaborators; yields (client, state) for assertions."""
    generator = ResponseGenerator(client=text_client, model="primary", alternate_models=("alt",))
    store = InMemorySessionStore()
    collection = InMemoryCollection()
    email_client = StubEmailClient()
    overrides = {
        get_settings: lambda: settings,
        get_response_generator: lambda: generator,
        get_session_store: lambda: store,
        get_leads_collection: lambda: collection,
        get_email_client: lambda: email_client,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield TestClient(app), {
            "store": store,
            "collection": collection,
            "email": email_client,
            "text_client": text_client,
        }
    finally:
        for key in overrides:
            app.dependency_overrides.pop(key, None)
