from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends

from fitai.adapters.email_client import EmailClient
from fitai.adapters.gemini_client import GeminiClient
from fitai.adapters.mongo_client import InMemoryCollection, MongoClientFactory
from fitai.app.config import Settings, get_settings
from fitai.orchestrator.graph import ChatOrchestrator
from fitai.services.booking import BookingService
from fitai.services.generator import PLACEHOLDER_API_KEYS, ResponseGenerator
from fitai.services.lead import LeadService
from fitai.services.qualification import QualificationSequencer
from fitai.services.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_text_client() -> Optional[GeminiClient]:
    settings = get_settings()
    if settings.gemini_api_key in PLACEHOLDER_API_KEYS:
        logger.warning("No Gemini API key configured; serving fallback responses only")
        return None
    return GeminiClient(api_key=settings.gemini_api_key)


@lru_cache(maxsize=1)
def get_response_generator() -> ResponseGenerator:
    settings = get_settings()
    return ResponseGenerator(
        client=get_text_client(),
        model=settings.gemini_model,
        alternate_models=settings.gemini_alternate_models,
        history_window=settings.history_window,
    )


@lru_cache(maxsize=1)
def get_session_store() -> InMemorySessionStore:
    settings = get_settings()
    return InMemorySessionStore(
        ttl_seconds=settings.session_ttl_seconds,
        max_sessions=settings.max_sessions,
    )


@lru_cache(maxsize=1)
def get_email_client() -> EmailClient:
    settings = get_settings()
    return EmailClient(api_key=settings.email_api_key, sender_email=settings.email_sender_email)


@lru_cache(maxsize=1)
def get_leads_collection():
    settings = get_settings()
    if settings.lead_storage == "mongo":
        factory = MongoClientFactory(settings.mongo_uri, settings.mongo_database)
        return factory.get_collection(settings.leads_collection)
    return InMemoryCollection()


def get_lead_service(
    settings: Settings = Depends(get_settings),
    collection=Depends(get_leads_collection),
    email_client: EmailClient = Depends(get_email_client),
) -> LeadService:
    return LeadService(
        collection=collection,
        email_client=email_client,
        trainer_email=settings.trainer_email,
    )


def get_booking_service(settings: Settings = Depends(get_settings)) -> BookingService:
    return BookingService(scheduling_url=settings.scheduling_url)


def get_orchestrator(
    booking_service: BookingService = Depends(get_booking_service),
    response_generator: ResponseGenerator = Depends(get_response_generator),
) -> ChatOrchestrator:
    return ChatOrchestrator(
        sequencer=QualificationSequencer(),
        booking_service=booking_service,
        response_generator=response_generator,
    )
