from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fitai.app.config import Settings, get_settings
from fitai.app.dependencies import (
    get_lead_service,
    get_orchestrator,
    get_response_generator,
    get_session_store,
)
from fitai.orchestrator.graph import ChatOrchestrator, make_message
from fitai.orchestrator.state import SessionState
from fitai.schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from fitai.schemas.lead import LeadFormData, LeadSubmissionResponse
from fitai.schemas.session import SessionMessageRequest, SessionView
from fitai.services.generator import ResponseGenerator
from fitai.services.lead import LeadService
from fitai.services.session_store import SessionStore
from fitai.utils.logging import clear_session_id, set_session_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _validate_message(message: str, settings: Settings) -> Optional[JSONResponse]:
    """Return a 400 response for an unusable message, or None when it may proceed."""
    if not message or not message.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Message is required")
    if len(message) > settings.max_message_length:
        return _error(status.HTTP_400_BAD_REQUEST, "Message too long")
    return None


def _error(status_code: int, error: str, fallback: Optional[str] = None) -> JSONResponse:
    payload = ErrorResponse(error=error, fallback=fallback).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=payload)


def _contact_fallback(settings: Settings) -> str:
    return (
        "In the meantime, you can contact the trainer directly at "
        f"{settings.contact_email} or call {settings.contact_phone}."
    )


def _session_view(state: SessionState, orchestrator: ChatOrchestrator) -> SessionView:
    return SessionView(
        session_id=state.session_id,
        phase=state.phase.value,
        current_step_index=state.current_step_index,
        messages=state.transcript,
        quick_replies=list(orchestrator.quick_replies(state)),
        lead=state.lead_record,
        ready_for_booking=state.ready_for_booking,
        has_sent_scheduling_link=state.has_sent_scheduling_link,
        open_url=state.open_url,
    )


@router.get("/health", status_code=status.HTTP_200_OK)
def health(settings: Settings = Depends(get_settings)) -> dict:
    return {"app": settings.app_name, "status": "ok"}


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def chat(
    payload: ChatRequest,
    settings: Settings = Depends(get_settings),
    generator: ResponseGenerator = Depends(get_response_generator),
):
    invalid = _validate_message(payload.message, settings)
    if invalid is not None:
        return invalid

    history = [message.model_dump(exclude_none=True) for message in payload.conversation_history]
    try:
        reply = generator.generate(payload.message, history)
    except Exception:
        logger.exception("Chat request failed")
        if settings.always_respond_ok:
            return ChatResponse(response=_contact_fallback(settings))
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Unable to process your message at the moment.",
            fallback=_contact_fallback(settings),
        )
    return ChatResponse(response=reply)


@router.post("/leads", response_model=LeadSubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_lead(
    payload: LeadFormData,
    lead_service: LeadService = Depends(get_lead_service),
) -> LeadSubmissionResponse:
    record = lead_service.submit(payload)
    return LeadSubmissionResponse(
        id=record["id"],
        message=lead_service.build_confirmation_message(payload),
    )


@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
def create_session(
    store: SessionStore = Depends(get_session_store),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> SessionView:
    state = orchestrator.new_session()
    store.put(state)
    logger.info("Session %s created", state.session_id)
    return _session_view(state, orchestrator)


@router.get("/sessions/{session_id}", response_model=SessionView)
def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> SessionView:
    return _session_view(store.get(session_id), orchestrator)


@router.post(
    "/sessions/{session_id}/messages",
    response_model=SessionView,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def post_session_message(
    session_id: str,
    payload: SessionMessageRequest,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    invalid = _validate_message(payload.message, settings)
    if invalid is not None:
        return invalid

    store.get(session_id)
    with store.exclusive(session_id):
        set_session_id(session_id)
        try:
            current = store.get(session_id)
            try:
                state = orchestrator.run(current, payload.message)
            except Exception:
                logger.exception("Chat turn failed")
                if settings.always_respond_ok:
                    # Stored state is left as it was; the reply only lives in this response.
                    shown = current.copy()
                    shown.transcript.append(make_message("user", payload.message))
                    shown.transcript.append(make_message("assistant", _contact_fallback(settings)))
                    return _session_view(shown, orchestrator)
                return _error(
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                    "Unable to process your message at the moment.",
                    fallback=_contact_fallback(settings),
                )
            store.put(state)
        finally:
            clear_session_id()
    return _session_view(state, orchestrator)


@router.post(
    "/sessions/{session_id}/book",
    response_model=SessionView,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def book_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> SessionView:
    store.get(session_id)
    with store.exclusive(session_id):
        state = orchestrator.book(store.get(session_id))
        store.put(state)
    return _session_view(state, orchestrator)


@router.post("/sessions/{session_id}/reset", response_model=SessionView)
def reset_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> SessionView:
    store.get(session_id)
    with store.exclusive(session_id):
        state = orchestrator.new_session(session_id)
        store.put(state)
    logger.info("Session %s reset", session_id)
    return _session_view(state, orchestrator)
