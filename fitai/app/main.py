from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fitai.app.config import get_settings
from fitai.app.routes import router
from fitai.orchestrator.phases import InvalidTransitionError
from fitai.services.session_store import SessionBusyError, SessionNotFoundError
from fitai.utils.logging import configure_logging

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name, debug=settings.debug)
if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
app.include_router(router)


@app.exception_handler(RequestValidationError)
async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request to %s", request.url.path)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request"})


@app.exception_handler(SessionNotFoundError)
async def _session_not_found(request: Request, exc: SessionNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Chat session not found"})


@app.exception_handler(SessionBusyError)
async def _session_busy(request: Request, exc: SessionBusyError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "A reply is still on its way. Please wait for it before sending another message."},
    )


@app.exception_handler(InvalidTransitionError)
async def _invalid_transition(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"error": str(exc)})
