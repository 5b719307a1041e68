from __future__ import annotations

import logging
from contextvars import ContextVar

_session_id: ContextVar[str] = ContextVar("session_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(session_id)s] %(name)s: %(message)s"


def set_session_id(session_id: str) -> None:
    """Tag log records emitted in the current context with a chat session id."""
    _session_id.set(session_id)


def clear_session_id() -> None:
    _session_id.set("-")


class SessionIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = getattr(record, "session_id", None) or _session_id.get()
        return True


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SessionIdFilter())

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers = [handler]
