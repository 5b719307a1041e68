from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from contextlib import contextmanager
from typing import Callable, ContextManager, Dict, Iterator, Protocol, Tuple

from fitai.orchestrator.state import SessionState

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a chat session id is unknown or has expired."""


class SessionBusyError(RuntimeError):
    """Raised when a turn arrives while another turn for the same session is pending."""


class SessionStore(Protocol):
    def get(self, session_id: str) -> SessionState:  # pragma: no cover - interface
        ...

    def put(self, state: SessionState) -> None:  # pragma: no cover - interface
        ...

    def evict(self, session_id: str) -> None:  # pragma: no cover - interface
        ...

    def exclusive(self, session_id: str) -> ContextManager[None]:  # pragma: no cover - interface
        ...


class InMemorySessionStore:
    """Single-process session store with inactivity expiry and LRU eviction.

    Not durable: sessions vanish on restart.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_sessions <= 0:
            raise ValueError("max_sessions must be positive")
        self._ttl = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[SessionState, float]]" = OrderedDict()
        self._lock = threading.Lock()
        self._turn_locks: Dict[str, threading.Lock] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, session_id: str) -> SessionState:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                raise SessionNotFoundError(session_id)
            state, touched_at = entry
            now = self._clock()
            if now - touched_at > self._ttl:
                self._drop(session_id)
                logger.info("Session %s expired", session_id)
                raise SessionNotFoundError(session_id)
            self._entries[session_id] = (state, now)
            self._entries.move_to_end(session_id)
            return state

    def put(self, state: SessionState) -> None:
        """Store a session, dropping expired entries before the LRU cap is applied."""
        with self._lock:
            now = self._clock()
            is_new = state.session_id not in self._entries
            self._entries[state.session_id] = (state, now)
            self._entries.move_to_end(state.session_id)
            if is_new:
                self._purge_expired(now)
            while len(self._entries) > self._max_sessions:
                oldest, _ = self._entries.popitem(last=False)
                self._turn_locks.pop(oldest, None)
                logger.info("Evicted least recently used session %s", oldest)

    def evict(self, session_id: str) -> None:
        with self._lock:
            self._drop(session_id)

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_expired(self._clock())

    @contextmanager
    def exclusive(self, session_id: str) -> Iterator[None]:
        """Hold the turn lock for a live session; a concurrent turn fails fast with SessionBusyError."""
        with self._lock:
            if session_id not in self._entries:
                raise SessionNotFoundError(session_id)
            turn_lock = self._turn_locks.setdefault(session_id, threading.Lock())
        if not turn_lock.acquire(blocking=False):
            raise SessionBusyError(session_id)
        try:
            yield
        finally:
            turn_lock.release()

    def _purge_expired(self, now: float) -> int:
        expired = [
            session_id
            for session_id, (_, touched_at) in self._entries.items()
            if now - touched_at > self._ttl
        ]
        for session_id in expired:
            self._drop(session_id)
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)

    def _drop(self, session_id: str) -> None:
        self._entries.pop(session_id, None)
        self._turn_locks.pop(session_id, None)
