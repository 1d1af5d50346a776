from __future__ import annotations

import secrets
import threading
from time import time
from typing import Dict, Optional, Tuple

import structlog
from fastapi import Request

from storytests.config.settings import settings
from storytests.models.schemas import SessionCredentials

logger = structlog.get_logger()

SESSION_ID_KEY = "sid"


class SessionStore:
    """In-memory credential store keyed by session id.

    - Entries expire ``ttl_seconds`` after their last write.
    - Expired entries are dropped lazily on read and on every write.
    - Thread-safe using a simple lock.
    """

    def __init__(self, ttl_seconds: float, max_items: int = 1024) -> None:
        self._data: Dict[str, Tuple[float, SessionCredentials]] = {}
        self._ttl = float(ttl_seconds)
        self._max = max_items
        self._lock = threading.Lock()

    def _purge(self) -> None:
        now = time()
        with self._lock:
            expired = [k for k, (exp, _) in self._data.items() if exp < now]
            for k in expired:
                self._data.pop(k, None)
            # Enforce capacity, oldest expiry first
            if len(self._data) > self._max:
                over = len(self._data) - self._max
                for k, _ in sorted(self._data.items(), key=lambda kv: kv[1][0])[:over]:
                    self._data.pop(k, None)

    def get(self, session_id: str) -> Optional[SessionCredentials]:
        with self._lock:
            item = self._data.get(session_id)
            if not item:
                return None
            exp, creds = item
            if exp < time():
                self._data.pop(session_id, None)
                return None
            return creds

    def set(self, session_id: str, creds: SessionCredentials) -> None:
        with self._lock:
            self._data[session_id] = (time() + self._ttl, creds)
        self._purge()

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._data.pop(session_id, None)

    def clear_all(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


SESSION_STORE = SessionStore(ttl_seconds=settings.session_max_age)


def get_session_id(request: Request, create: bool = False) -> Optional[str]:
    """Return the id carried by the signed session cookie, minting one if asked."""
    session_id = request.session.get(SESSION_ID_KEY)
    if session_id is None and create:
        session_id = secrets.token_urlsafe(24)
        request.session[SESSION_ID_KEY] = session_id
        logger.debug("New session created")
    return session_id


def load_credentials(request: Request) -> Optional[SessionCredentials]:
    session_id = get_session_id(request)
    if session_id is None:
        return None
    return SESSION_STORE.get(session_id)


def save_credentials(request: Request, creds: SessionCredentials) -> None:
    session_id = get_session_id(request, create=True)
    SESSION_STORE.set(session_id, creds)
