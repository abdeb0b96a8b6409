"""
Session Management Module
=========================

Server-side sessions for the starter API.

The browser holds a cookie whose value is a short HS256 JWT carrying only
the session id (``sid``). The session data itself lives in an in-memory
store owned by the process:

- Sessions are created lazily on the first request without a valid cookie
- The store is a plain dict; it is lost on restart and is not shared
  between workers
- Concurrent writes to one session are last-write-wins
- Entries expire after SESSION_MAX_AGE_SECONDS of inactivity

Handlers never read the session off the request themselves; they declare
``session: SessionContext = Depends(get_session)`` or
``user = Depends(get_current_user)``.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from ..config import Settings

logger = logging.getLogger(__name__)

SESSION_ISSUER = "starter-api"
SESSION_ALGORITHM = "HS256"
USER_KEY = "user"


# =============================================================================
# Session Store
# =============================================================================

@dataclass
class SessionRecord:
    """One browser session: its id, its data and when it lapses."""
    sid: str
    expires_at: float
    data: Dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


class InMemorySessionStore:
    """
    Process-local session store keyed by session id.

    Every read and write happens on the event loop thread, so no locking is
    done.
    """

    def __init__(self, max_age_seconds: int):
        self.max_age_seconds = max_age_seconds
        self._sessions: Dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sid: str) -> bool:
        return sid in self._sessions

    def create(self) -> SessionRecord:
        """
        Create, register and return an empty session.

        Expired records are purged first, so abandoned sessions do not
        accumulate.
        """
        self.purge_expired()
        sid = secrets.token_urlsafe(24)
        record = SessionRecord(sid=sid, expires_at=time.time() + self.max_age_seconds)
        self._sessions[sid] = record
        logger.debug("Created session", extra={"sid": sid[:8]})
        return record

    def get(self, sid: str) -> Optional[SessionRecord]:
        """
        Look up a live session.

        Returns:
            The record, or None when unknown or expired. Expired records are
            dropped on the way out.
        """
        record = self._sessions.get(sid)
        if record is None:
            return None

        if record.is_expired():
            self.delete(sid)
            logger.debug("Session expired", extra={"sid": sid[:8]})
            return None

        return record

    def save(self, record: SessionRecord) -> None:
        """Store the record and push its expiry forward (rolling sessions)."""
        record.expires_at = time.time() + self.max_age_seconds
        self._sessions[record.sid] = record

    def delete(self, sid: str) -> None:
        self._sessions.pop(sid, None)

    def purge_expired(self) -> int:
        """Drop every expired record and return how many were removed."""
        now = time.time()
        expired = [sid for sid, record in self._sessions.items() if record.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions")
        return len(expired)


# =============================================================================
# Session Context
# =============================================================================

class SessionContext:
    """
    Per-request view of one session record.

    Created by the session middleware and passed to handlers through
    ``get_session``.
    """

    def __init__(self, record: SessionRecord):
        self.record = record

    @property
    def sid(self) -> str:
        return self.record.sid

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        """Profile stored by the last successful login, if any."""
        return self.record.data.get(USER_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def set_user(self, profile: Dict[str, Any]) -> None:
        """Store the profile verbatim, replacing any previous one."""
        self.record.data[USER_KEY] = profile


# =============================================================================
# Cookie Tokens
# =============================================================================

def create_session_token(sid: str, settings: Settings) -> str:
    """
    Sign a cookie value for the given session id.

    Returns:
        Encoded JWT string with ``sid``, ``iat``, ``exp`` and ``iss`` claims
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sid": sid,
        "iat": now,
        "exp": now + timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS),
        "iss": SESSION_ISSUER,
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=SESSION_ALGORITHM)


def verify_session_token(token: str, settings: Settings) -> Optional[str]:
    """
    Verify a cookie value and return the session id it carries.

    A bad cookie is not an error for the caller: it is logged and the
    request continues with a fresh session.

    Returns:
        The session id, or None if the token is expired, tampered or
        malformed.
    """
    if not token:
        return None

    try:
        decoded = jwt.decode(
            token,
            settings.SESSION_SECRET,
            algorithms=[SESSION_ALGORITHM],
            issuer=SESSION_ISSUER,
            options={"require": ["exp", "iat", "sid"]},
        )
    except ExpiredSignatureError:
        logger.info("Session cookie expired")
        return None
    except InvalidTokenError as e:
        logger.warning(f"Invalid session cookie: {e}")
        return None

    return decoded["sid"]


# =============================================================================
# FastAPI Dependencies
# =============================================================================

def get_session(request: Request) -> SessionContext:
    """
    FastAPI dependency returning the session attached by SessionMiddleware.

    Raises:
        RuntimeError: If the middleware is not installed
    """
    session = getattr(request.state, "session", None)
    if session is None:
        raise RuntimeError("SessionMiddleware must be installed to use sessions")
    return session


def get_current_user(
    session: SessionContext = Depends(get_session),
) -> Optional[Dict[str, Any]]:
    """
    FastAPI dependency for optional authentication.

    Returns the stored profile, or None for an anonymous session.

    Usage:
        @app.get("/me")
        async def me(user: Optional[dict] = Depends(get_current_user)):
            ...
    """
    return session.user


__all__ = [
    "SessionRecord",
    "InMemorySessionStore",
    "SessionContext",
    "create_session_token",
    "verify_session_token",
    "get_session",
    "get_current_user",
]
