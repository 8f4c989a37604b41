"""
Session manager
Loads the per-request session from its cookie token and commits it back
"""
import secrets
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from starlette.responses import Response

from .cache import SessionStore, utcnow


class SessionStatus(str, Enum):
    UNMODIFIED = "unmodified"
    MODIFIED = "modified"
    DESTROYED = "destroyed"


def generate_token() -> str:
    return secrets.token_urlsafe(32)


class SessionData:
    """
    Attributes of one session as seen by one request

    `token` is None until the session is first committed.
    """

    def __init__(
        self,
        token: Optional[str],
        values: Optional[Dict[str, Any]],
        expires_at: datetime
    ):
        self.token = token
        self.expires_at = expires_at
        self.status = SessionStatus.UNMODIFIED
        self._values: Dict[str, Any] = dict(values or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def get_int(self, key: str) -> int:
        """Integer value for key, 0 when absent or not an integer"""
        value = self.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return value

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value
            self.status = SessionStatus.MODIFIED

    def pop(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._values:
                return default
            self.status = SessionStatus.MODIFIED
            return self._values.pop(key)

    def clear(self) -> None:
        with self._lock:
            if self._values:
                self._values.clear()
                self.status = SessionStatus.MODIFIED

    def values(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._values)


class SessionManager:
    """
    Issues, rotates and persists cookie-keyed sessions

    The manager is the only writer to its SessionStore. Cookies are HttpOnly,
    SameSite=Lax and live until the session deadline.
    """

    def __init__(
        self,
        store: SessionStore,
        lifetime: timedelta = timedelta(hours=24),
        cookie_name: str = "session_id",
        cookie_secure: bool = False
    ):
        self.store = store
        self.lifetime = lifetime
        self.cookie_name = cookie_name
        self.cookie_secure = cookie_secure

    def load(self, token: Optional[str]) -> SessionData:
        """
        Hydrate the session for a cookie token

        Unknown, expired or tampered tokens yield a fresh empty session
        """
        if token:
            record = self.store.find(token)
            if record is not None:
                values, expires_at = record
                return SessionData(token, values, expires_at)

        return SessionData(None, None, utcnow() + self.lifetime)

    def renew_token(self, session: SessionData) -> None:
        """
        Rotate the session token, keeping its attributes

        The old record is deleted and the deadline restarts; the new token is
        written when the session is committed.
        """
        if session.token:
            self.store.delete(session.token)

        session.token = generate_token()
        session.expires_at = utcnow() + self.lifetime
        session.status = SessionStatus.MODIFIED

    def destroy(self, session: SessionData) -> None:
        if session.token:
            self.store.delete(session.token)

        session.clear()
        session.token = None
        session.status = SessionStatus.DESTROYED

    def commit(self, session: SessionData) -> str:
        """Persist the session, minting a token if it has none yet"""
        if session.token is None:
            session.token = generate_token()

        self.store.commit(session.token, session.values(), session.expires_at)
        return session.token

    def write_cookie(self, response: Response, session: SessionData) -> None:
        max_age = max(int((session.expires_at - utcnow()).total_seconds()), 0)
        response.set_cookie(
            key=self.cookie_name,
            value=session.token or "",
            max_age=max_age,
            expires=session.expires_at,
            path="/",
            secure=self.cookie_secure,
            httponly=True,
            samesite="lax",
        )

    def expire_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            secure=self.cookie_secure,
            httponly=True,
            samesite="lax",
        )
