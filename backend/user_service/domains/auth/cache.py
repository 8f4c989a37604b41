"""
Session storage backends
Token-keyed session records with expiry, kept in process memory or in Redis
"""
import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from redis import Redis, RedisError

from user_service.core.exceptions import DatabaseError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore(ABC):
    """Backing store for session records, keyed by opaque token"""

    @abstractmethod
    def find(self, token: str) -> Optional[Tuple[Dict[str, Any], datetime]]:
        """Return (values, expires_at) or None if missing or expired"""

    @abstractmethod
    def commit(self, token: str, values: Dict[str, Any], expires_at: datetime) -> None:
        """Insert or replace the record for token"""

    @abstractmethod
    def delete(self, token: str) -> None:
        """Remove the record for token; missing tokens are ignored"""


class MemorySessionStore(SessionStore):
    """Process-local session store; expired records are purged when read"""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, Tuple[Dict[str, Any], datetime]] = {}

    def find(self, token: str) -> Optional[Tuple[Dict[str, Any], datetime]]:
        with self._lock:
            record = self._records.get(token)
            if record is None:
                return None

            values, expires_at = record
            if utcnow() >= expires_at:
                del self._records[token]
                return None

            return dict(values), expires_at

    def commit(self, token: str, values: Dict[str, Any], expires_at: datetime) -> None:
        with self._lock:
            self._records[token] = (dict(values), expires_at)

    def delete(self, token: str) -> None:
        with self._lock:
            self._records.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RedisSessionStore(SessionStore):
    """
    Redis-based session store

    Each session is a JSON document under `session:<token>` whose Redis TTL
    matches the session deadline, so Redis evicts expired sessions itself.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "session:"):
        """Initialize session store with Redis client.

        Args:
            redis_client: Redis client instance
            key_prefix: Prefix for session keys
        """
        self.redis_client = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    def find(self, token: str) -> Optional[Tuple[Dict[str, Any], datetime]]:
        try:
            data = self.redis_client.get(self._make_key(token))
        except RedisError as e:
            raise DatabaseError(internal_message=f"session lookup failed: {e}") from e

        if not data:
            return None

        if isinstance(data, bytes):
            data = data.decode("utf-8")
        session_data = json.loads(data)

        expires_at = datetime.fromisoformat(session_data["expires_at"])
        if utcnow() >= expires_at:
            return None

        return session_data["values"], expires_at

    def commit(self, token: str, values: Dict[str, Any], expires_at: datetime) -> None:
        # Redis rejects a zero TTL; a session this close to expiry is kept one second
        ttl = max(int((expires_at - utcnow()).total_seconds()), 1)
        session_data = {
            "values": values,
            "expires_at": expires_at.isoformat(),
        }
        try:
            self.redis_client.setex(self._make_key(token), ttl, json.dumps(session_data))
        except RedisError as e:
            raise DatabaseError(internal_message=f"session commit failed: {e}") from e

    def delete(self, token: str) -> None:
        try:
            self.redis_client.delete(self._make_key(token))
        except RedisError as e:
            raise DatabaseError(internal_message=f"session delete failed: {e}") from e
