"""Session stores: process-local dict or Redis with optional TTL.

Keys: sitesmith:session:{session_id}
Values: JSON-serialized Session models
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

import redis
import structlog

from sitesmith.errors import SessionNotFoundError
from sitesmith.models.session import Session

if TYPE_CHECKING:
    from sitesmith.config import Settings
    from sitesmith.protocols import SessionStore

logger = structlog.get_logger()


class InMemorySessionStore:
    """Sessions live for the life of the process."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def set(self, session: Session) -> None:
        self._sessions[session.id] = session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore:
    """Sessions shared across workers through Redis.

    A TTL of 0 keeps keys until deleted, matching the in-memory behaviour.
    """

    _PREFIX = "sitesmith:session"

    def __init__(self, client: redis.Redis, ttl_seconds: int = 0) -> None:
        self._client = client
        self._ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> RedisSessionStore:
        client: redis.Redis = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        return cls(client, ttl_seconds=settings.session_ttl_seconds)

    def _make_key(self, session_id: str) -> str:
        return f"{self._PREFIX}:{session_id}"

    def get(self, session_id: str) -> Session | None:
        raw = cast("str | bytes | None", self._client.get(self._make_key(session_id)))
        if raw is None:
            return None
        return Session.model_validate_json(raw)

    def set(self, session: Session) -> None:
        key = self._make_key(session.id)
        data = session.model_dump_json()
        if self._ttl_seconds > 0:
            self._client.set(key, data, ex=self._ttl_seconds)
        else:
            self._client.set(key, data)

    def delete(self, session_id: str) -> bool:
        return cast("int", self._client.delete(self._make_key(session_id))) > 0

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as exc:
            logger.warning("Redis session store unreachable", error=str(exc))
            return False


def build_session_store(settings: Settings) -> SessionStore:
    if settings.session_backend == "redis":
        logger.info("Using Redis session store", ttl_s=settings.session_ttl_seconds)
        return RedisSessionStore.from_settings(settings)
    return InMemorySessionStore()


def get_or_create(store: SessionStore, session_id: str) -> Session:
    session = store.get(session_id)
    if session is None:
        session = Session(id=session_id)
        logger.debug("Session created", session_id=session_id)
    return session


def require_session(store: SessionStore, session_id: str) -> Session:
    session = store.get(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    return session
