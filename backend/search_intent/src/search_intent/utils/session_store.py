import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from ..config import settings
from ..models.schemas import SessionState, SessionUpdate

logger = logging.getLogger(settings.SERVICE_NAME + ".session_store")


class SessionStore(ABC):
    """
    Single access point for per-visitor session/config state.
    Route handlers receive a store through dependency injection.
    """

    @abstractmethod
    async def create(self) -> SessionState:
        ...

    @abstractmethod
    async def get(self, session_id: UUID) -> Optional[SessionState]:
        ...

    @abstractmethod
    async def save(self, session: SessionState) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: UUID) -> bool:
        ...

    async def update(self, session_id: UUID, changes: SessionUpdate) -> Optional[SessionState]:
        """Apply the fields set in `changes`; returns None for an unknown session."""
        session = await self.get(session_id)
        if session is None:
            return None
        for field_name, value in changes.model_dump(exclude_unset=True).items():
            setattr(session, field_name, value)
        session.last_activity_at = datetime.utcnow()
        await self.save(session)
        return session

    async def touch(self, session_id: UUID) -> Optional[SessionState]:
        return await self.update(session_id, SessionUpdate())

    async def close(self) -> None:
        return None


class MemorySessionStore(SessionStore):
    """In-process store; sessions disappear when the process exits."""

    def __init__(self):
        self._sessions: Dict[UUID, SessionState] = {}

    async def create(self) -> SessionState:
        session = SessionState()
        await self.save(session)
        logger.info(f"New session created: {session.session_id}")
        return session

    async def get(self, session_id: UUID) -> Optional[SessionState]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    async def save(self, session: SessionState) -> None:
        self._sessions[session.session_id] = session.model_copy()

    async def delete(self, session_id: UUID) -> bool:
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"Session deleted: {session_id}")
        return removed


class RedisSessionStore(SessionStore):
    """Sessions serialised as JSON under a key prefix, expiring after the configured TTL."""

    def __init__(self, redis_url: Optional[str] = None):
        self.redis = aioredis.from_url(redis_url or str(settings.REDIS_URL), decode_responses=False)
        self.prefix = settings.SESSION_KEY_PREFIX
        self.ttl = settings.SESSION_TTL_SECONDS
        logger.info(f"RedisSessionStore initialized for URL: {settings.REDIS_URL.host}:{settings.REDIS_URL.port}")

    def _key(self, session_id: UUID) -> str:
        return f"{self.prefix}{session_id}"

    async def create(self) -> SessionState:
        session = SessionState()
        await self.save(session)
        logger.info(f"New session created: {session.session_id}")
        return session

    async def get(self, session_id: UUID) -> Optional[SessionState]:
        raw = await self.redis.get(self._key(session_id))
        if raw is None:
            return None
        try:
            return SessionState.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Discarding unreadable session {session_id}: {e}")
            await self.redis.delete(self._key(session_id))
            return None

    async def save(self, session: SessionState) -> None:
        await self.redis.set(self._key(session.session_id), session.model_dump_json(), ex=self.ttl)

    async def delete(self, session_id: UUID) -> bool:
        removed = await self.redis.delete(self._key(session_id))
        if removed:
            logger.info(f"Session deleted: {session_id}")
        return bool(removed)

    async def close(self) -> None:
        try:
            await self.redis.aclose()
            logger.info("Redis connection closed.")
        except RedisError as e:
            logger.error(f"Error closing Redis connection: {e}", exc_info=True)


_store_instance: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """
    Get the process-wide session store selected by SESSION_BACKEND.
    Used as a FastAPI dependency; tests override it.
    """
    global _store_instance
    if _store_instance is None:
        if settings.SESSION_BACKEND == "redis":
            _store_instance = RedisSessionStore()
        else:
            _store_instance = MemorySessionStore()
        logger.info(f"Using {type(_store_instance).__name__} for sessions")
    return _store_instance


async def close_session_store() -> None:
    global _store_instance
    if _store_instance is not None:
        await _store_instance.close()
        _store_instance = None
