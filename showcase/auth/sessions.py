import logging
import secrets
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from showcase.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class SessionStore:
    """Redis registry of live login sessions; logout removes the entry"""

    def __init__(self):
        self.redis: Optional[redis.Redis] = None
        self.ttl = settings.SESSION_TTL_SECONDS
        self.enabled = settings.ENABLE_SESSION_STORE

    async def connect(self):
        """Initialize Redis connection"""
        if self.enabled:
            self.redis = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True
            )

    async def disconnect(self):
        """Close Redis connection"""
        if self.redis:
            await self.redis.close()

    def _session_key(self, session_id: str) -> str:
        return f"session:{session_id}"

    async def create(self, account_id: str) -> str:
        """Register a new session and return its id"""
        session_id = secrets.token_urlsafe(24)
        if not self.enabled:
            return session_id

        if not self.redis:
            raise RedisError("Session store is not connected")

        await self.redis.setex(self._session_key(session_id), self.ttl, account_id)
        return session_id

    async def is_active(self, session_id: str, account_id: str) -> bool:
        """
        Whether the session is still registered for this account.
        With the store disabled, a validly signed token is enough;
        with it enabled but unreachable, sessions are rejected.
        """
        if not self.enabled:
            return True

        if not self.redis:
            return False

        try:
            stored = await self.redis.get(self._session_key(session_id))
        except RedisError:
            logger.exception("Session lookup failed")
            return False

        return stored == account_id

    async def revoke(self, session_id: str) -> None:
        if not self.enabled or not self.redis:
            return

        try:
            await self.redis.delete(self._session_key(session_id))
        except RedisError:
            logger.exception(f"Failed to revoke session {session_id}")


# Singleton instance
session_store = SessionStore()
