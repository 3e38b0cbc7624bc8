"""Redis client and token revocation list."""
import logging
import time

from yoked.config.settings import settings

logger = logging.getLogger(__name__)

# In-memory fallback for development when Redis is not available
_memory_store: dict[str, float] = {}
_use_memory_fallback = False
_client = None


async def get_redis():
    """Get Redis client instance, or None when falling back to memory."""
    global _use_memory_fallback, _client

    if _use_memory_fallback:
        return None
    if _client is not None:
        return _client

    try:
        import redis.asyncio as redis

        client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
        await client.ping()
        _client = client
        return client
    except Exception as e:
        logger.warning(f"Redis not available, using in-memory fallback: {e}")
        _use_memory_fallback = True
        return None


def use_memory_fallback() -> None:
    """Force the in-memory store (tests and Redis-less deployments)."""
    global _use_memory_fallback
    _use_memory_fallback = True
    _memory_store.clear()


class TokenBlacklist:
    """Revoked token ids, kept until the token would have expired anyway."""

    BLACKLIST_PREFIX = "blacklist:"

    @classmethod
    async def add_to_blacklist(
        cls,
        token_id: str,
        expires_in_seconds: int,
    ) -> None:
        """Revoke a token id."""
        if expires_in_seconds <= 0:
            return

        client = await get_redis()
        key = f"{cls.BLACKLIST_PREFIX}{token_id}"

        if client:
            await client.setex(key, expires_in_seconds, "1")
        else:
            _memory_store[key] = time.time() + expires_in_seconds

    @classmethod
    async def is_blacklisted(cls, token_id: str) -> bool:
        """Check if a token id has been revoked."""
        client = await get_redis()
        key = f"{cls.BLACKLIST_PREFIX}{token_id}"

        if client:
            result = await client.get(key)
            return result is not None

        expiry = _memory_store.get(key)
        if expiry is None:
            return False
        if time.time() < expiry:
            return True
        del _memory_store[key]
        return False
