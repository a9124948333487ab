import json
import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    Every public method tolerates Redis being absent or unreachable: reads
    return None and writes are skipped, so the comment board keeps serving
    straight from the database.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self, url: str) -> None:
        """Open the connection pool.  Called once from the app lifespan."""
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except (redis.RedisError, OSError) as exc:
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await client.aclose()
            return
        self._redis = client
        logger.info("Redis connected: %s", url)

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | None:
        """Return the cached value for *key*, or None on a miss / error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except redis.RedisError as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict, ttl: int | None = None) -> None:
        """Store *value* under *key*; failures are logged, never raised."""
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except redis.RedisError as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete(self, *keys: str) -> None:
        if not self._redis or not keys:
            return
        try:
            await self._redis.delete(*keys)
        except redis.RedisError as exc:
            logger.debug("Cache DELETE error for keys=%r: %s", keys, exc)

    # ------------------------------------------------------------------
    # Comment keys
    # ------------------------------------------------------------------

    # Outlives any read that started before the delete committed.
    TOMBSTONE_TTL = 60

    @staticmethod
    def comment_key(comment_id: int) -> str:
        return f"comments:detail:{comment_id}"

    @staticmethod
    def tombstone_key(comment_id: int) -> str:
        return f"comments:deleted:{comment_id}"

    async def cache_comment(self, comment_id: int, value: dict, ttl: int | None = None) -> None:
        """
        Cache a comment read from the database, unless it has been deleted.

        The tombstone is checked after the write, so a delete that lands
        between the database read and this call always wins.
        """
        await self.set(self.comment_key(comment_id), value, ttl=ttl)
        if await self._exists(self.tombstone_key(comment_id)):
            await self.delete(self.comment_key(comment_id))

    async def invalidate_comment(self, comment_id: int) -> None:
        # Comments are immutable, so deletion is the only invalidation point.
        # Tombstone first, then drop the entry.
        await self.set(self.tombstone_key(comment_id), {"deleted": True}, ttl=self.TOMBSTONE_TTL)
        await self.delete(self.comment_key(comment_id))

    async def _exists(self, key: str) -> bool:
        if not self._redis:
            return False
        try:
            return bool(await self._redis.exists(key))
        except redis.RedisError as exc:
            logger.debug("Cache EXISTS error for key=%r: %s", key, exc)
            return False

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        """Return a snapshot of hit/miss counters for the metrics endpoint."""
        total = self._hits + self._misses
        return {
            "enabled": self.enabled,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }
