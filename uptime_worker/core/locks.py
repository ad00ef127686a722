"""Single-flight locks keyed by check id."""

import uuid
from typing import Dict, Optional, Set

import redis.asyncio as redis
from redis.exceptions import RedisError

from uptime_worker.config import RedisConfig
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)

# Deletes the key only while it still holds the releasing token
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class CheckLockManager:
    """
    Ensures at most one pipeline per check id is in flight.

    With Redis enabled the lock is a ``SET NX EX`` key, so it is shared by
    every worker process and expires if its holder dies. The key holds a
    token unique to each acquire, and release only deletes a key that still
    holds its own token, so a lock that expired and was taken over by
    another worker is left alone. Without Redis, or if Redis fails, an
    in-process set is used.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        ttl_seconds: int = 300,
        key_prefix: str = "check_inflight:"
    ):
        """
        Initialize lock manager.

        Args:
            redis_client: Optional Redis client for cross-process locks
            ttl_seconds: Expiry of a Redis lock
            key_prefix: Prefix of Redis lock keys
        """
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self._in_flight: Set[str] = set()
        self._tokens: Dict[str, str] = {}

    @classmethod
    def from_config(cls, config: RedisConfig) -> "CheckLockManager":
        """Build a lock manager, creating a Redis client when enabled."""
        client = None
        if config.enabled:
            client = redis.from_url(
                config.url,
                decode_responses=True,
                socket_timeout=config.socket_timeout,
                socket_connect_timeout=config.socket_connect_timeout,
                max_connections=config.max_connections
            )
            logger.info("Redis client created, connection will be tested on first use")
        return cls(redis_client=client, ttl_seconds=config.lock_ttl_seconds)

    def _key(self, check_id: str) -> str:
        return f"{self.key_prefix}{check_id}"

    async def acquire(self, check_id: str) -> bool:
        """
        Try to take the lock for ``check_id``.

        Returns:
            bool: False if a pipeline for this id is already in flight
        """
        if self.redis_client:
            token = uuid.uuid4().hex
            try:
                acquired = await self.redis_client.set(
                    self._key(check_id), token, nx=True, ex=self.ttl_seconds
                )
                if acquired:
                    self._tokens[check_id] = token
                return bool(acquired)
            except RedisError as e:
                logger.error(
                    "Error acquiring Redis lock, falling back to in-memory lock",
                    extra={"check_id": check_id, "error": str(e)}
                )

        if check_id in self._in_flight:
            return False
        self._in_flight.add(check_id)
        return True

    async def release(self, check_id: str) -> None:
        """Release the lock for ``check_id``."""
        self._in_flight.discard(check_id)
        token = self._tokens.pop(check_id, None)
        if self.redis_client and token:
            try:
                await self.redis_client.eval(RELEASE_SCRIPT, 1, self._key(check_id), token)
            except RedisError as e:
                logger.error(
                    "Error releasing Redis lock",
                    extra={"check_id": check_id, "error": str(e)}
                )

    async def test_connection(self) -> bool:
        """
        Ping Redis, disabling it on failure so in-memory locks are used.

        Returns:
            bool: True if Redis is connected and working
        """
        if not self.redis_client:
            return False

        try:
            await self.redis_client.ping()
            logger.info("Redis connection verified successfully")
            return True
        except RedisError as e:
            logger.error(
                "Redis connectivity test failed, disabling Redis client",
                extra={"error": str(e)}
            )
            self.redis_client = None
            return False

    async def close(self) -> None:
        """Close Redis connection if present."""
        if self.redis_client:
            try:
                await self.redis_client.aclose()
            except RedisError as e:
                logger.error(f"Error closing Redis connection: {e}")
