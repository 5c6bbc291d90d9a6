"""
Redis client wrapper and utilities.

This module provides a centralized Redis client with:
- Connection management
- Health checking
- The handful of operations the key-value identity store needs
  (get, set with NX, incr, delete, key scanning)

Every operation converts redis-py errors into RedisException.
"""

import redis
from typing import Optional, Dict, Any, Iterator
import logging

from faction_badges.core.exceptions import RedisException

logger = logging.getLogger('REDIS_CLIENT')


class RedisClient:
    """
    Wrapper class for Redis client.

    Provides a clean interface for Redis operations with
    proper error handling and connection management.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize Redis client.

        Args:
            redis_url: Redis connection URL
            client: Pre-built client (takes precedence over redis_url)

        Raises:
            RedisException: If the initial ping fails
        """
        self.redis_url = redis_url or "redis://localhost:6379/0"

        try:
            self._client = client if client is not None else redis.from_url(
                self.redis_url, decode_responses=True
            )
            # Test connection
            self._client.ping()
            logger.info(f"Redis connected at {self._masked_url()}")
        except Exception as e:
            logger.error(f"Redis connection failed: {e}")
            raise RedisException(f"Failed to connect to Redis at {self._masked_url()}") from e

    def _masked_url(self) -> str:
        return self.redis_url.split('@')[-1] if '@' in self.redis_url else self.redis_url

    @property
    def client(self) -> redis.Redis:
        """
        Get the underlying Redis client.

        Returns:
            redis.Redis: The Redis client instance
        """
        return self._client

    def ping(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            bool: True if connection is healthy

        Raises:
            RedisException: If ping fails
        """
        try:
            return self._client.ping()
        except Exception as e:
            raise RedisException("Ping check failed") from e

    # Basic Operations

    def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        try:
            return self._client.get(key)
        except Exception as e:
            raise RedisException(f"Failed to get key '{key}'") from e

    def set(self, key: str, value: str, ex: Optional[int] = None, nx: bool = False) -> bool:
        """
        Set key-value pair.

        Args:
            key: Redis key
            value: Value to store
            ex: Expiration time in seconds
            nx: Only set the key if it does not already exist

        Returns:
            bool: True if the value was written
        """
        try:
            return bool(self._client.set(key, value, ex=ex, nx=nx))
        except Exception as e:
            raise RedisException(f"Failed to set key '{key}'") from e

    def incr(self, key: str, amount: int = 1) -> int:
        """Atomically increment a counter and return the new value."""
        try:
            return int(self._client.incr(key, amount))
        except Exception as e:
            raise RedisException(f"Failed to incr key '{key}'") from e

    def delete(self, *keys: str) -> int:
        """Delete one or more keys."""
        try:
            return self._client.delete(*keys)
        except Exception as e:
            raise RedisException("Failed to delete keys") from e

    def scan_keys(self, pattern: str) -> Iterator[str]:
        """Iterate keys matching a glob pattern without blocking the server."""
        try:
            yield from self._client.scan_iter(match=pattern)
        except Exception as e:
            raise RedisException(f"Failed to scan keys matching '{pattern}'") from e

    def get_health_status(self) -> Dict[str, Any]:
        """
        Get Redis health status.

        Returns:
            dict: Health status information
        """
        try:
            self._client.ping()
            return {"status": "healthy", "redis_url": self._masked_url()}
        except Exception as e:
            return {
                "status": "unhealthy",
                "redis_url": self._masked_url(),
                "error": str(e),
            }
