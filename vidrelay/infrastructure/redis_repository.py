"""
Redis Repository Base Class

Provides JSON document storage, key scanning and Lua scripting helpers
shared by the Redis-backed repositories.
"""

import json
import logging
from typing import Any, Dict, Iterator, List, Optional

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with JSON helpers and key prefixing."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def _strip_key(self, redis_key) -> str:
        if isinstance(redis_key, bytes):
            redis_key = redis_key.decode("utf-8")
        if self.key_prefix:
            return redis_key[len(self.key_prefix) + 1:]
        return redis_key

    def set_json(self, key: str, data: Dict[str, Any], only_if_absent: bool = False) -> bool:
        """
        Set JSON data.

        Args:
            key: Redis key
            data: Dictionary to store as JSON
            only_if_absent: Refuse to overwrite an existing key (SET NX)

        Returns:
            True if written, False if the key existed (only_if_absent)

        Raises:
            RedisError: If Redis is unreachable
        """
        result = self.redis.set(self._make_key(key), json.dumps(data), nx=only_if_absent)
        return bool(result)

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found and valid JSON, None otherwise
        """
        data = self.redis.get(self._make_key(key))

        if data is None:
            return None

        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt JSON stored at {key}: {e}")
            return None

    def get_many_json(self, keys: List[str]) -> List[Dict[str, Any]]:
        """
        Get several JSON documents in one round trip.

        Missing or corrupt documents are omitted.
        """
        if not keys:
            return []

        pipeline = self.redis.pipeline()
        for key in keys:
            pipeline.get(self._make_key(key))

        documents = []
        for raw in pipeline.execute():
            if raw is None:
                continue
            try:
                documents.append(json.loads(raw))
            except json.JSONDecodeError as e:
                logger.error(f"Corrupt JSON in batch get: {e}")
        return documents

    def exists(self, key: str) -> bool:
        """Check if a key exists in Redis."""
        try:
            return self.redis.exists(self._make_key(key)) > 0
        except RedisConnectionError as e:
            logger.error(f"Error checking existence of key {key}: {e}")
            return False

    def scan_keys(self, pattern: str, count: int = 100) -> Iterator[str]:
        """
        Iterate keys matching a pattern using SCAN.

        Yields:
            Matching keys without prefix
        """
        for redis_key in self.redis.scan_iter(match=self._make_key(pattern), count=count):
            yield self._strip_key(redis_key)

    def add_to_set(self, key: str, members: List[Any]) -> bool:
        """Add members to a Redis set."""
        if not members:
            return True
        try:
            self.redis.sadd(self._make_key(key), *members)
            return True
        except RedisError as e:
            logger.error(f"Error adding members to set {key}: {e}")
            return False

    def get_set_members(self, key: str) -> List[str]:
        """Get all members of a Redis set as strings."""
        members = self.redis.smembers(self._make_key(key))
        return [
            member.decode("utf-8") if isinstance(member, bytes) else member
            for member in members
        ]

    def run_script(self, script: str, keys: List[str], args: List[Any]) -> Any:
        """
        Run a Lua script against prefixed keys.

        Args:
            script: Lua source
            keys: Unprefixed keys passed as KEYS
            args: Values passed as ARGV
        """
        redis_keys = [self._make_key(key) for key in keys]
        return self.redis.eval(script, len(redis_keys), *redis_keys, *args)


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 max_connections: int = 20, decode_responses: bool = False,
                 password: Optional[str] = None):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return self.client.ping()
        except RedisConnectionError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
