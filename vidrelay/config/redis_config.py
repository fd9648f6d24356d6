"""
Redis Configuration

Redis holds video records and upload sessions and carries the job
runtime's pub/sub channels. REDIS_URL is the primary setting because the
same URL is handed to the transcoding job.
"""

import os
from typing import Optional

import redis

from vidrelay.infrastructure.redis_repository import RedisConnectionManager, RedisRepository

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class RedisConfig:
    """Redis settings read from the environment."""

    def __init__(self):
        self.url = os.getenv("REDIS_URL", DEFAULT_REDIS_URL)
        self.key_prefix = os.getenv("REDIS_KEY_PREFIX", "")
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))

        # Individual settings override the URL, matching docker-compose setups
        parsed = redis.connection.parse_url(self.url)
        self.host = os.getenv("REDIS_HOST", parsed.get("host", "localhost"))
        self.port = int(os.getenv("REDIS_PORT", parsed.get("port", 6379)))
        self.db = int(os.getenv("REDIS_DB", parsed.get("db", 0)))
        self.password = os.getenv("REDIS_PASSWORD", parsed.get("password"))


_redis_manager: Optional[RedisConnectionManager] = None
_key_prefix = ""


def init_redis(config: Optional[RedisConfig] = None) -> RedisConnectionManager:
    """
    Create the process-wide connection pool.

    Args:
        config: Redis configuration, read from the environment if None
    """
    global _redis_manager, _key_prefix

    config = config or RedisConfig()
    _key_prefix = config.key_prefix
    _redis_manager = RedisConnectionManager(
        host=config.host,
        port=config.port,
        db=config.db,
        max_connections=config.max_connections,
        password=config.password,
    )
    return _redis_manager


def get_redis_client() -> redis.Redis:
    """
    Pooled client for repository commands.

    Raises:
        RuntimeError: If init_redis() was not called
    """
    if _redis_manager is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")

    return _redis_manager.client


def get_pubsub_client() -> redis.Redis:
    """
    Client for the event bus listener.

    Shares the pool; the subscription holds one of its connections for as
    long as the listener runs.
    """
    return redis.Redis(connection_pool=get_redis_client().connection_pool)


def get_redis_repository() -> RedisRepository:
    """RedisRepository using the configured key prefix."""
    return RedisRepository(get_redis_client(), _key_prefix)


def redis_health_check() -> bool:
    """True when Redis answers a ping."""
    if _redis_manager is None:
        return False

    return _redis_manager.health_check()
