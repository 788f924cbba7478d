"""
Redis connection management for short-lived shared state.
"""

from redis import Redis
from redis.connection import ConnectionPool

from civicdesk.config.settings import settings

# Connections are opened lazily on first command
redis_pool = ConnectionPool.from_url(
    settings.REDIS_URL,
    max_connections=settings.REDIS_POOL_SIZE,
    decode_responses=True,  # Auto-decode Redis responses to strings
)


def get_redis_client() -> Redis:
    """Get Redis client with connection pooling"""
    return Redis(connection_pool=redis_pool)
