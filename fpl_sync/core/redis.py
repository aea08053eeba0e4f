"""
Redis client construction.

One ``redis.asyncio.Redis`` client (with its own connection pool) is created
at startup and injected into every ``EntityCache``.
"""
import logging

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def create_redis_client(redis_url: str, max_connections: int = 20) -> Redis:
    pool = ConnectionPool.from_url(
        redis_url,
        max_connections=max_connections,
        decode_responses=True,
    )
    return Redis(connection_pool=pool)


async def check_redis(client: Redis) -> bool:
    """Ping Redis; used by the health endpoint."""
    try:
        return bool(await client.ping())
    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return False
