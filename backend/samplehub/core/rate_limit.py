"""
Rate limiting backed by Redis fixed-window counters.
"""
import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from samplehub.core.exceptions import RateLimited

logger = logging.getLogger(__name__)


async def check_rate_limit(
    redis: Redis,
    ip: str,
    endpoint: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Count a request against the per-IP window of an endpoint.

    Key pattern: "ratelimit:{endpoint}:{ip}", INCR with EXPIRE on the first hit.
    Redis outages let the request through.

    Args:
        redis: Redis client
        ip: Client IP address
        endpoint: Endpoint identifier (e.g., "user:login")
        limit: Max requests allowed in the window
        window_seconds: Window length in seconds

    Returns:
        True if the request is allowed, False if rate limited
    """
    key = f"ratelimit:{endpoint}:{ip}"
    try:
        current = await redis.incr(key)
        if current == 1:
            await redis.expire(key, window_seconds)
    except RedisError as exc:
        logger.warning("Rate limit check skipped for %s: %s", endpoint, exc)
        return True
    return current <= limit


async def enforce_rate_limit(
    redis: Redis,
    ip: str,
    endpoint: str,
    limit: int,
    window_seconds: int,
) -> None:
    """Raise RateLimited when the caller is over the limit."""
    if not await check_rate_limit(redis, ip, endpoint, limit, window_seconds):
        logger.info("Rate limit exceeded on %s", endpoint)
        raise RateLimited()
