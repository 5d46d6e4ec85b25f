"""
Process-wide MongoDB and Redis clients.

Both clients are created lazily from the application settings on first use
and released by the application lifespan through `close_connections`.
"""
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from redis.asyncio import Redis

from samplehub.config import get_settings

_mongo_client: Optional[AsyncIOMotorClient] = None
_redis_client: Optional[Redis] = None


async def get_mongo_client() -> AsyncIOMotorClient:
    """Get or create the MongoDB client."""
    global _mongo_client
    if _mongo_client is None:
        settings = get_settings()
        _mongo_client = AsyncIOMotorClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=settings.mongo_timeout_ms,
            appname=settings.app_name,
        )
    return _mongo_client


async def get_redis_client() -> Redis:
    """Get or create the Redis client. Responses are decoded to str."""
    global _redis_client
    if _redis_client is None:
        settings = get_settings()
        _redis_client = Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=True,
        )
    return _redis_client


async def ping_mongo() -> None:
    """Raise if MongoDB cannot be reached."""
    client = await get_mongo_client()
    await client.admin.command("ping")


async def ping_redis() -> None:
    """Raise if Redis cannot be reached."""
    redis = await get_redis_client()
    await redis.ping()


async def close_connections() -> None:
    global _mongo_client, _redis_client

    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
