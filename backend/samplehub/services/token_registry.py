"""
Revocation list for refresh tokens, kept in Redis.

A refresh token is single use: once exchanged (or presented at logout) its
jti is recorded until the token would have expired anyway.
"""
from redis.asyncio import Redis

REVOKED_KEY_PREFIX = "revoked_refresh"


class RefreshTokenRegistry:
    def __init__(self, redis: Redis):
        self.redis = redis

    @staticmethod
    def _key(jti: str) -> str:
        return f"{REVOKED_KEY_PREFIX}:{jti}"

    async def revoke(self, jti: str, ttl_seconds: int) -> bool:
        """
        Record a jti as used.

        SET NX makes the claim atomic: of several concurrent callers with the
        same jti exactly one gets True.

        Returns:
            True if this call revoked the token, False if it already was
        """
        claimed = await self.redis.set(
            self._key(jti), "1", ex=max(int(ttl_seconds), 1), nx=True
        )
        return bool(claimed)
