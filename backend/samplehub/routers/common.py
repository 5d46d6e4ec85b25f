"""
Helpers shared by the principal and catalog routers.
"""
from typing import Any

from fastapi import Request, Response

from samplehub.config import Settings
from samplehub.core.cookies import set_token_cookies
from samplehub.core.rate_limit import enforce_rate_limit
from samplehub.core.tokens import TokenService, TokenType
from samplehub.schemas.auth import SessionTokens


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def limit_attempts(request: Request, redis, endpoint: str, settings: Settings) -> None:
    """Apply the login rate limit to credential-guessing endpoints."""
    await enforce_rate_limit(
        redis,
        get_client_ip(request),
        endpoint,
        limit=settings.login_rate_limit_attempts,
        window_seconds=settings.login_rate_limit_window_seconds,
    )


def deliver_session(
    response: Response,
    session: SessionTokens,
    tokens: TokenService,
    settings: Settings,
    message: str,
) -> dict[str, Any]:
    """Set both token cookies and build the token envelope."""
    for kind, token in (
        (TokenType.ACCESS, session.access_token),
        (TokenType.REFRESH, session.refresh_token),
    ):
        max_age = int(tokens.ttl(kind).total_seconds())
        set_token_cookies(response, kind, token, max_age, settings)
    return {"success": True, "message": message, "results": {"token": session.access_token}}


def envelope(result: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, **result}
