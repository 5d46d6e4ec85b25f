"""
Token delivery through HTTP-only cookies.
"""
from fastapi import Response

from samplehub.config import Settings
from samplehub.core.tokens import TokenType


def _cookie_names(kind: TokenType, settings: Settings) -> tuple[str, str]:
    if kind == TokenType.ACCESS:
        return settings.access_cookie_name, settings.access_session_cookie_name
    if kind == TokenType.REFRESH:
        return settings.refresh_cookie_name, settings.refresh_session_cookie_name
    raise ValueError(f"{kind} tokens are not delivered as cookies")


def set_token_cookies(
    response: Response,
    kind: TokenType,
    token: str,
    max_age: int,
    settings: Settings,
) -> None:
    """
    Attach a token cookie plus its session-flag cookie.

    The token cookie is HTTP-only and SameSite=strict, and secure in
    production. The flag cookie only tells the client a session exists.
    """
    token_name, session_name = _cookie_names(kind, settings)
    response.set_cookie(
        key=token_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    response.set_cookie(
        key=session_name,
        value="true",
        max_age=max_age,
        httponly=True,
    )


def clear_token_cookies(response: Response, settings: Settings) -> None:
    for name in (
        settings.access_cookie_name,
        settings.access_session_cookie_name,
        settings.refresh_cookie_name,
        settings.refresh_session_cookie_name,
    ):
        response.delete_cookie(name)
