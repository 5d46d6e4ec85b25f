"""
Tests for the token service and cookie delivery.

These tests verify:
- Every token kind round-trips with its own secret
- A token of one kind never verifies as another
- Expired, tampered and empty tokens are rejected
- Cookies are HTTP-only and carry a session flag
"""

import pytest
from bson import ObjectId
from fastapi import Response

from samplehub.core.exceptions import InvalidSignature, InvalidToken, TokenExpiredError
from samplehub.core.tokens import TokenService, TokenType


@pytest.fixture
def principal_id() -> str:
    return str(ObjectId())


class TestTokenIssue:
    """Tests for TokenService.issue / verify."""

    @pytest.mark.parametrize("kind", list(TokenType))
    def test_token_verifies_as_its_own_kind(self, token_service, principal_id, kind):
        token = token_service.issue(principal_id, "Alice", "User", kind)

        payload = token_service.verify(token, kind)

        assert payload.id == principal_id
        assert payload.role == "User"
        assert payload.typ == kind.value
        assert payload.aud == "Alice"
        assert payload.iss == "samplehub"
        assert payload.exp > payload.iat

    def test_tokens_have_unique_ids(self, token_service, principal_id):
        first = token_service.verify(
            token_service.issue(principal_id, "Alice", "User", TokenType.REFRESH), TokenType.REFRESH
        )
        second = token_service.verify(
            token_service.issue(principal_id, "Alice", "User", TokenType.REFRESH), TokenType.REFRESH
        )

        assert first.jti != second.jti

    def test_access_token_is_not_a_refresh_token(self, token_service, principal_id):
        token = token_service.issue(principal_id, "Alice", "User", TokenType.ACCESS)

        with pytest.raises(InvalidSignature):
            token_service.verify(token, TokenType.REFRESH)

    def test_same_secret_different_kind_is_rejected(self, test_settings, principal_id):
        """Even with shared secrets the typ claim keeps kinds apart."""
        settings = test_settings.model_copy(
            update={"jwt_reset_token_secret": test_settings.jwt_access_token_secret}
        )
        service = TokenService(settings)
        token = service.issue(principal_id, "Alice", "User", TokenType.ACCESS)

        with pytest.raises(InvalidSignature):
            service.verify(token, TokenType.RESET)

    def test_expired_token_raises_token_expired(self, test_settings, principal_id):
        settings = test_settings.model_copy(update={"jwt_reset_token_expire_seconds": -60})
        service = TokenService(settings)
        token = service.issue(principal_id, "Alice", "User", TokenType.RESET)

        with pytest.raises(TokenExpiredError):
            service.verify(token, TokenType.RESET)

    def test_tampered_token_is_rejected(self, token_service, principal_id):
        token = token_service.issue(principal_id, "Alice", "User", TokenType.ACCESS)
        tampered = token[:-2] + ("AA" if token[-2:] != "AA" else "BB")

        with pytest.raises(InvalidToken):
            token_service.verify(tampered, TokenType.ACCESS)

    def test_foreign_issuer_is_rejected(self, test_settings, principal_id):
        other = TokenService(test_settings.model_copy(update={"jwt_token_issuer": "someone-else"}))
        token = other.issue(principal_id, "Alice", "User", TokenType.ACCESS)

        with pytest.raises(InvalidSignature):
            TokenService(test_settings).verify(token, TokenType.ACCESS)

    @pytest.mark.parametrize("token", ["", "not-a-jwt"])
    def test_garbage_is_rejected(self, token_service, token):
        with pytest.raises(InvalidSignature):
            token_service.verify(token, TokenType.ACCESS)

    def test_ttl_reads_kind_setting(self, test_settings):
        settings = test_settings.model_copy(update={"jwt_access_token_expire_seconds": 900})

        assert TokenService(settings).ttl(TokenType.ACCESS).total_seconds() == 900


class TestTokenCookies:
    """Tests for samplehub.core.cookies."""

    def test_set_token_cookies_sets_http_only_pair(self, test_settings):
        from samplehub.core.cookies import set_token_cookies

        response = Response()
        set_token_cookies(response, TokenType.ACCESS, "abc", 3600, test_settings)

        cookies = response.headers.getlist("set-cookie")
        token_cookie = next(c for c in cookies if c.startswith("AccessToken="))
        session_cookie = next(c for c in cookies if c.startswith("AccessSession="))
        assert "abc" in token_cookie
        assert "HttpOnly" in token_cookie
        assert "SameSite=strict" in token_cookie
        assert "Max-Age=3600" in token_cookie
        assert "Secure" not in token_cookie
        assert "true" in session_cookie

    def test_cookies_are_secure_in_production(self, test_settings):
        from samplehub.core.cookies import set_token_cookies

        settings = test_settings.model_copy(update={"environment": "production"})
        response = Response()
        set_token_cookies(response, TokenType.REFRESH, "abc", 60, settings)

        token_cookie = next(
            c for c in response.headers.getlist("set-cookie") if c.startswith("RefreshToken=")
        )
        assert "Secure" in token_cookie

    def test_reset_tokens_are_not_cookies(self, test_settings):
        from samplehub.core.cookies import set_token_cookies

        with pytest.raises(ValueError):
            set_token_cookies(Response(), TokenType.RESET, "abc", 60, test_settings)

    def test_clear_token_cookies_expires_all(self, test_settings):
        from samplehub.core.cookies import clear_token_cookies

        response = Response()
        clear_token_cookies(response, test_settings)

        names = {c.split("=", 1)[0] for c in response.headers.getlist("set-cookie")}
        assert names == {"AccessToken", "AccessSession", "RefreshToken", "RefreshSession"}
