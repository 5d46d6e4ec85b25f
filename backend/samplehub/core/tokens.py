"""
Signed token issuance and verification.

Four token kinds share one claim layout but each is signed with its own
secret and carries its own lifetime, so a token of one kind never verifies
as another.
"""
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from samplehub.config import Settings
from samplehub.core.exceptions import InvalidSignature, TokenExpiredError
from samplehub.schemas.auth import TokenPayload


class TokenType(str, Enum):
    ACCESS = "AccessToken"
    REFRESH = "RefreshToken"
    ACTIVATION = "ActivationToken"
    RESET = "ResetToken"


_SETTING_PREFIX = {
    TokenType.ACCESS: "jwt_access_token",
    TokenType.REFRESH: "jwt_refresh_token",
    TokenType.ACTIVATION: "jwt_activation_token",
    TokenType.RESET: "jwt_reset_token",
}


class TokenService:
    """Issue and verify HS256 tokens for every token kind."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _secret(self, kind: TokenType) -> str:
        return getattr(self.settings, f"{_SETTING_PREFIX[kind]}_secret")

    def ttl(self, kind: TokenType) -> timedelta:
        """Lifetime of a token of the given kind."""
        return timedelta(
            seconds=getattr(self.settings, f"{_SETTING_PREFIX[kind]}_expire_seconds")
        )

    def issue(
        self,
        principal_id: str,
        display_name: str,
        role: str,
        kind: TokenType,
    ) -> str:
        """
        Create a signed token.

        Args:
            principal_id: ObjectId of the principal as string
            display_name: Principal name, carried as the audience claim
            role: Principal role
            kind: Token kind selecting secret and lifetime

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "id": str(principal_id),
            "role": role,
            "typ": TokenType(kind).value,
            "jti": uuid.uuid4().hex,
            "aud": display_name,
            "iss": self.settings.jwt_token_issuer,
            "iat": now,
            "exp": now + self.ttl(kind),
        }
        return jwt.encode(
            payload,
            self._secret(kind),
            algorithm=self.settings.jwt_algorithm,
        )

    def verify(self, token: str, kind: TokenType) -> TokenPayload:
        """
        Decode and validate a token of the given kind.

        Raises:
            TokenExpiredError: If the token is past its expiry
            InvalidSignature: If the signature, issuer, kind or claims are wrong
        """
        if not token:
            raise InvalidSignature()
        try:
            claims = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.settings.jwt_algorithm],
                issuer=self.settings.jwt_token_issuer,
                options={"verify_aud": False},
            )
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError:
            raise InvalidSignature()

        if claims.get("typ") != TokenType(kind).value:
            raise InvalidSignature()
        try:
            return TokenPayload(**claims)
        except ValidationError:
            raise InvalidSignature()
