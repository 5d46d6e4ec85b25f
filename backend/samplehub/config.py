"""
Application configuration loaded from environment variables.

Settings are built once (see ``get_settings``) and handed to the services
explicitly. Token secrets are mandatory outside development and test: a
missing secret refuses to start the application.
"""
import logging
import secrets
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# One Julian year, the lifetime used for every token kind unless overridden
ONE_YEAR_SECONDS = 31_557_600

TOKEN_SECRET_FIELDS = (
    "jwt_access_token_secret",
    "jwt_refresh_token_secret",
    "jwt_activation_token_secret",
    "jwt_reset_token_secret",
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    environment: Literal["development", "test", "staging", "production"] = "development"
    app_name: str = "SampleHub"
    log_level: str = "INFO"
    api_log_enabled: bool = False
    error_log_enabled: bool = False
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # MongoDB
    mongo_uri: str = "mongodb://mongodb:27017"
    mongo_timeout_ms: int = 5000

    # Redis
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    # JWT Configuration
    jwt_algorithm: str = "HS256"
    jwt_token_issuer: str = "samplehub"
    jwt_access_token_secret: Optional[str] = None
    jwt_refresh_token_secret: Optional[str] = None
    jwt_activation_token_secret: Optional[str] = None
    jwt_reset_token_secret: Optional[str] = None
    jwt_access_token_expire_seconds: int = ONE_YEAR_SECONDS
    jwt_refresh_token_expire_seconds: int = ONE_YEAR_SECONDS
    jwt_activation_token_expire_seconds: int = ONE_YEAR_SECONDS
    jwt_reset_token_expire_seconds: int = ONE_YEAR_SECONDS

    # Cookies
    access_cookie_name: str = "AccessToken"
    access_session_cookie_name: str = "AccessSession"
    refresh_cookie_name: str = "RefreshToken"
    refresh_session_cookie_name: str = "RefreshSession"

    # Password hashing
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # OTP
    otp_expire_minutes: int = 5
    otp_max_failed_attempts: int = 5
    otp_failed_reset_hours: int = 5

    # Rate Limiting
    login_rate_limit_attempts: int = 5
    login_rate_limit_window_seconds: int = 60

    # Mail / SMS gateway
    notify_webhook_url: Optional[str] = None
    notify_timeout_seconds: float = 10.0

    # Initial super admin, created on startup when no admin exists
    bootstrap_admin_name: Optional[str] = None
    bootstrap_admin_username: Optional[str] = None
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_phone: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None

    @model_validator(mode="after")
    def require_token_secrets(self) -> "Settings":
        """Fail closed on missing secrets; generate throwaway ones in development."""
        missing = [name for name in TOKEN_SECRET_FIELDS if not getattr(self, name)]
        if not missing:
            return self
        if self.environment not in ("development", "test"):
            raise ValueError(
                f"{', '.join(name.upper() for name in missing)} must be set "
                f"in the {self.environment} environment"
            )
        for name in missing:
            logger.warning(
                "%s is not set, using a random secret for this process", name.upper()
            )
            setattr(self, name, secrets.token_urlsafe(32))
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
