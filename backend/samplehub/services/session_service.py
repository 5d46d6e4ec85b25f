"""
Session issuance: login, registration, token refresh, logout, password
recovery and OTP login.

One SessionService serves one principal family (users or admins); the
store it is built with decides which collection is searched and which
roles its refresh tokens may carry.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from samplehub.config import Settings
from samplehub.core.exceptions import (
    AccountBlocked,
    Conflict,
    ConflictingCredentials,
    InvalidCredentials,
    InvalidRequest,
    InvalidToken,
    NotFound,
    PermissionDenied,
    SamePassword,
    Unauthenticated,
)
from samplehub.core.security import generate_otp
from samplehub.core.tokens import TokenService, TokenType
from samplehub.database.documents import utcnow
from samplehub.models.principal import AccountStatus, Principal, UserRole
from samplehub.schemas.auth import LoginRequest, RegisterRequest, SessionTokens
from samplehub.services.credential_store import CONFLICT_MESSAGES, PrincipalStore
from samplehub.services.notifier import Notifier, Template
from samplehub.services.otp_service import OtpService
from samplehub.services.token_registry import RefreshTokenRegistry

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = (
    "If your email exist, then the Password reset link will be sent to your email"
)


def _identifier_label(request: LoginRequest) -> str:
    if request.email:
        return "Email"
    if request.phone:
        return "Phone"
    return "Username"


def _require_digits(value: Optional[str], message: str) -> str:
    if not value or not str(value).isdigit():
        raise InvalidRequest(message)
    return str(value)


class SessionService:
    """Credential exchange for one principal family."""

    def __init__(
        self,
        store: PrincipalStore,
        tokens: TokenService,
        registry: RefreshTokenRegistry,
        notifier: Notifier,
        settings: Settings,
    ):
        self.store = store
        self.tokens = tokens
        self.registry = registry
        self.notifier = notifier
        self.settings = settings
        self.otp = OtpService(store, notifier, settings) if store.supports_otp else None

    def issue_session(self, principal: Principal) -> SessionTokens:
        """Sign a fresh access and refresh token pair for a principal."""
        return SessionTokens(
            access_token=self.tokens.issue(
                principal.id, principal.name, principal.role, TokenType.ACCESS
            ),
            refresh_token=self.tokens.issue(
                principal.id, principal.name, principal.role, TokenType.REFRESH
            ),
        )

    # ==================== Password login ====================

    async def login(self, request: LoginRequest) -> SessionTokens:
        """
        Authenticate by username, email or phone plus password.

        Args:
            request: Login request; any one identifier is enough

        Returns:
            SessionTokens with access and refresh tokens

        Raises:
            InvalidRequest: If no identifier, a non-numeric phone or no password
            AccountBlocked: If the account is blocked
            InvalidCredentials: If no principal matches or the password is wrong
        """
        label = _identifier_label(request)
        if (
            not (request.username or request.email or request.phone)
            or (request.phone and not request.phone.isdigit())
            or not request.password
        ):
            raise InvalidRequest(f"Provide {label} and password")

        principal = await self.store.find_by_identifiers(
            username=request.username.lower() if request.username else None,
            email=request.email.lower() if request.email else None,
            phone=request.phone,
        )
        if principal is None:
            raise InvalidCredentials(f"Invalid {label} or Password")

        if principal.status == AccountStatus.BLOCKED.value:
            raise AccountBlocked()

        if not self.store.verify_password(principal, request.password):
            raise InvalidCredentials(f"Invalid {label} or Password")

        now = utcnow()
        if principal.status == AccountStatus.INACTIVE.value:
            principal.status = AccountStatus.ACTIVE.value
        principal.password_changed = False
        principal.last_sync = now
        principal.last_used = now
        await self.store.save(principal, "status", "password_changed", "last_sync", "last_used")

        logger.info("%s %s logged in", self.store.label, principal.code)
        return self.issue_session(principal)

    async def register(self, request: RegisterRequest) -> SessionTokens:
        """
        Create a user account with a chosen password and log it in.

        Raises:
            Conflict: If the username, phone or email is taken
        """
        username = request.username.lower()
        email = request.email.lower()
        conflict = await self.store.find_conflict(
            username=username, email=email, phone=request.phone
        )
        if conflict:
            raise Conflict(CONFLICT_MESSAGES[conflict])

        principal = await self.store.create(
            name=request.name,
            username=username,
            email=email,
            phone=request.phone,
            password=request.password,
            role=UserRole.USER.value,
            otp=generate_otp(),
        )
        return self.issue_session(principal)

    # ==================== Refresh / logout ====================

    async def refresh(
        self,
        access_cookie: Optional[str],
        refresh_cookie: Optional[str],
    ) -> SessionTokens:
        """
        Exchange a refresh token for a new token pair.

        The presented refresh token is revoked, so each one works once.

        Raises:
            Unauthenticated: If no usable refresh token is presented
            ConflictingCredentials: If both cookies are presented
        """
        if access_cookie and refresh_cookie:
            raise ConflictingCredentials()
        if not refresh_cookie:
            raise Unauthenticated()

        try:
            payload = self.tokens.verify(refresh_cookie, TokenType.REFRESH)
        except InvalidToken:
            raise Unauthenticated()
        if payload.role not in self.store.roles:
            raise Unauthenticated()
        if not await self.registry.revoke(payload.jti, self._seconds_left(payload.exp)):
            logger.warning("Revoked refresh token presented for %s", payload.id)
            raise Unauthenticated()

        try:
            principal = await self.store.check_status(
                payload.id, [AccountStatus.ACTIVE.value]
            )
        except NotFound:
            raise Unauthenticated()
        return self.issue_session(principal)

    async def logout(self, refresh_cookie: Optional[str]) -> None:
        """Revoke the presented refresh token, if it is still valid."""
        if not refresh_cookie:
            return
        try:
            payload = self.tokens.verify(refresh_cookie, TokenType.REFRESH)
        except InvalidToken:
            logger.debug("Logout with an unusable refresh token")
            return
        await self.registry.revoke(payload.jti, self._seconds_left(payload.exp))

    @staticmethod
    def _seconds_left(exp: int) -> int:
        remaining = exp - int(datetime.now(timezone.utc).timestamp())
        return max(remaining, 1)

    # ==================== Password recovery ====================

    async def forgot_password(self, email: Optional[str]) -> str:
        """
        Start a password reset.

        The response is the same whether or not the email is known.

        Returns:
            The message to show the caller
        """
        if not email:
            raise InvalidRequest("Please Provide Email")

        principal = await self.store.find_by_email(email)
        if principal is not None:
            principal.reset_password_access = True
            await self.store.save(principal, "reset_password_access")
            token = self.tokens.issue(
                principal.id, principal.name, principal.role, TokenType.RESET
            )
            self.notifier.send_email(
                principal.email,
                Template.RESET_PASSWORD,
                {"name": principal.name, "token": token},
            )
        return FORGOT_PASSWORD_MESSAGE

    async def reset_password(self, token: Optional[str], password: Optional[str]) -> None:
        """
        Complete a password reset with the emailed token.

        Raises:
            InvalidRequest: If token or password is missing
            InvalidToken: If the token does not verify as a reset token
            PermissionDenied: If no reset was requested for the principal
            SamePassword: If the new password equals the current one
        """
        if not token or not password:
            raise InvalidRequest("Please Provide Token and Password")

        payload = self.tokens.verify(token, TokenType.RESET)
        principal = await self.store.find_by_id(payload.id, reset_password_access=True)
        if principal is None:
            raise PermissionDenied("Reset Password Permission Denied")

        if self.store.verify_password(principal, password):
            raise SamePassword()

        principal.reset_password_access = False
        await self.store.set_password(principal, password, "reset_password_access")

    # ==================== OTP login ====================

    def _require_otp(self) -> OtpService:
        if self.otp is None:
            raise InvalidRequest(f"OTP login is not available for {self.store.label}")
        return self.otp

    async def send_otp(self, phone: Optional[str]) -> None:
        """Send a fresh login code to the principal owning the phone."""
        otp = self._require_otp()
        phone = _require_digits(phone, "Provide valid phone")
        principal = await self.store.find_by_phone(phone)
        if principal is None:
            raise NotFound(f"{self.store.label} not found")
        await otp.send(principal)

    async def verify_otp_login(self, phone: Optional[str], code: Optional[str]) -> SessionTokens:
        """
        Log in with a phone number and the code sent to it.

        Raises:
            InvalidRequest: If phone or code is missing or not numeric
            NotFound: If no principal owns the phone
            AccountBlocked: If the account is blocked
            OtpLockedOut, OtpExpired: From the OTP state machine
            InvalidCredentials: If the code does not match
        """
        otp = self._require_otp()
        if not phone or not code or not str(phone).isdigit() or not str(code).isdigit():
            raise InvalidRequest("Provide valid phone and otp")

        principal = await self.store.find_by_phone(phone)
        if principal is None:
            raise NotFound(f"{self.store.label} not found")
        if principal.status == AccountStatus.BLOCKED.value:
            raise AccountBlocked()

        result = await otp.verify(principal, code)
        if not result.verified:
            raise InvalidCredentials("Invalid OTP")

        principal = await self.store.check_status(principal.id, [AccountStatus.ACTIVE.value])
        return self.issue_session(principal)
