"""
One-time code lifecycle for OTP login.

Verification is a small state machine over the principal's counters:

    LockedOut  too many failures inside the reset window
    Expired    no code sent, or the code is older than its lifetime
    Match      code accepted, rotated, counters cleared
    Mismatch   failure counted; the attempt reaching the limit locks at once

A lock lifts by itself once the reset window has passed since the last
failure; the counter is then re-armed from zero.
"""
import logging
import math
from datetime import timedelta

from samplehub.config import Settings
from samplehub.core.exceptions import OtpExpired, OtpLockedOut
from samplehub.core.security import generate_otp, verify_secret
from samplehub.database.documents import ensure_utc, utcnow
from samplehub.models.principal import Principal
from samplehub.schemas.auth import OtpVerification
from samplehub.services.credential_store import PrincipalStore
from samplehub.services.notifier import Notifier

logger = logging.getLogger(__name__)


class OtpService:
    """Issue and verify one-time codes for principals that support them."""

    def __init__(self, store: PrincipalStore, notifier: Notifier, settings: Settings):
        self.store = store
        self.notifier = notifier
        self.settings = settings

    @property
    def expiry(self) -> timedelta:
        return timedelta(minutes=self.settings.otp_expire_minutes)

    @property
    def lockout_window(self) -> timedelta:
        return timedelta(hours=self.settings.otp_failed_reset_hours)

    async def issue(self, principal: Principal, *extra_fields: str) -> str:
        """
        Generate a fresh code, replacing any previous one.

        Only the bcrypt hash is stored. Extra fields already changed on the
        principal are persisted in the same write.

        Returns:
            The plaintext code, for delivery
        """
        code = generate_otp()
        principal.otp = self.store.hash_secret(code)
        principal.otp_sent_at = utcnow()
        await self.store.save(principal, "otp", "otp_sent_at", *extra_fields)
        return code

    async def send(self, principal: Principal) -> None:
        """Issue a code and deliver it by SMS."""
        code = await self.issue(principal)
        self.notifier.send_sms(
            principal.phone,
            f"Your verification code is {code}. It expires in "
            f"{self.settings.otp_expire_minutes} minutes.",
        )

    def _lockout_remaining(self, principal: Principal) -> timedelta:
        """Time left on an active lock, zero when not locked."""
        if principal.failed_otp_attempts < self.settings.otp_max_failed_attempts:
            return timedelta(0)
        failed_at = ensure_utc(principal.failed_otp_verify_at)
        if failed_at is None:
            return timedelta(0)
        remaining = self.lockout_window - (utcnow() - failed_at)
        return max(remaining, timedelta(0))

    async def verify(self, principal: Principal, submitted: str) -> OtpVerification:
        """
        Check a submitted code against the principal's current one.

        Args:
            principal: Principal loaded with its OTP fields
            submitted: The code entered by the caller

        Returns:
            OtpVerification with verified=False on a mismatch

        Raises:
            OtpLockedOut: If the failure limit was reached inside the window
            OtpExpired: If no live code exists (a new one is sent)
        """
        limit = self.settings.otp_max_failed_attempts

        remaining = self._lockout_remaining(principal)
        if remaining > timedelta(0):
            hours = max(math.ceil(remaining.total_seconds() / 3600), 1)
            raise OtpLockedOut(
                f"Incorrect OTP attempts reached {limit} times, "
                f"try again after {hours} hour{'s' if hours != 1 else ''}"
            )
        if principal.failed_otp_attempts >= limit:
            principal.failed_otp_attempts = 0
            await self.store.save(principal, "failed_otp_attempts")

        sent_at = ensure_utc(principal.otp_sent_at)
        if sent_at is None or utcnow() - sent_at >= self.expiry:
            await self.send(principal)
            raise OtpExpired()

        if verify_secret(str(submitted), principal.otp):
            principal.failed_otp_attempts = 0
            principal.failed_otp_verify_at = None
            await self.issue(principal, "failed_otp_attempts", "failed_otp_verify_at")
            return OtpVerification(verified=True)

        principal.failed_otp_attempts += 1
        principal.failed_otp_verify_at = utcnow()
        await self.store.save(principal, "failed_otp_attempts", "failed_otp_verify_at")
        if principal.failed_otp_attempts >= limit:
            logger.warning("OTP locked for %s %s", self.store.label.lower(), principal.code)
        return OtpVerification(verified=False)
