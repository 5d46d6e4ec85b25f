"""
Tests for the OTP lifecycle.

These tests walk the verification state machine:
- Match clears counters and rotates the code
- Mismatches are counted and the limit locks at once
- A lock lifts after the reset window
- Expired or never-sent codes trigger a new one
"""

from datetime import timedelta
from unittest.mock import patch

import pytest

from samplehub.core.exceptions import OtpExpired, OtpLockedOut
from samplehub.database.documents import utcnow

KNOWN_CODE = "123456"


@pytest.fixture
def known_code():
    """Make the next generated code predictable."""
    with patch("samplehub.services.otp_service.generate_otp", return_value=KNOWN_CODE):
        yield KNOWN_CODE


class TestOtpIssue:
    """Tests for OtpService.issue / send."""

    @pytest.mark.asyncio
    async def test_issue_stores_only_hash(self, otp_service, create_user, user_store, known_code):
        user = await create_user()

        code = await otp_service.issue(user)
        stored = await user_store.find_by_id(user.id)

        assert code == known_code
        assert stored.otp != known_code
        assert stored.otp.startswith("$2b$04$")
        assert stored.otp_sent_at is not None

    @pytest.mark.asyncio
    async def test_send_delivers_code_by_sms(self, otp_service, create_user, notifier, known_code):
        user = await create_user()

        await otp_service.send(user)

        sms = notifier.of_channel("sms")
        assert len(sms) == 1
        assert sms[0]["to"] == user.phone
        assert known_code in sms[0]["message"]


class TestOtpVerify:
    """Tests for OtpService.verify state machine."""

    @pytest.mark.asyncio
    async def test_matching_code_verifies_and_rotates(
        self, otp_service, create_user, user_store, known_code
    ):
        user = await create_user()
        await otp_service.issue(user)
        user.failed_otp_attempts = 2
        await user_store.save(user, "failed_otp_attempts")
        previous_hash = user.otp

        result = await otp_service.verify(user, known_code)
        stored = await user_store.find_by_id(user.id)

        assert result.verified is True
        assert stored.failed_otp_attempts == 0
        assert stored.failed_otp_verify_at is None
        assert stored.otp != previous_hash

    @pytest.mark.asyncio
    async def test_mismatch_is_counted(self, otp_service, create_user, user_store, known_code):
        user = await create_user()
        await otp_service.issue(user)

        result = await otp_service.verify(user, "654321")
        stored = await user_store.find_by_id(user.id)

        assert result.verified is False
        assert stored.failed_otp_attempts == 1
        assert stored.failed_otp_verify_at is not None

    @pytest.mark.asyncio
    async def test_limit_locks_even_the_right_code(
        self, otp_service, create_user, test_settings, known_code
    ):
        user = await create_user()
        await otp_service.issue(user)

        for _ in range(test_settings.otp_max_failed_attempts):
            result = await otp_service.verify(user, "654321")
            assert result.verified is False

        with pytest.raises(OtpLockedOut) as exc_info:
            await otp_service.verify(user, known_code)

        assert "reached 5 times" in exc_info.value.message
        assert "5 hours" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_lock_lifts_after_window(
        self, otp_service, create_user, user_store, test_settings, known_code
    ):
        user = await create_user()
        await otp_service.issue(user)
        user.failed_otp_attempts = test_settings.otp_max_failed_attempts
        user.failed_otp_verify_at = utcnow() - timedelta(hours=test_settings.otp_failed_reset_hours)
        await user_store.save(user, "failed_otp_attempts", "failed_otp_verify_at")

        result = await otp_service.verify(user, known_code)

        assert result.verified is True
        stored = await user_store.find_by_id(user.id)
        assert stored.failed_otp_attempts == 0

    @pytest.mark.asyncio
    async def test_lock_message_rounds_hours_up(
        self, otp_service, create_user, test_settings
    ):
        user = await create_user()
        await otp_service.issue(user)
        user.failed_otp_attempts = test_settings.otp_max_failed_attempts
        user.failed_otp_verify_at = utcnow() - timedelta(hours=4, minutes=30)

        with pytest.raises(OtpLockedOut) as exc_info:
            await otp_service.verify(user, "123456")

        assert exc_info.value.message.endswith("try again after 1 hour")

    @pytest.mark.asyncio
    async def test_expired_code_sends_a_new_one(
        self, otp_service, create_user, notifier, test_settings, known_code
    ):
        user = await create_user()
        await otp_service.issue(user)
        user.otp_sent_at = utcnow() - timedelta(minutes=test_settings.otp_expire_minutes)

        with pytest.raises(OtpExpired):
            await otp_service.verify(user, known_code)

        assert len(notifier.of_channel("sms")) == 1

    @pytest.mark.asyncio
    async def test_never_sent_code_counts_as_expired(self, otp_service, create_user, notifier):
        user = await create_user()
        user.otp_sent_at = None

        with pytest.raises(OtpExpired):
            await otp_service.verify(user, "123456")

        assert len(notifier.of_channel("sms")) == 1
