"""
Tests for the mail/SMS notifier.

Deliveries go through an httpx.MockTransport so no gateway is contacted.
"""

import json

import httpx
import pytest

from samplehub.services.notifier import Notifier, Template


def _notifier_with_transport(settings, handler) -> Notifier:
    notifier = Notifier(settings)
    notifier._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return notifier


class TestNotifierDelivery:
    """Tests for Notifier.dispatch and its background deliveries."""

    @pytest.mark.asyncio
    async def test_posts_messages_to_gateway(self, test_settings):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        settings = test_settings.model_copy(update={"notify_webhook_url": "http://gateway.test/send"})
        notifier = _notifier_with_transport(settings, handler)

        notifier.send_email("a@example.com", Template.RESET_PASSWORD, {"link": "x"})
        notifier.send_sms("9000000000", "Your OTP is 123456")
        await notifier.close()

        assert {"channel": "email", "to": "a@example.com", "template": "ResetPassword",
                "data": {"link": "x"}} in received
        assert {"channel": "sms", "to": "9000000000", "message": "Your OTP is 123456"} in received

    @pytest.mark.asyncio
    async def test_gateway_failure_is_logged_not_raised(self, test_settings, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        settings = test_settings.model_copy(update={"notify_webhook_url": "http://gateway.test/send"})
        notifier = _notifier_with_transport(settings, handler)

        notifier.send_sms("9000000000", "hello")
        await notifier.drain()
        await notifier.close()

        assert "Delivery of sms to 9000000000 failed" in caplog.text

    @pytest.mark.asyncio
    async def test_without_gateway_messages_are_dropped(self, test_settings, caplog):
        import logging

        caplog.set_level(logging.INFO, logger="samplehub.services.notifier")
        notifier = Notifier(test_settings)

        notifier.send_email("a@example.com", Template.SEND_CREDENTIALS, {"password": "123456"})
        await notifier.close()

        assert "No gateway configured, dropped SendCredentials for a@example.com" in caplog.text
        assert "123456" not in caplog.text
