"""
Out-of-band delivery of credentials, reset links and one-time codes.

Messages are posted as JSON to a mail/SMS gateway webhook when one is
configured. Delivery runs in background tasks: callers never wait on the
gateway and never see its failures.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

from samplehub.config import Settings

logger = logging.getLogger(__name__)


class Template:
    """Mail templates understood by the gateway."""
    SEND_CREDENTIALS = "SendCredentials"
    RESET_PASSWORD = "ResetPassword"


class Notifier:
    """
    Fire-and-forget mail and SMS sender.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[httpx.AsyncClient] = None
        self._tasks: set[asyncio.Task] = set()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with connection pooling."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.settings.notify_timeout_seconds)
        return self._client

    async def close(self) -> None:
        """Wait for pending deliveries, then close the HTTP client."""
        await self.drain()
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def send_email(self, recipient: str, template: str, data: dict[str, Any]) -> None:
        self.dispatch(
            {"channel": "email", "to": recipient, "template": template, "data": data}
        )

    def send_sms(self, phone: str, message: str) -> None:
        self.dispatch({"channel": "sms", "to": phone, "message": message})

    def dispatch(self, message: dict[str, Any]) -> None:
        """Schedule delivery of a message on the running event loop."""
        task = asyncio.create_task(self._deliver(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, message: dict[str, Any]) -> None:
        # Only channel, template and recipient are logged; payloads hold secrets
        label = message.get("template") or message["channel"]
        if not self.settings.notify_webhook_url:
            logger.info("No gateway configured, dropped %s for %s", label, message["to"])
            return
        try:
            client = await self._get_client()
            response = await client.post(self.settings.notify_webhook_url, json=message)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Delivery of %s to %s failed: %s", label, message["to"], exc)
            return
        logger.info("Delivered %s to %s", label, message["to"])
