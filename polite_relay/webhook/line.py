"""LINE Messaging API gateway.

Verifies webhook signatures and delivers replies and loading indicators.
Delivery is fire-and-forget: response bodies are ignored and nothing is
retried.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from collections.abc import Sequence

import httpx

from polite_relay.models import OutboundMessage

logger = logging.getLogger(__name__)

_LINE_API_BASE = "https://api.line.me/v2/bot"


class LineRelay:
    """Outbound calls to the LINE Messaging API."""

    def __init__(
        self,
        access_token: str,
        channel_secret: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._access_token = access_token
        self._channel_secret = channel_secret
        self._timeout = timeout

    @property
    def verifies_signatures(self) -> bool:
        return self._channel_secret is not None

    def verify_signature(self, headers: dict[str, str], body: bytes) -> bool:
        """Verify the ``x-line-signature`` header.

        The signature is the base64 HMAC-SHA256 digest of the raw body keyed
        with the channel secret. Compared in constant time.
        """
        if self._channel_secret is None:
            return True
        signature = headers.get("x-line-signature", "")
        if not signature:
            return False
        expected = base64.b64encode(
            hmac.new(self._channel_secret.encode(), body, hashlib.sha256).digest(),
        ).decode()
        return hmac.compare_digest(signature, expected)

    async def send_reply(self, reply_token: str, messages: Sequence[OutboundMessage]) -> None:
        """Reply to an event. Transport errors propagate; HTTP errors are logged."""
        payload = {
            "replyToken": reply_token,
            "messages": [message.to_payload() for message in messages],
        }
        resp = await self._post(f"{_LINE_API_BASE}/message/reply", payload)
        if resp.status_code >= 400:
            logger.warning("LINE reply rejected: %s %s", resp.status_code, resp.text)

    async def start_loading(self, chat_id: str, loading_seconds: int) -> None:
        """Show the typing indicator in a one-on-one chat."""
        payload = {"chatId": chat_id, "loadingSeconds": loading_seconds}
        resp = await self._post(f"{_LINE_API_BASE}/chat/loading/start", payload)
        if resp.status_code >= 400:
            logger.warning("LINE loading indicator rejected: %s", resp.status_code)

    async def _post(self, url: str, payload: dict[str, object]) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(verify=True, timeout=self._timeout) as client:
            return await client.post(url, json=payload, headers=headers)
