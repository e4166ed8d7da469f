"""Shared test fixtures for polite-relay."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from polite_relay.audit.logger import AuditLogger
from polite_relay.config import RelayConfig
from polite_relay.models import CompletionResult
from polite_relay.webhook.gemini import GeminiClient
from polite_relay.webhook.line import LineRelay

ACCESS_TOKEN = "test-access-token"
GEMINI_KEY = "test-gemini-key"
CHANNEL_SECRET = "test-channel-secret"
USER_ID = "U1234567890abcdef"


@pytest.fixture
def mock_line() -> MagicMock:
    line = MagicMock(spec=LineRelay)
    line.send_reply = AsyncMock()
    line.start_loading = AsyncMock()
    return line


@pytest.fixture
def mock_completion() -> MagicMock:
    completion = MagicMock(spec=GeminiClient)
    completion.generate = AsyncMock(return_value=CompletionResult(text="お疲れ様です。"))
    return completion


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


# --- Factory functions for test data ---


def make_config(**kwargs: Any) -> RelayConfig:
    """Factory for RelayConfig with sensible defaults."""
    defaults: dict[str, Any] = {
        "channel_access_token": ACCESS_TOKEN,
        "gemini_api_key": GEMINI_KEY,
    }
    defaults.update(kwargs)
    return RelayConfig(**defaults)


def make_text_event(text: str = "hello", reply_token: str = "reply-1", **kwargs: Any) -> dict[str, Any]:
    """Factory for a raw LINE text message event."""
    event: dict[str, Any] = {
        "type": "message",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": USER_ID},
        "message": {"id": "m1", "type": "text", "text": text},
    }
    event.update(kwargs)
    return event


def make_postback_event(data: str, reply_token: str = "reply-1", **kwargs: Any) -> dict[str, Any]:
    """Factory for a raw LINE postback event."""
    event: dict[str, Any] = {
        "type": "postback",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": USER_ID},
        "postback": {"data": data},
    }
    event.update(kwargs)
    return event


def make_gemini_body(text: str | None) -> dict[str, Any]:
    """Factory for a generateContent response body."""
    if text is None:
        return {"candidates": []}
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def mock_async_client(response: MagicMock | None = None) -> AsyncMock:
    """An httpx.AsyncClient stand-in usable as an async context manager."""
    client = AsyncMock()
    client.post.return_value = response or MagicMock(status_code=200)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client
