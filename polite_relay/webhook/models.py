"""Inbound LINE webhook events.

Events are parsed into a closed union so that dispatch can narrow on the
variant before touching variant-specific fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TextMessageEvent:
    reply_token: str
    source_id: str | None
    text: str


@dataclass(frozen=True)
class PostbackEvent:
    reply_token: str
    source_id: str | None
    data: str


@dataclass(frozen=True)
class UnsupportedEvent:
    """Any event the relay does not act on (stickers, follows, ...)."""

    event_type: str


InboundEvent = TextMessageEvent | PostbackEvent | UnsupportedEvent


def parse_event(raw: dict[str, Any]) -> InboundEvent:
    """Classify one raw webhook event. Never raises."""
    if not isinstance(raw, dict):
        return UnsupportedEvent(event_type=type(raw).__name__)

    event_type = str(raw.get("type", ""))
    reply_token = raw.get("replyToken")
    source = raw.get("source")
    source_id = source.get("userId") if isinstance(source, dict) else None

    if not isinstance(reply_token, str) or not reply_token:
        return UnsupportedEvent(event_type=event_type)

    if event_type == "message":
        message = raw.get("message")
        if isinstance(message, dict) and message.get("type") == "text":
            text = message.get("text")
            if isinstance(text, str):
                return TextMessageEvent(reply_token=reply_token, source_id=source_id, text=text)
        return UnsupportedEvent(event_type=event_type)

    if event_type == "postback":
        postback = raw.get("postback")
        data = postback.get("data") if isinstance(postback, dict) else None
        if isinstance(data, str):
            return PostbackEvent(reply_token=reply_token, source_id=source_id, data=data)

    return UnsupportedEvent(event_type=event_type)


def extract_events(payload: Any) -> list[InboundEvent]:
    """Extract the ordered ``events`` sequence from a webhook body."""
    if not isinstance(payload, dict):
        return []
    raw_events = payload.get("events") or []
    if not isinstance(raw_events, list):
        return []
    return [parse_event(raw) for raw in raw_events]
