"""Shared Pydantic data models for polite-relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class Register(str, Enum):
    """Politeness register a message is rewritten into."""

    CLUB = "club"
    CIRCLE = "circle"
    JOB_HUNTING = "jobHunting"
    ADULT = "adult"

    @property
    def label(self) -> str:
        return _REGISTER_LABELS[self]


_REGISTER_LABELS = {
    Register.CLUB: "部活",
    Register.CIRCLE: "サークル",
    Register.JOB_HUNTING: "就職活動",
    Register.ADULT: "目上の大人",
}


class AuditEventType(str, Enum):
    WEBHOOK_RECEIVED = "webhook_received"
    SIGNATURE_REJECTED = "signature_rejected"
    EVENT_DISPATCHED = "event_dispatched"
    EVENT_FAILED = "event_failed"
    MALFORMED_ROUTING_TOKEN = "malformed_routing_token"
    COMPLETION_FAILED = "completion_failed"


class AuditSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# --- Outbound LINE messages ---


class _LineModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with LINE's camelCase field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PostbackAction(_LineModel):
    type: Literal["postback"] = "postback"
    label: str
    data: str
    input_option: str | None = Field(default=None, alias="inputOption")


class ClipboardAction(_LineModel):
    type: Literal["clipboard"] = "clipboard"
    label: str
    clipboard_text: str = Field(alias="clipboardText")


class ButtonsTemplate(_LineModel):
    type: Literal["buttons"] = "buttons"
    text: str
    actions: tuple[PostbackAction | ClipboardAction, ...]


class TemplateMessage(_LineModel):
    type: Literal["template"] = "template"
    alt_text: str = Field(alias="altText")
    template: ButtonsTemplate


class TextMessage(_LineModel):
    type: Literal["text"] = "text"
    text: str


OutboundMessage = TextMessage | TemplateMessage


# --- Completion Models ---


class CompletionResult(BaseModel):
    """Generated text extracted from a completion response.

    ``text`` is None when the upstream answered successfully but carried no
    candidate text.
    """

    model_config = ConfigDict(frozen=True)

    text: str | None
    raw: dict[str, Any] = Field(default_factory=dict)


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "dropped" | "ignored"
    severity: AuditSeverity
    details: dict[str, object] | None = None
