"""Event classification and the conversation flows.

Each inbound event is routed to exactly one flow:

- Picker: offer the four registers for a message.
- Prompt-for-next: ask the user to type the next message.
- Completion: rewrite a message in the chosen register via Gemini.

Flows report their own failures to the chat; only reply delivery errors
raised while reporting can escape to the batch handler.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, assert_never

import httpx

from polite_relay.conversation.messages import (
    build_picker_message,
    build_result_message,
    format_error,
    missing_text_error,
    next_message_prompt,
)
from polite_relay.conversation.prompts import DEFAULT_PROMPTS, PromptTable
from polite_relay.conversation.routing import (
    CHANGE_PREFIX,
    NEXT_MESSAGE,
    normalize_text,
    parse_selection,
    register_for_label,
    strip_change_prefix,
)
from polite_relay.models import AuditEvent, AuditEventType, AuditSeverity, TextMessage
from polite_relay.webhook.models import (
    InboundEvent,
    PostbackEvent,
    TextMessageEvent,
    UnsupportedEvent,
)

if TYPE_CHECKING:
    from polite_relay.audit.logger import AuditLogger
    from polite_relay.webhook.gemini import GeminiClient
    from polite_relay.webhook.line import LineRelay

logger = logging.getLogger(__name__)


class Route(str, Enum):
    """The behavior selected for an inbound event."""

    REGISTER_LABEL = "register_label"
    PICKER = "picker"
    CHANGE_REGISTER = "change_register"
    NEXT_MESSAGE = "next_message"
    COMPLETION = "completion"
    IGNORED = "ignored"


def classify(event: InboundEvent) -> Route:
    """Pick the route for an event. First matching rule wins."""
    if isinstance(event, TextMessageEvent):
        # A bare register label typed as text is handed to the completion
        # flow as-is. It carries no original text, so it is dropped there.
        if register_for_label(event.text) is not None:
            return Route.REGISTER_LABEL
        return Route.PICKER
    if isinstance(event, PostbackEvent):
        if event.data.startswith(CHANGE_PREFIX):
            return Route.CHANGE_REGISTER
        if event.data == NEXT_MESSAGE:
            return Route.NEXT_MESSAGE
        return Route.COMPLETION
    if isinstance(event, UnsupportedEvent):
        return Route.IGNORED
    assert_never(event)


class EventDispatcher:
    """Runs the flow selected by :func:`classify` for one event."""

    def __init__(
        self,
        line: LineRelay,
        completion: GeminiClient,
        prompts: PromptTable = DEFAULT_PROMPTS,
        loading_seconds: int = 10,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._line = line
        self._completion = completion
        self._prompts = prompts
        self._loading_seconds = loading_seconds
        self._audit = audit_logger

    async def dispatch(self, event: InboundEvent) -> Route:
        route = classify(event)
        outcome = "success"

        if isinstance(event, TextMessageEvent):
            if route is Route.REGISTER_LABEL:
                outcome = await self.completion_flow(event.reply_token, event.source_id, event.text)
            else:
                await self.picker_flow(event.reply_token, normalize_text(event.text))
        elif isinstance(event, PostbackEvent):
            if route is Route.CHANGE_REGISTER:
                await self.picker_flow(event.reply_token, strip_change_prefix(event.data))
            elif route is Route.NEXT_MESSAGE:
                await self._line.send_reply(event.reply_token, [next_message_prompt()])
            else:
                outcome = await self.completion_flow(event.reply_token, event.source_id, event.data)
        elif isinstance(event, UnsupportedEvent):
            logger.debug("Ignoring %s event", event.event_type or "untyped")
            outcome = "ignored"
        else:
            assert_never(event)

        self._record(
            AuditEventType.EVENT_DISPATCHED,
            AuditSeverity.INFO,
            result=outcome,
            source_id=None if isinstance(event, UnsupportedEvent) else event.source_id,
            details={"route": route.value},
        )
        return route

    async def picker_flow(self, reply_token: str, original_text: str) -> None:
        await self._line.send_reply(reply_token, [build_picker_message(original_text)])

    async def completion_flow(
        self, reply_token: str, source_id: str | None, payload: str,
    ) -> str:
        """Rewrite the selected text and reply.

        Returns the audit outcome: ``"dropped"`` for a malformed token,
        ``"failure"`` when an error was reported to the chat, else ``"success"``.
        """
        selection = parse_selection(payload)
        if selection is None:
            logger.warning("Invalid postback data: %r", payload)
            self._record(
                AuditEventType.MALFORMED_ROUTING_TOKEN,
                AuditSeverity.WARNING,
                result="dropped",
                source_id=source_id,
                details={"data": payload},
            )
            return "dropped"

        if source_id:
            await self._start_loading(source_id)

        prompt = self._prompts[selection.register]
        user_prompt = prompt.render(selection.original_text)
        logger.debug("Prompt for %s: %s", selection.register.value, user_prompt)

        try:
            result = await self._completion.generate(prompt.system_instruction, user_prompt)
            polite_text = (result.text or "").rstrip()
            if not polite_text:
                logger.error("Gemini API response missing polite text: %s", result.raw)
                self._record(
                    AuditEventType.COMPLETION_FAILED,
                    AuditSeverity.ERROR,
                    result="failure",
                    source_id=source_id,
                    details={"reason": "missing_text"},
                )
                await self._line.send_reply(reply_token, [missing_text_error()])
                return "failure"

            await self._line.send_reply(reply_token, [
                TextMessage(text=polite_text),
                build_result_message(polite_text, selection.original_text),
            ])
        except Exception as e:
            logger.error("Error during Gemini API call or response handling: %s", e, exc_info=e)
            self._record(
                AuditEventType.COMPLETION_FAILED,
                AuditSeverity.ERROR,
                result="failure",
                source_id=source_id,
                details={"reason": type(e).__name__, "message": str(e)},
            )
            await self._line.send_reply(reply_token, [format_error(e)])
            return "failure"
        return "success"

    async def _start_loading(self, chat_id: str) -> None:
        try:
            await self._line.start_loading(chat_id, self._loading_seconds)
        except httpx.HTTPError as e:
            logger.warning("Loading indicator failed for %s: %s", chat_id, e)

    def _record(
        self,
        event_type: AuditEventType,
        severity: AuditSeverity,
        *,
        result: str,
        source_id: str | None,
        details: dict[str, object],
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                source_id=source_id,
                action="dispatch",
                result=result,
                severity=severity,
                details=details,
            ))
