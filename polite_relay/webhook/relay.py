"""Batch handler for one webhook delivery.

Every event in the delivery is dispatched concurrently. Per-event failures
never reach the caller: once all dispatches settle, the outcomes are
inspected, failures are logged, and the fixed acknowledgement is returned.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from polite_relay.models import AuditEvent, AuditEventType, AuditSeverity
from polite_relay.webhook.models import InboundEvent, UnsupportedEvent

if TYPE_CHECKING:
    from polite_relay.audit.logger import AuditLogger
    from polite_relay.conversation.dispatcher import EventDispatcher, Route

logger = logging.getLogger(__name__)

ACKNOWLEDGEMENT = {"message": "ok"}


class WebhookBatchHandler:
    def __init__(
        self,
        dispatcher: EventDispatcher,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._audit = audit_logger

    async def handle(self, events: Sequence[InboundEvent]) -> dict[str, str]:
        outcomes = await asyncio.gather(
            *(self._dispatcher.dispatch(event) for event in events),
            return_exceptions=True,
        )
        self._discard_outcomes(events, outcomes)
        return dict(ACKNOWLEDGEMENT)

    def _discard_outcomes(
        self,
        events: Sequence[InboundEvent],
        outcomes: Sequence[Route | BaseException],
    ) -> None:
        """Drop per-event outcomes. Failures are logged, never propagated."""
        for event, outcome in zip(events, outcomes, strict=True):
            if not isinstance(outcome, BaseException):
                continue
            logger.error("Event handling failed: %s", outcome, exc_info=outcome)
            if self._audit:
                self._audit.log(AuditEvent(
                    event_type=AuditEventType.EVENT_FAILED,
                    source_id=None if isinstance(event, UnsupportedEvent) else event.source_id,
                    action="dispatch",
                    result="failure",
                    severity=AuditSeverity.ERROR,
                    details={"error": type(outcome).__name__, "message": str(outcome)},
                ))
