"""FastAPI application receiving LINE webhook deliveries."""

from __future__ import annotations

import json
import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from polite_relay.audit.logger import AuditLogger
from polite_relay.config import RelayConfig
from polite_relay.conversation.dispatcher import EventDispatcher
from polite_relay.models import AuditEvent, AuditEventType, AuditSeverity
from polite_relay.webhook.gemini import GeminiClient
from polite_relay.webhook.line import LineRelay
from polite_relay.webhook.models import extract_events
from polite_relay.webhook.relay import WebhookBatchHandler

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/webhook"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    return create_app(RelayConfig.from_env())


def create_app(
    config: RelayConfig,
    line: LineRelay | None = None,
    completion: GeminiClient | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the webhook app. Collaborators default to ones built from ``config``."""
    line = line or LineRelay(
        access_token=config.channel_access_token,
        channel_secret=config.channel_secret,
        timeout=config.http_timeout,
    )
    completion = completion or GeminiClient(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        timeout=config.http_timeout,
    )
    if audit_logger is None:
        audit_logger = AuditLogger.from_config(config)
    if not line.verifies_signatures:
        logger.warning("LINE_CHANNEL_SECRET is not set; webhook signatures will not be verified")

    dispatcher = EventDispatcher(
        line=line,
        completion=completion,
        loading_seconds=config.loading_seconds,
        audit_logger=audit_logger,
    )
    batch_handler = WebhookBatchHandler(dispatcher, audit_logger=audit_logger)

    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(WEBHOOK_PATH)
    async def webhook(request: Request) -> Response:
        body = await request.body()
        source_ip = request.client.host if request.client else None

        if not line.verify_signature(dict(request.headers), body):
            logger.warning("Rejected webhook with invalid signature from %s", source_ip)
            _log(audit_logger, AuditEvent(
                event_type=AuditEventType.SIGNATURE_REJECTED,
                action=f"POST {WEBHOOK_PATH}",
                result="failure",
                severity=AuditSeverity.WARNING,
                details={"source_ip": source_ip},
            ))
            return JSONResponse({"error": "Invalid webhook signature"}, status_code=401)

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

        events = extract_events(payload)
        logger.info("Received %d webhook event(s)", len(events))
        _log(audit_logger, AuditEvent(
            event_type=AuditEventType.WEBHOOK_RECEIVED,
            action=f"POST {WEBHOOK_PATH}",
            result="success",
            severity=AuditSeverity.INFO,
            details={"source_ip": source_ip, "event_count": len(events)},
        ))

        return JSONResponse(await batch_handler.handle(events))

    @app.get("/{path:path}")
    async def hello(path: str) -> PlainTextResponse:
        return PlainTextResponse("Hello World!")

    return app


def _log(audit_logger: AuditLogger | None, event: AuditEvent) -> None:
    if audit_logger:
        audit_logger.log(event)
