"""Checkout webhook entry-point: verify, dispatch, and map the outcome to a reply."""

from __future__ import annotations

import structlog
from fastapi import HTTPException

from app.services.audit_logger import AuditLogger
from app.services.event_dispatcher import EventDispatcher
from app.services.webhook_events import (
    Failed,
    InvalidSignature,
    MalformedRequest,
    WebhookAck,
)
from app.services.webhook_verifier import DEFAULT_TOLERANCE, verify_event

log = structlog.get_logger()


async def handle_checkout_webhook(
    payload: bytes | None,
    sig_header: str | None,
    secret: str,
    dispatcher: EventDispatcher,
    tolerance: int = DEFAULT_TOLERANCE,
    audit: AuditLogger | None = None,
) -> WebhookAck:
    """Verify a Stripe webhook and run it through *dispatcher*.

    Returns an acknowledgment for every handled outcome, including skips,
    ignored event types and catalog inconsistencies (which are alerted on
    instead). Raises HTTPException(400) for malformed or unsigned requests
    and HTTPException(503) when the store failed transiently, so the
    provider re-delivers.
    """
    audit = audit or AuditLogger()

    try:
        event = verify_event(payload, sig_header, secret, tolerance)
    except MalformedRequest as exc:
        log.warning("webhook_malformed", detail=str(exc))
        raise HTTPException(status_code=400, detail=str(exc))
    except InvalidSignature as exc:
        audit.log_signature_rejected(sig_header, len(payload or b""))
        raise HTTPException(status_code=400, detail=str(exc))

    outcome = await dispatcher.dispatch(event)
    log.info(
        "webhook_processed",
        event_type=event.type,
        object_id=event.object.id,
        outcome=type(outcome).__name__,
    )

    if isinstance(outcome, Failed) and outcome.kind == "transient":
        raise HTTPException(status_code=503, detail="Temporarily unable to settle event")

    return WebhookAck(received=True)
