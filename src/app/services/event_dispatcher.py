"""Routes verified webhook events to their handlers by event type."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType

import structlog

from app.config import settings
from app.services.audit_logger import AuditLogger
from app.services.product_store import ProductStore
from app.services.settlement import SettlementHandler
from app.services.webhook_events import (
    CHECKOUT_SESSION_COMPLETED,
    DispatchOutcome,
    Ignored,
    SettlementOutcome,
    WebhookEvent,
)

log = structlog.get_logger()

EventHandler = Callable[[WebhookEvent], Awaitable[SettlementOutcome]]


class EventDispatcher:
    """Fixed event-type -> handler table.

    Types without a handler are acknowledged and ignored; the provider
    sends many event types and a non-2xx reply would only trigger retries.
    """

    def __init__(self, handlers: Mapping[str, EventHandler]) -> None:
        self._handlers = MappingProxyType(dict(handlers))

    @property
    def handlers(self) -> Mapping[str, EventHandler]:
        return self._handlers

    async def dispatch(self, event: WebhookEvent) -> DispatchOutcome:
        handler = self._handlers.get(event.type)
        if handler is None:
            log.info("webhook_event_unhandled", event_type=event.type, object_id=event.object.id)
            return Ignored(event.type)
        return await handler(event)


def build_dispatcher(
    store: ProductStore,
    audit: AuditLogger | None = None,
    timeout: float | None = None,
) -> EventDispatcher:
    """Wire the checkout handlers against *store*."""
    settlement = SettlementHandler(
        store,
        timeout=settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout,
        audit=audit,
    )
    return EventDispatcher({CHECKOUT_SESSION_COMPLETED: settlement.settle})
