"""Settlement of completed checkout sessions: Unsold -> Sold, exactly once."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from app.services.audit_logger import AuditLogger
from app.services.product_store import ProductStore
from app.services.webhook_events import (
    Failed,
    SettlementOutcome,
    Settled,
    Skipped,
    StoreUnavailable,
    WebhookEvent,
)

log = structlog.get_logger()

T = TypeVar("T")

DEFAULT_STORE_TIMEOUT = 5.0

# products.id is a 32-bit INTEGER column
MAX_PRODUCT_ID = 2**31 - 1

_PRODUCT_ID_RE = re.compile(r"[0-9]{1,10}")


class _StoreTimeout(Exception):
    pass


def extract_product_id(event: WebhookEvent) -> int | None:
    """Return metadata.productId as an int.

    Returns None when it is absent, not a plain ASCII integer, or outside
    the range of a product id.
    """
    raw = (event.object.metadata or {}).get("productId")
    if raw is None:
        return None
    raw = raw.strip()
    if not _PRODUCT_ID_RE.fullmatch(raw):
        return None
    product_id = int(raw)
    if product_id > MAX_PRODUCT_ID:
        return None
    return product_id


class SettlementHandler:
    """Marks the product referenced by a completed session as sold.

    Safe under duplicate and concurrent delivery: the final write is a
    conditional ``set_sold`` and only the caller that changed the row
    reports ``Settled``.
    """

    def __init__(
        self,
        store: ProductStore,
        timeout: float = DEFAULT_STORE_TIMEOUT,
        audit: AuditLogger | None = None,
    ) -> None:
        self._store = store
        self._timeout = timeout
        self._audit = audit or AuditLogger()

    async def _bounded(self, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError:
            raise _StoreTimeout() from None

    async def settle(self, event: WebhookEvent) -> SettlementOutcome:
        session_id = event.object.id
        product_id = extract_product_id(event)

        if product_id is None:
            log.warning("settlement_skipped_no_product_id", session_id=session_id)
            return Skipped("no productId")

        try:
            return await self._transition(product_id, session_id, event.id)
        except _StoreTimeout:
            log.warning(
                "settlement_store_timeout",
                product_id=product_id,
                session_id=session_id,
                timeout=self._timeout,
            )
            return Failed("transient", "store timed out")
        except StoreUnavailable as exc:
            log.warning(
                "settlement_store_unavailable",
                product_id=product_id,
                session_id=session_id,
                error=str(exc),
            )
            return Failed("transient", "store unavailable")

    async def _transition(
        self,
        product_id: int,
        session_id: str,
        event_id: str | None,
    ) -> SettlementOutcome:
        product = await self._bounded(self._store.get(product_id))
        if product is None:
            return self._not_found(product_id, session_id)

        if product.sold:
            log.info("settlement_skipped_already_sold", product_id=product_id, session_id=session_id)
            return Skipped("already sold")

        updated = await self._bounded(self._store.set_sold(product_id, True))
        if updated is None:
            # Lost the conditional write; find out why.
            current = await self._bounded(self._store.get(product_id))
            if current is None:
                return self._not_found(product_id, session_id)
            log.info("settlement_skipped_already_sold", product_id=product_id, session_id=session_id)
            return Skipped("already sold")

        log.info("product_marked_sold", product_id=product_id, session_id=session_id)
        self._audit.log_product_sold(product_id, session_id, event_id)
        return Settled(product_id)

    def _not_found(self, product_id: int, session_id: str) -> Failed:
        self._audit.log_settlement_inconsistency(
            product_id, session_id, reason="product not found",
        )
        return Failed("not_found", f"product {product_id} not found")
