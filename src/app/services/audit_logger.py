"""Structured JSON audit logger for checkout settlement events.

Emits structured log entries via structlog for product sales, rejected
webhook signatures, and settlement inconsistencies. Every entry carries an
``audit: true`` flag so production log pipelines can filter on it easily.
Inconsistencies additionally carry ``alert: true`` and are logged at error
level so they page someone instead of being silently dropped.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog


log = structlog.get_logger()


class AuditLogger:
    """Structured audit logger for checkout events.

    All methods are synchronous -- they only emit log lines and perform
    no I/O beyond writing to the configured structlog sink.
    """

    # ------------------------------------------------------------------
    # Sale
    # ------------------------------------------------------------------

    def log_product_sold(self, product_id: int, session_id: str, event_id=None) -> None:
        """Record the single Unsold -> Sold transition of a product."""
        log.info(
            "audit_event",
            event_type="product_sold",
            timestamp=datetime.now(timezone.utc).isoformat(),
            product_id=product_id,
            session_id=session_id,
            event_id=event_id,
            audit=True,
        )

    # ------------------------------------------------------------------
    # Signature rejection
    # ------------------------------------------------------------------

    def log_signature_rejected(self, sig_header: str | None, payload_bytes: int) -> None:
        """Record a rejected webhook. Only a short header prefix is kept."""
        log.warning(
            "audit_event",
            event_type="webhook_signature_rejected",
            timestamp=datetime.now(timezone.utc).isoformat(),
            sig_header_prefix=(sig_header or "")[:16],
            payload_bytes=payload_bytes,
            audit=True,
        )

    # ------------------------------------------------------------------
    # Inconsistency
    # ------------------------------------------------------------------

    def log_settlement_inconsistency(
        self,
        product_id: int,
        session_id: str,
        reason: str,
    ) -> None:
        """A paid session references a product the catalog does not have."""
        log.error(
            "audit_event",
            event_type="settlement_inconsistency",
            timestamp=datetime.now(timezone.utc).isoformat(),
            product_id=product_id,
            session_id=session_id,
            reason=reason,
            audit=True,
            alert=True,
        )
