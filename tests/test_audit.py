"""Tests for checkout audit logging."""

from __future__ import annotations

from unittest.mock import patch

from app.services.audit_logger import AuditLogger


# ---------------------------------------------------------------------------
# 1. test_log_product_sold_structured
# ---------------------------------------------------------------------------

def test_log_product_sold_structured():
    """Sale entries carry the product, session, event and the audit flag."""
    logger = AuditLogger()

    with patch("app.services.audit_logger.log") as mock_log:
        logger.log_product_sold(42, "cs_test_1", "evt_1")

        mock_log.info.assert_called_once()
        call_kwargs = mock_log.info.call_args[1]

        assert call_kwargs["event_type"] == "product_sold"
        assert call_kwargs["audit"] is True
        assert call_kwargs["product_id"] == 42
        assert call_kwargs["session_id"] == "cs_test_1"
        assert call_kwargs["event_id"] == "evt_1"
        assert "timestamp" in call_kwargs


# ---------------------------------------------------------------------------
# 2. test_log_signature_rejected_truncates_header
# ---------------------------------------------------------------------------

def test_log_signature_rejected_truncates_header():
    """Only a short prefix of the signature header is logged."""
    logger = AuditLogger()
    header = "t=1700000000,v1=" + "a" * 64

    with patch("app.services.audit_logger.log") as mock_log:
        logger.log_signature_rejected(header, 120)

        call_kwargs = mock_log.warning.call_args[1]

        assert call_kwargs["event_type"] == "webhook_signature_rejected"
        assert call_kwargs["sig_header_prefix"] == header[:16]
        assert call_kwargs["payload_bytes"] == 120
        assert call_kwargs["audit"] is True


def test_log_signature_rejected_without_header():
    logger = AuditLogger()

    with patch("app.services.audit_logger.log") as mock_log:
        logger.log_signature_rejected(None, 0)

        assert mock_log.warning.call_args[1]["sig_header_prefix"] == ""


# ---------------------------------------------------------------------------
# 3. test_log_settlement_inconsistency_alerts
# ---------------------------------------------------------------------------

def test_log_settlement_inconsistency_alerts():
    """Inconsistencies are logged at error level with the alert flag."""
    logger = AuditLogger()

    with patch("app.services.audit_logger.log") as mock_log:
        logger.log_settlement_inconsistency(999, "cs_test_2", reason="product not found")

        mock_log.info.assert_not_called()
        mock_log.error.assert_called_once()
        call_kwargs = mock_log.error.call_args[1]

        assert call_kwargs["event_type"] == "settlement_inconsistency"
        assert call_kwargs["product_id"] == 999
        assert call_kwargs["reason"] == "product not found"
        assert call_kwargs["alert"] is True
        assert call_kwargs["audit"] is True
