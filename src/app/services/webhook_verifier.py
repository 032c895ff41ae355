"""Stripe webhook signature verification.

The raw request bytes are checked against the ``stripe-signature`` header
before anything is parsed. Every verification failure collapses into the
same ``InvalidSignature`` so callers cannot learn which sub-check failed.
"""

from __future__ import annotations

from collections.abc import Callable

import stripe
import structlog
from pydantic import ValidationError

from app.services.webhook_events import InvalidSignature, MalformedRequest, WebhookEvent

log = structlog.get_logger()

DEFAULT_TOLERANCE = 300

# (payload, sig_header, secret, tolerance) -> anything; raises on a bad signature
SignatureCheck = Callable[[bytes, str, str, int], object]


def stripe_signature_check(
    payload: bytes,
    sig_header: str,
    secret: str,
    tolerance: int,
) -> object:
    return stripe.Webhook.construct_event(payload, sig_header, secret, tolerance)


def verify_event(
    payload: bytes | None,
    sig_header: str | None,
    secret: str,
    tolerance: int = DEFAULT_TOLERANCE,
    check: SignatureCheck = stripe_signature_check,
) -> WebhookEvent:
    """Verify *payload* against *sig_header* and return the parsed event.

    Raises MalformedRequest if the header or body is missing, or if a
    correctly signed body is not an event. Raises InvalidSignature for any
    signature, header-format, or timestamp failure.
    """
    if not sig_header or not sig_header.strip():
        raise MalformedRequest("Missing stripe-signature header")
    if not payload:
        raise MalformedRequest("Raw body not available")

    try:
        check(payload, sig_header, secret, tolerance)
    except stripe.SignatureVerificationError as exc:
        log.debug("signature_check_failed", detail=str(exc))
        raise InvalidSignature() from None
    except UnicodeDecodeError:
        # Decoding happens before the HMAC check, so a tampered byte lands here.
        log.debug("signature_check_failed", detail="payload is not valid UTF-8")
        raise InvalidSignature() from None
    except ValueError:
        raise MalformedRequest("Invalid payload") from None

    try:
        return WebhookEvent.model_validate_json(payload)
    except ValidationError:
        raise MalformedRequest("Invalid payload") from None
