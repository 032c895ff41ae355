"""Checkout endpoints: session creation and the Stripe webhook."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import (
    AuthenticatedUser,
    get_current_user,
    get_dispatcher,
    get_product_store,
    get_webhook_secret,
)
from app.config import settings
from app.services.checkout_session import (
    CheckoutSessionResponse,
    CreateSessionRequest,
    create_checkout_session,
)
from app.services.checkout_webhook import handle_checkout_webhook
from app.services.event_dispatcher import EventDispatcher
from app.services.product_store import ProductStore
from app.services.webhook_events import WebhookAck

router = APIRouter(prefix="/checkout", tags=["checkout"])


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/session", response_model=CheckoutSessionResponse)
async def create_session(
    body: CreateSessionRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    store: ProductStore = Depends(get_product_store),
):
    """Create a Stripe Checkout Session for the requested product."""
    return await create_checkout_session(store, body.product_id)


@router.post("/webhook", response_model=WebhookAck)
async def checkout_webhook(
    request: Request,
    secret: str = Depends(get_webhook_secret),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    """Receive Stripe checkout events.

    The body is read as raw bytes and handed to the verifier untouched;
    parsing it first would break the signature.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    return await handle_checkout_webhook(
        payload,
        sig_header,
        secret,
        dispatcher,
        tolerance=settings.WEBHOOK_TOLERANCE_SECONDS,
    )
