"""Stripe Checkout Session creation for a single catalog product."""

from __future__ import annotations

from decimal import Decimal

import stripe
import structlog
from fastapi import HTTPException
from pydantic import BaseModel, Field

from app.config import settings
from app.services.product_store import ProductStore

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class CreateSessionRequest(BaseModel):
    product_id: int = Field(..., alias="productId", gt=0)

    model_config = {"populate_by_name": True}


class CheckoutSessionResponse(BaseModel):
    session_id: str
    checkout_url: str | None = None


def _to_cents(price: Decimal) -> int:
    return int((Decimal(price) * 100).to_integral_value())


# ---------------------------------------------------------------------------
# Checkout session creation
# ---------------------------------------------------------------------------

async def create_checkout_session(
    store: ProductStore,
    product_id: int,
) -> CheckoutSessionResponse:
    """Create a Stripe Checkout Session that pays for one product.

    The product id travels in the session metadata and comes back in the
    ``checkout.session.completed`` webhook.
    """
    product = await store.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if product.sold:
        raise HTTPException(status_code=409, detail="Product already sold")

    product_data = {"name": product.name}
    if product.description:
        product_data["description"] = product.description

    session = stripe.checkout.Session.create(
        api_key=settings.require("STRIPE_SECRET_KEY"),
        metadata={"productId": str(product.id)},
        line_items=[
            {
                "price_data": {
                    "currency": "usd",
                    "unit_amount": _to_cents(product.price),
                    "product_data": product_data,
                },
                "quantity": 1,
            }
        ],
        mode="payment",
        success_url=settings.require("STRIPE_SUCCESS_URL"),
        cancel_url=settings.require("STRIPE_CANCEL_URL"),
    )

    log.info("checkout_session_created", product_id=product.id, session_id=session.id)
    return CheckoutSessionResponse(session_id=session.id, checkout_url=session.url)
