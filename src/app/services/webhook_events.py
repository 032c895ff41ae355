"""Webhook event model, settlement outcomes, and the checkout error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


# ---------------------------------------------------------------------------
# Verified event (only the fields checkout needs)
# ---------------------------------------------------------------------------

class EventObject(BaseModel):
    id: str
    metadata: Optional[dict[str, str]] = None

    model_config = {"frozen": True}


class EventData(BaseModel):
    object: EventObject

    model_config = {"frozen": True}


class WebhookEvent(BaseModel):
    type: str
    id: Optional[str] = None
    data: EventData

    model_config = {"frozen": True}

    @property
    def object(self) -> EventObject:
        return self.data.object


class WebhookAck(BaseModel):
    received: bool = Field(default=True)


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settled:
    product_id: int


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class Failed:
    kind: Literal["not_found", "transient"]
    detail: str = ""


@dataclass(frozen=True)
class Ignored:
    event_type: str


SettlementOutcome = Union[Settled, Skipped, Failed]
DispatchOutcome = Union[Settled, Skipped, Failed, Ignored]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class WebhookError(Exception):
    """Base class for requests rejected before dispatch."""


class MalformedRequest(WebhookError):
    """Missing signature header, empty body, or a body that is not an event."""


class InvalidSignature(WebhookError):
    """The signature did not verify. Deliberately carries no detail."""

    def __init__(self) -> None:
        super().__init__("Invalid webhook signature")


class StoreUnavailable(Exception):
    """The product store could not be reached."""
