import hashlib
import hmac
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from app.api.dependencies import get_product_store
from app.config import settings
from app.main import app
from app.services.product_store import InMemoryProductStore, ProductRecord

WEBHOOK_SECRET = "whsec_test"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sign():
    """Build a ``stripe-signature`` header value for a payload."""

    def _sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
        ts = int(time.time()) if timestamp is None else timestamp
        signed = f"{ts}.".encode("utf-8") + payload
        digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
        return f"t={ts},v1={digest}"

    return _sign


@pytest.fixture
def issue_token():
    """Issue an HS256 access token signed with the configured JWT secret."""

    def _issue(subject: str, expires_minutes: int = 15) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "type": "access",
            "iat": now,
            "exp": now + timedelta(minutes=expires_minutes),
        }
        return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm="HS256")

    return _issue


@pytest.fixture
def product_store():
    return InMemoryProductStore(
        [
            ProductRecord(
                id=42,
                name="Walnut desk",
                description="Solid walnut, 140cm",
                price=Decimal("19.99"),
                sold=False,
            ),
        ]
    )


@pytest.fixture
async def client(product_store):
    previous = getattr(app.state, "webhook_secret", None)
    app.state.webhook_secret = WEBHOOK_SECRET
    app.dependency_overrides[get_product_store] = lambda: product_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    if previous is None:
        del app.state.webhook_secret
    else:
        app.state.webhook_secret = previous
