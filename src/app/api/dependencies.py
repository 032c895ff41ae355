"""Shared FastAPI dependencies for checkout routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.services.auth_service import verify_token
from app.services.event_dispatcher import EventDispatcher, build_dispatcher
from app.services.product_store import ProductStore, SqlProductStore

# Optional bearer scheme -- auto_error=False so we can fall back to cookies
_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    access_token: str | None = Cookie(default=None),
) -> AuthenticatedUser:
    """Extract and validate the access token.

    Token sources (checked in order):
      1. Authorization: Bearer <token> header
      2. ``access_token`` cookie
    """
    token: str | None = None

    if credentials is not None:
        token = credentials.credentials
    elif access_token is not None:
        token = access_token

    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(token, "access")
    return AuthenticatedUser(user_id=str(payload["sub"]))


async def get_product_store(db: AsyncSession = Depends(get_db)) -> ProductStore:
    return SqlProductStore(db)


async def get_dispatcher(
    store: ProductStore = Depends(get_product_store),
) -> EventDispatcher:
    return build_dispatcher(store, timeout=settings.STORE_TIMEOUT_SECONDS)


def get_webhook_secret(request: Request) -> str:
    """Return the signing secret validated at startup."""
    return request.app.state.webhook_secret
