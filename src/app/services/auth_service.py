"""Access-token verification for customer-facing checkout routes.

Tokens are issued by the account service; this side only checks the
signature, expiry and token type.
"""

from __future__ import annotations

from fastapi import HTTPException, status
from jose import JWTError, jwt

from app.config import settings

_ALGORITHM = "HS256"


def verify_token(token: str, expected_type: str = "access") -> dict:
    """Decode and validate a JWT.

    Raises HTTPException(401) if the token is invalid, expired, of the
    wrong type, or has no subject.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not settings.JWT_SECRET_KEY:
        raise credentials_exception

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[_ALGORITHM])
    except JWTError:
        raise credentials_exception

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise credentials_exception

    return payload
