"""Bearer credential helpers built on python-jose."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from pressroom.core.settings import settings


def create_access_token(
    user_id: int,
    *,
    email: str | None = None,
    name: str | None = None,
    expires_minutes: int | None = None,
) -> str:
    """Create a signed JWT access token for ``user_id``."""
    to_encode: dict[str, object] = {"sub": str(user_id)}
    if email is not None:
        to_encode["email"] = email
    if name is not None:
        to_encode["name"] = name
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Verify signature and expiry of ``token``.

    Returns:
        The claims on success; None when the token is malformed, expired, or
        signed with a different secret.
    """
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    return claims
