"""Per-request HS256 token minting."""

from __future__ import annotations

import uuid
from typing import Any

import pendulum
from jose import JWTError, jwt

from ..errors import SigningError

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 120


def sign_token(
    account: str,
    secret: str | bytes,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    *,
    now: pendulum.DateTime | None = None,
) -> str:
    """Return a fresh signed token bound to ``account``.

    A new ``jti`` is generated on every call; tokens are never cached.
    """
    if not secret:
        raise SigningError("Failed to sign JWT: secret is empty")
    if ttl_seconds <= 0:
        raise SigningError(f"Failed to sign JWT: ttl must be positive, got {ttl_seconds}")

    issued_at = (now or pendulum.now("UTC")).int_timestamp
    claims = {
        "account": account,
        "iat": issued_at,
        "exp": issued_at + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    try:
        return jwt.encode(claims, secret, algorithm=ALGORITHM)
    except (JWTError, TypeError, ValueError) as exc:
        raise SigningError(f"Failed to sign JWT: {exc}") from exc


def decode_token(token: str, secret: str | bytes, *, verify_exp: bool = True) -> dict[str, Any]:
    """Verify ``token`` and return its claims."""
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"verify_exp": verify_exp},
        )
    except JWTError as exc:
        raise SigningError(f"Invalid JWT: {exc}") from exc


__all__ = ["sign_token", "decode_token", "ALGORITHM", "DEFAULT_TTL_SECONDS"]
