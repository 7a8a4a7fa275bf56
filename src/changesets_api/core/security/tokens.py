"""JWT helpers for bearer tokens."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from typing import Any

import jwt

from changesets_api.common.time import utc_now


def create_access_token(
    user_id: int,
    *,
    secret: str,
    algorithm: str,
    expires_delta: timedelta,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Return a signed JWT whose subject is ``user_id``."""

    issued_at = utc_now()
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    if extra_claims:
        payload.update(extra_claims)
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str,
    *,
    secret: str,
    algorithms: Sequence[str],
) -> dict[str, Any]:
    """Decode a JWT and return its payload."""

    return jwt.decode(
        token,
        secret,
        algorithms=list(algorithms),
        options={"verify_aud": False, "require": ["sub", "exp"]},
    )


__all__ = ["create_access_token", "decode_token"]
