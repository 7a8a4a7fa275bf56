"""Request authentication pipeline used by FastAPI dependencies."""

from __future__ import annotations

import jwt
from fastapi import Request
from sqlalchemy.orm import Session

from changesets_api.core.security.tokens import decode_token
from changesets_api.settings import Settings
from changesets_db.models import User

from .errors import AuthenticationError
from .principal import ANONYMOUS_PRINCIPAL, AuthenticatedPrincipal, AuthVia


def dev_principal(settings: Settings) -> AuthenticatedPrincipal:
    """Return a synthetic principal for AUTH_DISABLED mode."""

    return AuthenticatedPrincipal(
        user_id=settings.auth_disabled_user_id,
        auth_via=AuthVia.DEV,
    )


def _extract_bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() != "bearer":
        raise AuthenticationError("Unsupported authorization scheme.")
    token = credentials.strip()
    if not token:
        raise AuthenticationError("Bearer token missing.")
    return token


def _principal_from_token(token: str, settings: Settings) -> AuthenticatedPrincipal:
    try:
        payload = decode_token(
            token,
            secret=settings.secret_key_value,
            algorithms=[settings.algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token expired.") from exc
    except jwt.PyJWTError as exc:
        raise AuthenticationError("Invalid token.") from exc

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid token subject.") from exc
    return AuthenticatedPrincipal(user_id=user_id, auth_via=AuthVia.BEARER)


def _ensure_known_principal(*, principal: AuthenticatedPrincipal, session: Session) -> None:
    if session.get(User, principal.user_id) is None:
        raise AuthenticationError("Unknown principal")


def authenticate_request(
    request: Request,
    session: Session,
    settings: Settings,
) -> AuthenticatedPrincipal:
    """Authenticate an incoming request to a principal.

    Requests without credentials resolve to the anonymous principal so that
    capability checks, not the transport, decide what they may do.
    """

    if settings.auth_disabled:
        return dev_principal(settings)

    token = _extract_bearer_token(request)
    if token is None:
        return ANONYMOUS_PRINCIPAL

    principal = _principal_from_token(token, settings)
    _ensure_known_principal(principal=principal, session=session)
    return principal


__all__ = ["authenticate_request", "dev_principal"]
