"""Lightweight identity representation produced by the auth pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class AuthVia(str, enum.Enum):
    """Transport used to authenticate the request."""

    BEARER = "bearer"
    DEV = "dev"
    ANONYMOUS = "anonymous"


@dataclass(slots=True, frozen=True)
class AuthenticatedPrincipal:
    """Identity information available to downstream handlers.

    ``user_id`` is ``None`` for anonymous requests.
    """

    user_id: int | None
    auth_via: AuthVia

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS_PRINCIPAL = AuthenticatedPrincipal(user_id=None, auth_via=AuthVia.ANONYMOUS)


__all__ = ["ANONYMOUS_PRINCIPAL", "AuthVia", "AuthenticatedPrincipal"]
