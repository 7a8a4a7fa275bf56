"""Authentication primitives."""

from .errors import AuthenticationError
from .pipeline import authenticate_request, dev_principal
from .principal import ANONYMOUS_PRINCIPAL, AuthenticatedPrincipal, AuthVia

__all__ = [
    "ANONYMOUS_PRINCIPAL",
    "AuthVia",
    "AuthenticatedPrincipal",
    "AuthenticationError",
    "authenticate_request",
    "dev_principal",
]
