"""Shared auth error types."""


class AuthenticationError(Exception):
    """Raised when a request carries credentials that cannot be authenticated."""
