"""Security primitives (token signing and verification)."""

from .tokens import create_access_token, decode_token

__all__ = ["create_access_token", "decode_token"]
