"""Version 1 of the changesets API."""

from .router import create_api_router

__all__ = ["create_api_router"]
