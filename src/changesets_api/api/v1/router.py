"""Compose the versioned API router."""

from __future__ import annotations

from fastapi import APIRouter

from changesets_api.features.changesets.router import router as changesets_router


def create_api_router() -> APIRouter:
    """Return the API router with every feature router mounted."""

    api_router = APIRouter()
    api_router.include_router(changesets_router)
    return api_router


__all__ = ["create_api_router"]
