"""Helper functions shared across tests."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from httpx import AsyncClient, Response

from changesets_api.core.security import create_access_token
from changesets_api.settings import Settings

CHANGESETS_PATH = "/customize/v1/changesets"


def bearer_headers(settings: Settings, user_id: int) -> dict[str, str]:
    token = create_access_token(
        user_id,
        secret=settings.secret_key_value,
        algorithm=settings.algorithm,
        expires_delta=timedelta(minutes=5),
    )
    return {"Authorization": f"Bearer {token}"}


def changeset_path(uuid: str) -> str:
    return f"{CHANGESETS_PATH}/{uuid}"


async def create_changeset(
    client: AsyncClient,
    headers: dict[str, str],
    **fields: Any,
) -> dict[str, Any]:
    """POST a changeset and return the decoded body, asserting it was created."""

    response = await client.post(CHANGESETS_PATH, json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def problem_type(response: Response) -> str:
    return response.json()["type"]


__all__ = [
    "CHANGESETS_PATH",
    "bearer_headers",
    "changeset_path",
    "create_changeset",
    "problem_type",
]
