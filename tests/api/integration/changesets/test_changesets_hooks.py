"""Integration coverage for the extension hooks passed to ``create_app``."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from changesets_api.core.rbac.roles import CHANGESETS_EDIT
from changesets_api.features.changesets.hooks import ChangesetHooks
from changesets_api.features.changesets.manager import ChangesetManager
from changesets_api.features.changesets.query import QueryArgs
from changesets_api.features.changesets.registry import CoreSettingsRegistrar, SettingDescriptor
from changesets_api.features.changesets.schemas import ChangesetListQuery
from changesets_api.main import create_app
from changesets_api.settings import Settings, get_settings
from changesets_db.models import Changeset
from tests.utils import CHANGESETS_PATH, changeset_path, create_changeset

pytestmark = pytest.mark.asyncio


class PluginRegistrar:
    def register(self, manager: ChangesetManager) -> None:
        manager.add_setting(SettingDescriptor("plugin_banner", CHANGESETS_EDIT, default=""))


class TitleOrderAugmenter:
    def augment(self, query: QueryArgs, params: ChangesetListQuery) -> QueryArgs:
        return {**query, "orderby": "title", "order": "asc"}


class IdTransformer:
    def transform(
        self,
        data: dict[str, Any],
        changeset: Changeset,
        *,
        context: str,
    ) -> dict[str, Any]:
        return {**data, "id": changeset.id, "context": context}


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    hooks = ChangesetHooks(
        query_augmenters=(TitleOrderAugmenter(),),
        registrars=(CoreSettingsRegistrar(), PluginRegistrar()),
        response_transformers=(IdTransformer(),),
    )
    app = create_app(settings=settings, hooks=hooks)
    app.dependency_overrides[get_settings] = lambda: settings
    return app


async def test_registered_plugin_setting_is_writable_by_authors(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    created = await create_changeset(
        async_client,
        auth_headers(seeded_identity.author),
        settings={"plugin_banner": {"value": "Sale!"}},
    )

    assert created["settings"] == {"plugin_banner": {"value": "Sale!"}}


async def test_query_augmenter_applies_before_execution(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    for title in ("Zulu", "Alpha", "Mike"):
        await create_changeset(async_client, headers, title=title)

    response = await async_client.get(CHANGESETS_PATH, headers=headers)

    assert [item["title"]["rendered"] for item in response.json()] == ["Alpha", "Mike", "Zulu"]


async def test_response_transformer_sees_context(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers)
    assert created["context"] == "edit"

    response = await async_client.get(changeset_path(created["slug"]), headers=headers)

    body = response.json()
    assert body["context"] == "view"
    assert body["id"] == created["id"]
