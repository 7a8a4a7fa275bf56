"""Integration coverage for creating, reading, updating and deleting changesets."""

from __future__ import annotations

import re
from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.utils import CHANGESETS_PATH, changeset_path, create_changeset, problem_type

pytestmark = pytest.mark.asyncio

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}$")


async def test_create_then_get_round_trip(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.administrator)

    response = await async_client.post(
        CHANGESETS_PATH,
        json={
            "title": "Homepage refresh",
            "status": "draft",
            "settings": {"blogname": {"value": "New name"}},
        },
        headers=headers,
    )

    assert response.status_code == 201, response.text
    created = response.json()
    assert UUID_RE.match(created["slug"])
    assert response.headers["location"].endswith(changeset_path(created["slug"]))
    assert created["status"] == "draft"
    assert created["author"] == seeded_identity.administrator.id
    assert created["title"] == {"raw": "Homepage refresh", "rendered": "Homepage refresh"}
    assert created["settings"] == {"blogname": {"value": "New name"}}
    assert created["date"] is not None
    assert created["date_gmt"] is None

    fetched = await async_client.get(
        changeset_path(created["slug"]),
        params={"context": "edit"},
        headers=headers,
    )
    assert fetched.status_code == 200
    assert fetched.json() == created


async def test_create_without_body_uses_defaults(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    created = await create_changeset(async_client, auth_headers(seeded_identity.author))

    assert created["status"] == "auto-draft"
    assert created["settings"] == {}
    assert created["title"]["raw"] == ""
    assert created["author"] == seeded_identity.author.id


async def test_create_with_supplied_uuid_is_idempotent(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.editor)
    uuid = str(uuid4())
    payload = {
        "uuid": uuid,
        "title": "Colors",
        "settings": {"background_color": {"value": "#ffffff"}},
    }

    first = await async_client.post(CHANGESETS_PATH, json=payload, headers=headers)
    second = await async_client.post(CHANGESETS_PATH, json=payload, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json() == second.json()
    assert first.json()["slug"] == uuid

    listing = await async_client.get(CHANGESETS_PATH, headers=headers)
    assert listing.status_code == 200
    assert listing.headers["x-wp-total"] == "1"
    assert [item["slug"] for item in listing.json()] == [uuid]


async def test_view_context_hides_raw_title(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers, title="Fish & <Chips>")

    response = await async_client.get(changeset_path(created["slug"]), headers=headers)

    assert response.status_code == 200
    assert response.json()["title"] == {"rendered": "Fish &amp; &lt;Chips&gt;"}


async def test_private_changeset_title_is_prefixed(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers, title="Secret", status="private")

    assert created["title"] == {"raw": "Secret", "rendered": "Private: Secret"}


async def test_update_merges_and_removes_settings(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.administrator)
    created = await create_changeset(
        async_client,
        headers,
        settings={
            "blogname": {"value": "Old"},
            "blogdescription": {"value": "Tagline"},
        },
    )

    response = await async_client.put(
        changeset_path(created["slug"]),
        json={
            "title": {"raw": "Renamed"},
            "settings": {
                "blogname": {"value": "New"},
                "blogdescription": None,
                "custom_css": {"value": "body { color: red; }"},
            },
        },
        headers=headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["title"]["raw"] == "Renamed"
    assert body["settings"] == {
        "blogname": {"value": "New"},
        "custom_css": {"value": "body { color: red; }"},
    }


async def test_patch_is_accepted_as_update(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers, title="Before")

    response = await async_client.patch(
        changeset_path(created["slug"]),
        json={"title": "After"},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["title"]["raw"] == "After"


async def test_moving_out_of_draft_fixes_the_gmt_date(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers, status="draft")
    assert created["date_gmt"] is None

    response = await async_client.put(
        changeset_path(created["slug"]),
        json={"status": "publish"},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "publish"
    assert body["date_gmt"] == body["date"]


async def test_explicit_gmt_date_sets_both_dates(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    created = await create_changeset(
        async_client,
        auth_headers(seeded_identity.author),
        status="future",
        date_gmt="2031-05-06T07:08:09Z",
    )

    assert created["date_gmt"] == "2031-05-06T07:08:09"
    assert created["date"] == "2031-05-06T07:08:09"


async def test_twelve_hour_local_date_is_accepted(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    created = await create_changeset(
        async_client,
        auth_headers(seeded_identity.author),
        status="draft",
        date="2031-05-06 7:30 pm",
    )

    assert created["date"] == "2031-05-06T19:30:00"
    assert created["date_gmt"] == "2031-05-06T19:30:00"


async def test_invalid_date_is_rejected(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.post(
        CHANGESETS_PATH,
        json={"date": "next tuesday"},
        headers=auth_headers(seeded_identity.author),
    )

    assert response.status_code == 400
    assert problem_type(response) == "rest_incorrect_date"


async def test_slug_edit_is_rejected_without_partial_apply(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers, title="Original")

    response = await async_client.put(
        changeset_path(created["slug"]),
        json={"slug": "renamed-slug", "title": "Changed"},
        headers=headers,
    )

    assert response.status_code == 400
    assert problem_type(response) == "cannot_edit_changeset_slug"

    fetched = await async_client.get(
        changeset_path(created["slug"]), params={"context": "edit"}, headers=headers
    )
    assert fetched.json()["title"]["raw"] == "Original"


async def test_slug_on_create_is_rejected(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.post(
        CHANGESETS_PATH,
        json={"slug": "my-slug"},
        headers=auth_headers(seeded_identity.author),
    )

    assert response.status_code == 400
    assert problem_type(response) == "cannot_edit_changeset_slug"


async def test_unknown_setting_is_rejected(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.post(
        CHANGESETS_PATH,
        json={"settings": {"no_such_setting": {"value": 1}}},
        headers=auth_headers(seeded_identity.administrator),
    )

    assert response.status_code == 400
    assert problem_type(response) == "invalid_customize_changeset_data"
    assert response.json()["detail"] == "Invalid setting."


async def test_malformed_settings_are_rejected(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.post(
        CHANGESETS_PATH,
        json={"settings": {"blogname": "missing value wrapper"}},
        headers=auth_headers(seeded_identity.administrator),
    )

    assert response.status_code == 400
    assert problem_type(response) == "invalid_customize_changeset_data"


async def test_unknown_author_is_rejected(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.post(
        CHANGESETS_PATH,
        json={"author": 9999},
        headers=auth_headers(seeded_identity.administrator),
    )

    assert response.status_code == 400
    assert problem_type(response) == "rest_invalid_author"


async def test_get_missing_changeset_returns_404(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.get(
        changeset_path(str(uuid4())),
        headers=auth_headers(seeded_identity.administrator),
    )

    assert response.status_code == 404
    assert problem_type(response) == "rest_post_invalid_uuid"


async def test_malformed_uuid_is_a_parameter_error(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.get(
        changeset_path("not-a-uuid"),
        headers=auth_headers(seeded_identity.administrator),
    )

    assert response.status_code == 400
    assert problem_type(response) == "rest_invalid_param"


async def test_uppercase_uuid_is_a_parameter_error(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers)

    response = await async_client.get(changeset_path(created["slug"].upper()), headers=headers)

    assert response.status_code == 400
    assert problem_type(response) == "rest_invalid_param"


async def test_update_missing_changeset_returns_404(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    response = await async_client.put(
        changeset_path(str(uuid4())),
        json={"title": "Nope"},
        headers=auth_headers(seeded_identity.administrator),
    )

    assert response.status_code == 404


async def test_delete_trashes_then_reports_gone(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers, status="draft")
    path = changeset_path(created["slug"])

    trashed = await async_client.delete(path, headers=headers)
    assert trashed.status_code == 200
    assert trashed.json()["status"] == "trash"

    again = await async_client.delete(path, headers=headers)
    assert again.status_code == 410
    assert problem_type(again) == "rest_already_trashed"

    listing = await async_client.get(
        CHANGESETS_PATH, params={"status": "trash"}, headers=headers
    )
    assert [item["slug"] for item in listing.json()] == [created["slug"]]


async def test_force_delete_removes_changeset(
    async_client: AsyncClient, seeded_identity, auth_headers
) -> None:
    headers = auth_headers(seeded_identity.author)
    created = await create_changeset(async_client, headers, title="Doomed")
    path = changeset_path(created["slug"])

    response = await async_client.delete(path, params={"force": "true"}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["deleted"] is True
    assert body["previous"]["slug"] == created["slug"]
    assert body["previous"]["title"]["raw"] == "Doomed"

    missing = await async_client.get(path, headers=headers)
    assert missing.status_code == 404
