from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from changesets_api.common.exceptions import register_exception_handlers
from changesets_api.common.problem_details import ApiError, format_error_path

pytestmark = pytest.mark.asyncio


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom() -> None:
        raise ApiError(error_type="rest_forbidden", status_code=403, detail="Nope.")

    @app.get("/crash")
    def crash() -> None:
        raise RuntimeError("kaboom")

    @app.get("/items")
    def items(limit: int) -> dict[str, int]:
        return {"limit": limit}

    return app


async def _get(path: str):
    transport = ASGITransport(app=_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        return await client.get(path)


async def test_api_error_renders_problem_details() -> None:
    response = await _get("/boom")

    assert response.status_code == 403
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["type"] == "rest_forbidden"
    assert body["detail"] == "Nope."
    assert body["instance"] == "/boom"


async def test_validation_errors_are_invalid_params() -> None:
    response = await _get("/items?limit=abc")

    assert response.status_code == 400
    body = response.json()
    assert body["type"] == "rest_invalid_param"
    assert body["detail"] == "Invalid parameter(s): limit"
    assert body["errors"][0]["path"] == "limit"


async def test_unhandled_errors_are_opaque() -> None:
    response = await _get("/crash")

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"


def test_format_error_path_skips_locations() -> None:
    assert format_error_path(("body", "settings", "blogname", 0)) == "settings.blogname[0]"
    assert format_error_path(("query",)) is None


async def test_unknown_route_is_not_found_problem() -> None:
    response = await _get("/missing")

    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "not_found"
    assert body["title"] == "Not Found"
