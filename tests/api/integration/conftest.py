from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session, sessionmaker

from changesets_api.db import get_session_factory_from_app
from changesets_api.main import create_app
from changesets_api.settings import Settings, get_settings
from changesets_db.models import User, UserRole
from tests.utils import bearer_headers


@dataclass(frozen=True, slots=True)
class SeededUser:
    id: int
    login: str
    role: UserRole


@dataclass(frozen=True, slots=True)
class SeededIdentity:
    administrator: SeededUser
    editor: SeededUser
    author: SeededUser
    other_author: SeededUser
    contributor: SeededUser
    subscriber: SeededUser


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    app = create_app(settings=settings)
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest_asyncio.fixture()
async def started_app(app: FastAPI) -> AsyncIterator[FastAPI]:
    async with LifespanManager(app):
        yield app


@pytest.fixture()
def db_sessionmaker(started_app: FastAPI) -> sessionmaker[Session]:
    return get_session_factory_from_app(started_app)


@pytest_asyncio.fixture()
async def async_client(started_app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=started_app),
        base_url="http://testserver",
    ) as client:
        yield client


@pytest.fixture()
def seeded_identity(db_sessionmaker: sessionmaker[Session]) -> SeededIdentity:
    def _create_user(login: str, role: UserRole) -> SeededUser:
        with db_sessionmaker() as session:
            with session.begin():
                user = User(login=login, display_name=login.title(), role=role)
                session.add(user)
                session.flush()
                return SeededUser(id=user.id, login=login, role=role)

    return SeededIdentity(
        administrator=_create_user("admin", UserRole.ADMINISTRATOR),
        editor=_create_user("editor", UserRole.EDITOR),
        author=_create_user("author", UserRole.AUTHOR),
        other_author=_create_user("other-author", UserRole.AUTHOR),
        contributor=_create_user("contributor", UserRole.CONTRIBUTOR),
        subscriber=_create_user("subscriber", UserRole.SUBSCRIBER),
    )


@pytest.fixture()
def auth_headers(settings: Settings) -> Callable[[SeededUser], dict[str, str]]:
    def _headers(user: SeededUser) -> dict[str, str]:
        return bearer_headers(settings, user.id)

    return _headers
