from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from changesets_api.api.deps import get_changesets_service, get_changesets_service_read
from changesets_api.core.auth import AuthenticatedPrincipal, AuthVia
from changesets_api.features.changesets.hooks import ChangesetHooks
from changesets_api.features.changesets.service import ChangesetsService
from tests.fakes import OWNER_ID, StaticRbac


@pytest.mark.parametrize("factory", [get_changesets_service, get_changesets_service_read])
def test_service_factories_bind_the_given_session(factory, settings) -> None:
    session = Session()
    principal = AuthenticatedPrincipal(user_id=OWNER_ID, auth_via=AuthVia.BEARER)

    service = factory(session, settings, principal, StaticRbac(()), ChangesetHooks())

    assert isinstance(service, ChangesetsService)
    assert service._session is session
    session.close()
