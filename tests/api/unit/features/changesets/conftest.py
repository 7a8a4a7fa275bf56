from __future__ import annotations

from collections.abc import Callable

import pytest

from changesets_api.core.auth import AuthenticatedPrincipal, AuthVia
from changesets_api.features.changesets.permissions import ChangesetAuthorizationGate
from tests.fakes import OWNER_ID, StaticRbac


@pytest.fixture()
def make_gate() -> Callable[..., ChangesetAuthorizationGate]:
    def _make(
        *capabilities: str,
        user_id: int | None = OWNER_ID,
    ) -> ChangesetAuthorizationGate:
        principal = AuthenticatedPrincipal(
            user_id=user_id,
            auth_via=AuthVia.BEARER if user_id is not None else AuthVia.ANONYMOUS,
        )
        return ChangesetAuthorizationGate(principal=principal, rbac=StaticRbac(capabilities))

    return _make
