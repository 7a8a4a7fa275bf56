"""Shared pytest fixtures for the changesets API tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from changesets_api.settings import Settings

TEST_SECRET_KEY = "test-secret-key-for-tests-please-change-me"


def build_test_settings(tmp_path: Path, **overrides: object) -> Settings:
    """Return settings bound to a throwaway SQLite file under ``tmp_path``."""

    values: dict[str, object] = {
        "secret_key": TEST_SECRET_KEY,
        "database_url": f"sqlite:///{tmp_path / 'changesets.sqlite'}",
        "auth_disabled": False,
        "site_timezone": "UTC",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def _clear_changesets_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep tests deterministic regardless of shell/.env overrides.
    for key in list(os.environ):
        if key.startswith("CHANGESETS_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return build_test_settings(tmp_path)
