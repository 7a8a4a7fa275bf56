from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from changesets_api.settings import Settings
from tests.conftest import TEST_SECRET_KEY


def _settings(**values: object) -> Settings:
    return Settings(_env_file=None, **values)


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHANGESETS_SECRET_KEY", TEST_SECRET_KEY)

    settings = _settings()

    assert settings.app_name == "Customize Changesets API"
    assert settings.api_docs_enabled is False
    assert settings.log_format == "console"
    assert settings.log_level == "INFO"
    assert settings.effective_request_log_level == "INFO"
    assert settings.database_url.endswith("changesets.sqlite")
    assert settings.auth_disabled is False
    assert settings.site_zone == ZoneInfo("UTC")
    assert settings.server_cors_origins == []


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHANGESETS_SECRET_KEY", TEST_SECRET_KEY)
    monkeypatch.setenv("CHANGESETS_SITE_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("CHANGESETS_LOG_LEVEL", "debug")
    monkeypatch.setenv("CHANGESETS_SERVER_CORS_ORIGINS", "http://a.test, http://b.test")

    settings = _settings()

    assert settings.site_zone == ZoneInfo("Europe/Berlin")
    assert settings.log_level == "DEBUG"
    assert settings.server_cors_origins == ["http://a.test", "http://b.test"]


def test_cors_origins_accept_json_lists() -> None:
    settings = _settings(
        secret_key=TEST_SECRET_KEY,
        server_cors_origins='["http://a.test"]',
    )

    assert settings.server_cors_origins == ["http://a.test"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"secret_key": "too-short"},
        {"site_timezone": "Mars/Olympus_Mons"},
        {"log_level": "chatty"},
        {"log_format": "xml"},
        {"algorithm": "RS256"},
    ],
)
def test_invalid_settings_are_rejected(overrides: dict[str, object]) -> None:
    values: dict[str, object] = {"secret_key": TEST_SECRET_KEY}
    values.update(overrides)

    with pytest.raises(ValidationError):
        _settings(**values)


def test_safe_dump_hides_secret() -> None:
    dumped = _settings(secret_key=TEST_SECRET_KEY).safe_dump()

    assert "secret_key" not in dumped
    assert dumped["site_timezone"] == "UTC"
