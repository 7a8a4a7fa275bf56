"""Service settings (conventional Pydantic v2 ``BaseSettings``)."""

from __future__ import annotations

import json
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---- Defaults ---------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_DATABASE_URL = f"sqlite:///{PROJECT_ROOT / 'data' / 'changesets.sqlite'}"
DEFAULT_CORS_ORIGINS: list[str] = []

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})


def changesets_settings_config() -> SettingsConfigDict:
    """Return the standard ``BaseSettings`` config dict."""

    return SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        env_prefix="CHANGESETS_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        enable_decoding=False,
        str_strip_whitespace=True,
    )


def create_settings_accessors[T](
    settings_type: type[T],
) -> tuple[Callable[[], T], Callable[[], T]]:
    """Create ``get_settings`` and ``reload_settings`` helpers for a settings class."""

    @lru_cache(maxsize=1)
    def _build() -> T:
        return settings_type()

    def get_settings() -> T:
        return _build()

    def reload_settings() -> T:
        _build.cache_clear()
        return _build()

    return get_settings, reload_settings


def normalize_log_format(value: str, *, env_var: str = "CHANGESETS_LOG_FORMAT") -> str:
    normalized = value.strip().lower()
    if normalized not in ALLOWED_LOG_FORMATS:
        allowed = ", ".join(sorted(ALLOWED_LOG_FORMATS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def normalize_log_level(value: str | None, *, env_var: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


# ---- Settings ---------------------------------------------------------------


class Settings(BaseSettings):
    """FastAPI settings loaded from CHANGESETS_* environment variables."""

    model_config = changesets_settings_config()

    # Core
    app_name: str = "Customize Changesets API"
    app_version: str = "0.1.0"
    api_docs_enabled: bool = False
    log_format: str = "console"
    log_level: str = "INFO"
    request_log_level: str | None = None

    # Server
    server_cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    # Database
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    database_log_level: str | None = None

    # JWT
    secret_key: SecretStr = Field(..., min_length=32)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(30, ge=1)

    # Auth policy
    auth_disabled: bool = False
    auth_disabled_user_id: int = Field(1, ge=1)
    auth_disabled_user_login: str = "developer"

    # Site
    site_timezone: str = "UTC"

    # ---- Validators ----

    @field_validator("server_cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> object:
        if value is None:
            return value
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return []
            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                except json.JSONDecodeError:
                    parsed = None
                if isinstance(parsed, list):
                    return parsed
            return [item.strip() for item in raw.split(",") if item.strip()]
        if isinstance(value, tuple):
            return list(value)
        return value

    @field_validator("site_timezone")
    @classmethod
    def _validate_site_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError("CHANGESETS_SITE_TIMEZONE must be an IANA timezone name.") from exc
        return value

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        self.log_format = normalize_log_format(self.log_format)

        normalized_log_level = normalize_log_level(self.log_level, env_var="CHANGESETS_LOG_LEVEL")
        if normalized_log_level is None:
            raise ValueError("CHANGESETS_LOG_LEVEL must not be empty.")
        self.log_level = normalized_log_level

        self.request_log_level = normalize_log_level(
            self.request_log_level,
            env_var="CHANGESETS_REQUEST_LOG_LEVEL",
        )
        self.database_log_level = normalize_log_level(
            self.database_log_level,
            env_var="CHANGESETS_DATABASE_LOG_LEVEL",
        )

        if self.algorithm != "HS256":
            raise ValueError("CHANGESETS_ALGORITHM must be HS256.")
        if len(self.secret_key.get_secret_value().encode("utf-8")) < 32:
            raise ValueError("CHANGESETS_SECRET_KEY must be at least 32 bytes (recommend 64+).")
        return self

    # ---- Convenience ----

    @property
    def effective_request_log_level(self) -> str:
        return self.request_log_level or self.log_level

    @property
    def secret_key_value(self) -> str:
        return self.secret_key.get_secret_value()

    @property
    def site_zone(self) -> ZoneInfo:
        return ZoneInfo(self.site_timezone)

    def safe_dump(self) -> dict[str, Any]:
        return self.model_dump(exclude={"secret_key"})


get_settings, reload_settings = create_settings_accessors(Settings)


__all__ = [
    "DEFAULT_PER_PAGE",
    "MAX_PER_PAGE",
    "Settings",
    "get_settings",
    "reload_settings",
]
