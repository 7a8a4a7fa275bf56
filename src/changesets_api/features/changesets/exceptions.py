"""Domain errors raised by the changesets feature.

Each error carries a stable machine-readable ``code`` that becomes the
Problem Details ``type`` and a human-readable message that becomes ``detail``.
"""

from __future__ import annotations

from fastapi import status

from changesets_api.common.problem_details import ApiError


class ChangesetError(ApiError):
    """Base class for changeset errors."""

    default_status: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        code: str,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            error_type=code,
            status_code=status_code or self.default_status,
            detail=message,
        )
        self.code = code
        self.message = message


class ChangesetValidationError(ChangesetError):
    """Malformed input: bad shape, date, status value, slug edit, page number."""

    default_status = status.HTTP_400_BAD_REQUEST


class ChangesetAuthorizationError(ChangesetError):
    """Resource- or field-level capability failure (401 when anonymous)."""

    default_status = status.HTTP_403_FORBIDDEN


class ChangesetNotFoundError(ChangesetError):
    """The requested UUID resolves to no changeset."""

    default_status = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        code: str = "rest_post_invalid_uuid",
        message: str = "Invalid changeset UUID.",
    ) -> None:
        super().__init__(code, message)


class ChangesetGoneError(ChangesetError):
    """The changeset is already in the trash."""

    default_status = status.HTTP_410_GONE


class ChangesetPersistenceError(ChangesetError):
    """The store failed to persist a write."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


__all__ = [
    "ChangesetAuthorizationError",
    "ChangesetError",
    "ChangesetGoneError",
    "ChangesetNotFoundError",
    "ChangesetPersistenceError",
    "ChangesetValidationError",
]
