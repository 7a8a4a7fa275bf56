"""Central exports for changeset SQLAlchemy models."""

from .changeset import (
    CHANGESET_POST_TYPE,
    CHANGESET_STATUS_VALUES,
    Changeset,
    ChangesetStatus,
)
from .user import USER_ROLE_VALUES, User, UserRole

__all__ = [
    "CHANGESET_POST_TYPE",
    "CHANGESET_STATUS_VALUES",
    "USER_ROLE_VALUES",
    "Changeset",
    "ChangesetStatus",
    "User",
    "UserRole",
]
