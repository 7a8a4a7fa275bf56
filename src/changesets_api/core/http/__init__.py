"""HTTP-facing auth dependencies and handlers."""

from .dependencies import (
    PrincipalDep,
    RbacDep,
    get_current_principal,
    get_rbac_service,
)
from .errors import register_auth_exception_handlers

__all__ = [
    "PrincipalDep",
    "RbacDep",
    "get_current_principal",
    "get_rbac_service",
    "register_auth_exception_handlers",
]
