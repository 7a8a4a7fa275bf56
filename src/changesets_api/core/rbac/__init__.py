"""Capability oracle interface and the role-based implementation."""

from .roles import ROLE_CAPABILITIES, RoleRbacService
from .service_interface import RbacService

__all__ = ["ROLE_CAPABILITIES", "RbacService", "RoleRbacService"]
