"""RBAC (Role-Based Access Control) for the roster service."""

from .permissions import Permission, Resource, Action, PERMISSION_DEFINITIONS
from .roles import UserRole, ROLE_PERMISSIONS, get_role_permissions
from .checker import PermissionChecker, has_permission, require_permission

__all__ = [
    "Permission",
    "Resource",
    "Action",
    "PERMISSION_DEFINITIONS",
    "UserRole",
    "ROLE_PERMISSIONS",
    "get_role_permissions",
    "PermissionChecker",
    "has_permission",
    "require_permission",
]
