"""Role definitions for the roster service.

Three roles, stored as a string on the user:
1. ADMIN - Full system access, may decide on any pending request
2. MANAGER - Manages master data and users, approves at the Manager level
3. EMPLOYEE - Submits requests; approves only through a chain position
"""

from enum import Enum
from typing import Dict, List

from .permissions import Resource, Action, Permission


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


def _build_permissions(*perms: tuple) -> List[str]:
    """Build permission strings from (Resource, Action) tuples."""
    return [str(Permission(r, a)) for r, a in perms]


ADMIN_PERMISSIONS = [
    "*:*"  # Global wildcard - all permissions
]

MANAGER_PERMISSIONS = _build_permissions(
    (Resource.REQUESTS, Action.CREATE),
    (Resource.REQUESTS, Action.READ),
    (Resource.REQUESTS, Action.LIST),
    
    (Resource.APPROVALS, Action.READ),
    (Resource.APPROVALS, Action.LIST),
    (Resource.APPROVALS, Action.APPROVE),
    
    (Resource.REGIONS, Action.READ),
    (Resource.REGIONS, Action.LIST),
    (Resource.REGIONS, Action.MANAGE),
    (Resource.LOCATIONS, Action.READ),
    (Resource.LOCATIONS, Action.LIST),
    (Resource.LOCATIONS, Action.MANAGE),
    (Resource.POSITIONS, Action.READ),
    (Resource.POSITIONS, Action.LIST),
    (Resource.POSITIONS, Action.MANAGE),
    (Resource.USERS, Action.READ),
    (Resource.USERS, Action.LIST),
    (Resource.USERS, Action.MANAGE),
    
    (Resource.SETTINGS, Action.READ),
    (Resource.NOTIFICATIONS, Action.READ),
    (Resource.NOTIFICATIONS, Action.UPDATE),
    (Resource.DASHBOARD, Action.READ),
)

# Employees holding a GSL or Koordinator position still decide on requests;
# position matching happens in the workflow, not here.
EMPLOYEE_PERMISSIONS = _build_permissions(
    (Resource.REQUESTS, Action.CREATE),
    (Resource.REQUESTS, Action.READ),
    (Resource.REQUESTS, Action.LIST),
    
    (Resource.APPROVALS, Action.READ),
    (Resource.APPROVALS, Action.LIST),
    (Resource.APPROVALS, Action.APPROVE),
    
    (Resource.REGIONS, Action.READ),
    (Resource.REGIONS, Action.LIST),
    (Resource.LOCATIONS, Action.READ),
    (Resource.LOCATIONS, Action.LIST),
    (Resource.POSITIONS, Action.READ),
    (Resource.POSITIONS, Action.LIST),
    
    (Resource.SETTINGS, Action.READ),
    (Resource.NOTIFICATIONS, Action.READ),
    (Resource.NOTIFICATIONS, Action.UPDATE),
)


ROLE_PERMISSIONS: Dict[str, List[str]] = {
    UserRole.ADMIN.value: ADMIN_PERMISSIONS,
    UserRole.MANAGER.value: MANAGER_PERMISSIONS,
    UserRole.EMPLOYEE.value: EMPLOYEE_PERMISSIONS,
}


def get_role_permissions(role: str) -> List[str]:
    """Get permissions list for a role; unknown roles get none."""
    return ROLE_PERMISSIONS.get(str(role), [])
