"""Permission model for the roster service.

Permissions are ``"resource:action"`` strings, e.g. ``requests:create``,
``approvals:approve`` or ``positions:manage``. ``manage`` covers create,
update and delete of master data and users.
"""

from enum import Enum
from typing import Dict, FrozenSet, NamedTuple


class Resource(str, Enum):
    # Workflow
    REQUESTS = "requests"
    APPROVALS = "approvals"

    # Master data
    REGIONS = "regions"
    LOCATIONS = "locations"
    POSITIONS = "positions"
    USERS = "users"
    SETTINGS = "settings"

    # Reporting and administration
    NOTIFICATIONS = "notifications"
    DASHBOARD = "dashboard"
    DATABASE = "database"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"
    APPROVE = "approve"
    MANAGE = "manage"


class Permission(NamedTuple):
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"

    @classmethod
    def from_string(cls, perm_str: str) -> "Permission":
        """Parse ``"regions:list"``; raises ValueError on anything else."""
        resource, sep, action = perm_str.partition(":")
        if not sep:
            raise ValueError(f"Invalid permission format: {perm_str}")
        return cls(Resource(resource), Action(action))


_READ_LIST = frozenset([Action.READ, Action.LIST])

# Valid actions per resource
PERMISSION_MATRIX: Dict[Resource, FrozenSet[Action]] = {
    Resource.REQUESTS: _READ_LIST | {Action.CREATE},
    Resource.APPROVALS: _READ_LIST | {Action.APPROVE},
    Resource.REGIONS: _READ_LIST | {Action.MANAGE},
    Resource.LOCATIONS: _READ_LIST | {Action.MANAGE},
    Resource.POSITIONS: _READ_LIST | {Action.MANAGE},
    Resource.USERS: _READ_LIST | {Action.MANAGE},
    Resource.SETTINGS: frozenset([Action.READ, Action.UPDATE]),
    Resource.NOTIFICATIONS: frozenset([Action.READ, Action.UPDATE]),
    Resource.DASHBOARD: frozenset([Action.READ]),
    Resource.DATABASE: frozenset([Action.READ, Action.DELETE]),
}

# "resource:action" -> Permission, for every valid combination
PERMISSION_DEFINITIONS: Dict[str, Permission] = {
    str(Permission(resource, action)): Permission(resource, action)
    for resource, actions in PERMISSION_MATRIX.items()
    for action in actions
}


def is_valid_permission(perm_str: str) -> bool:
    return perm_str in PERMISSION_DEFINITIONS
