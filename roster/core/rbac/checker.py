"""Permission checks for API endpoints.

A user's permissions come from their role alone; decisions on individual
requests are further restricted by position inside the approval workflow.
"""

from functools import wraps
from typing import Callable, FrozenSet, Iterable, Union

from fastapi import HTTPException, status

from .permissions import Permission, is_valid_permission
from .roles import get_role_permissions

GLOBAL_WILDCARD = "*:*"

PermissionLike = Union[str, Permission]


class PermissionChecker:
    """Answers permission questions for one role."""

    def __init__(self, granted: Iterable[str]):
        self.granted: FrozenSet[str] = frozenset(granted)

    @classmethod
    def for_role(cls, role: str) -> "PermissionChecker":
        return cls(get_role_permissions(role))

    def allows(self, permission: PermissionLike) -> bool:
        """Exact grant, ``resource:*`` or the global wildcard."""
        perm_str = str(permission)
        if GLOBAL_WILDCARD in self.granted or perm_str in self.granted:
            return True
        resource = perm_str.split(":", 1)[0]
        return f"{resource}:*" in self.granted


def has_permission(user, permission: PermissionLike) -> bool:
    """Check if ``user`` (anything with a ``role``) holds ``permission``."""
    if not user or not user.role:
        return False
    return PermissionChecker.for_role(user.role).allows(permission)


def require_permission(permission: PermissionLike):
    """
    Decorator for FastAPI endpoints that take a ``current_user`` dependency.

    Raises 401 when no user was resolved and 403 when the role lacks the
    permission. Unknown permission strings fail at import time.

    Usage:
        @router.get("/regions")
        @require_permission("regions:list")
        async def list_regions(current_user: User = Depends(get_current_user)):
            ...
    """
    perm_str = str(permission)
    if not is_valid_permission(perm_str):
        raise ValueError(f"Unknown permission: {perm_str}")

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_user = kwargs.get("current_user")
            if not current_user:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Authentication required",
                )

            if not has_permission(current_user, perm_str):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"Insufficient permissions. Required: {perm_str}",
                )

            return await func(*args, **kwargs)

        return wrapper
    return decorator
