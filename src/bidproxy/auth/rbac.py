"""
Role-Based Access Control (RBAC) dependencies.

Roles are checked once per request; the resulting CurrentUser is passed
explicitly into the services.
"""

from collections.abc import Iterable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from bidproxy.auth.middleware import get_current_user
from bidproxy.auth.models import UserRole
from bidproxy.auth.schemas import CurrentUser
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)


class RolePermissions:
    """Which roles may reach each tier of endpoints."""

    CUSTOMER = frozenset({UserRole.CUSTOMER})
    # Super admins oversee employees and can act on the bid floor too.
    EMPLOYEE = frozenset({UserRole.EMPLOYEE, UserRole.SUPER_ADMIN})
    SUPER_ADMIN = frozenset({UserRole.SUPER_ADMIN})

    @classmethod
    def can_perform(cls, user_role: str | UserRole, permission_set: Iterable[UserRole]) -> bool:
        """Check whether a role belongs to a permission set.

        Unknown role strings are never permitted.
        """
        try:
            role = UserRole(user_role)
        except ValueError:
            return False
        return role in set(permission_set)


class RBACChecker:
    """Dependency class for role-based access control checks."""

    def __init__(self, allowed_roles: Iterable[UserRole], tier: str) -> None:
        """Initialize RBAC checker.

        Args:
            allowed_roles: Roles permitted through this checker.
            tier: Name of the tier, reported in denials.
        """
        self.allowed_roles = frozenset(allowed_roles)
        self.tier = tier

    async def __call__(
        self,
        request: Request,
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if not RolePermissions.can_perform(current_user.role, self.allowed_roles):
            logger.warning(
                "Access denied",
                extra={
                    "user_id": current_user.id,
                    "user_role": current_user.role.value,
                    "required_tier": self.tier,
                    "endpoint": str(request.url.path),
                    "method": request.method,
                    "client_ip": request.client.host if request.client else "unknown",
                    "event_type": "access_denied",
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "INSUFFICIENT_PERMISSIONS",
                    "message": f"{self.tier.replace('_', ' ').capitalize()} access required",
                    "required_tier": self.tier,
                    "current_role": current_user.role.value,
                },
            )

        logger.debug(
            "Access granted",
            extra={
                "user_id": current_user.id,
                "endpoint": str(request.url.path),
                "method": request.method,
            },
        )
        return current_user


require_customer = RBACChecker(RolePermissions.CUSTOMER, "customer")
require_employee = RBACChecker(RolePermissions.EMPLOYEE, "employee")
require_super_admin = RBACChecker(RolePermissions.SUPER_ADMIN, "super_admin")

CustomerUser = Annotated[CurrentUser, Depends(require_customer)]
EmployeeUser = Annotated[CurrentUser, Depends(require_employee)]
SuperAdminUser = Annotated[CurrentUser, Depends(require_super_admin)]
