"""
Authentication and authorization module.

Verifies identity-provider JWTs, resolves them to accounts, and provides
role-scoped FastAPI dependencies.
"""

from bidproxy.auth.middleware import CurrentUserDep, get_current_user
from bidproxy.auth.models import AccountState, User, UserRole
from bidproxy.auth.rbac import (
    CustomerUser,
    EmployeeUser,
    RBACChecker,
    RolePermissions,
    SuperAdminUser,
    require_customer,
    require_employee,
    require_super_admin,
)
from bidproxy.auth.schemas import CurrentUser

__all__ = [
    "AccountState",
    "CurrentUser",
    "CurrentUserDep",
    "CustomerUser",
    "EmployeeUser",
    "RBACChecker",
    "RolePermissions",
    "SuperAdminUser",
    "User",
    "UserRole",
    "get_current_user",
    "require_customer",
    "require_employee",
    "require_super_admin",
]
