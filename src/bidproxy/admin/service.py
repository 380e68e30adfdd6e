"""
Employee account management for super admins.

Deactivation is a soft, one-way state change: the row stays, the active
flag drops, and an entry is appended to the employee's action log.
"""

from bidproxy.audit.models import EmployeeAction, EmployeeActionType
from bidproxy.audit.recorder import AuditTrailRecorder
from bidproxy.auth.models import User, UserRole
from bidproxy.auth.repository import UserRepository
from bidproxy.auth.schemas import CurrentUser
from bidproxy.shared.exceptions import EmployeeNotFoundError, ValidationError
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)

DEACTIVATION_NOTE = "Employee account deactivated by super admin"


class EmployeeAdminService:
    """Service for super-admin operations on employee accounts."""

    def __init__(self, users: UserRepository, recorder: AuditTrailRecorder) -> None:
        self._users = users
        self._recorder = recorder

    async def list_employees(self) -> list[User]:
        return await self._users.list_by_role(UserRole.EMPLOYEE)

    async def deactivate_employee(self, employee_id: str, admin: CurrentUser) -> User:
        """Soft-delete an employee account.

        Raises:
            EmployeeNotFoundError: If no user has this id.
            ValidationError: If the target is not an employee or is already
                deactivated.
        """
        employee = await self._users.get_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        if employee.role != UserRole.EMPLOYEE.value:
            raise ValidationError(
                "Can only delete employee accounts",
                details={"user_id": employee_id, "role": employee.role},
            )
        if not employee.is_active:
            raise ValidationError(
                "Employee account is already deactivated",
                details={"employee_id": employee_id},
            )

        employee = await self._users.set_active(employee, False)
        await self._recorder.record_employee_action(
            employee_id=employee_id,
            action_type=EmployeeActionType.DELETED,
            performed_by=admin.id,
            notes=DEACTIVATION_NOTE,
        )
        logger.info(
            "Employee deactivated",
            extra={"employee_id": employee_id, "admin_id": admin.id},
        )
        return employee

    async def list_employee_actions(self, employee_id: str) -> list[EmployeeAction]:
        """Full action log for an employee, newest first."""
        return await self._recorder.get_employee_actions(employee_id)
