"""
Super-admin API router: employee accounts and their action logs.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bidproxy.admin.schemas import DeactivationResponse, EmployeeActionResponse
from bidproxy.admin.service import EmployeeAdminService
from bidproxy.audit.recorder import AuditTrailRecorder
from bidproxy.auth.rbac import SuperAdminUser
from bidproxy.auth.repository import UserRepository
from bidproxy.auth.schemas import UserProfile
from bidproxy.shared.database import get_db_session
from bidproxy.shared.schemas import ErrorResponse

router = APIRouter(prefix="/api/admin", tags=["admin"])

_AUTH_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Super admin access required"},
}


def get_admin_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> EmployeeAdminService:
    """Dependency for employee admin service."""
    return EmployeeAdminService(UserRepository(session), AuditTrailRecorder(session))


AdminServiceDep = Annotated[EmployeeAdminService, Depends(get_admin_service)]


@router.get("/employees", response_model=list[UserProfile], responses=_AUTH_RESPONSES)
async def list_employees(
    current_user: SuperAdminUser,
    service: AdminServiceDep,
) -> list[UserProfile]:
    """List all employee accounts, active or not."""
    employees = await service.list_employees()
    return [UserProfile.model_validate(e) for e in employees]


@router.delete(
    "/employees/{employee_id}",
    response_model=DeactivationResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"model": ErrorResponse, "description": "Not an active employee account"},
        404: {"model": ErrorResponse, "description": "Employee not found"},
    },
)
async def deactivate_employee(
    employee_id: str,
    current_user: SuperAdminUser,
    service: AdminServiceDep,
) -> DeactivationResponse:
    """Deactivate an employee account. The account row is kept."""
    employee = await service.deactivate_employee(employee_id, current_user)
    return DeactivationResponse(
        message="Employee account deleted successfully",
        employee_id=employee.id,
        is_active=employee.is_active,
    )


@router.get(
    "/employees/{employee_id}/actions",
    response_model=list[EmployeeActionResponse],
    responses=_AUTH_RESPONSES,
)
async def list_employee_actions(
    employee_id: str,
    current_user: SuperAdminUser,
    service: AdminServiceDep,
) -> list[EmployeeActionResponse]:
    actions = await service.list_employee_actions(employee_id)
    return [EmployeeActionResponse.model_validate(a) for a in actions]
