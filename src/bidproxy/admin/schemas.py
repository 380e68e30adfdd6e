"""
Pydantic schemas for the super-admin API.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from bidproxy.audit.models import EmployeeActionType


class EmployeeActionResponse(BaseModel):
    """One entry of an employee's action log."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    employee_id: str
    action_type: EmployeeActionType
    performed_by: str
    notes: str | None = None
    created_at: datetime


class DeactivationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    employee_id: str
    is_active: bool
