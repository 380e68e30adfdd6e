"""
Audit trail recorder.

Adds entries to the caller's session; the caller's transaction decides
whether they become durable. Entries are never updated.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bidproxy.audit.models import BidHistoryEntry, EmployeeAction, EmployeeActionType
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)


class AuditTrailRecorder:
    """Appends and reads bid history and employee action records."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record_bid_transition(
        self,
        bid_id: str,
        previous_status: str | None,
        new_status: str,
        changed_by: str,
        notes: str | None = None,
    ) -> BidHistoryEntry:
        entry = BidHistoryEntry(
            bid_id=bid_id,
            previous_status=previous_status,
            new_status=new_status,
            changed_by=changed_by,
            notes=notes,
        )
        self._session.add(entry)
        await self._session.flush()
        logger.info(
            "Bid transition recorded",
            extra={
                "bid_id": bid_id,
                "from_status": previous_status,
                "to_status": new_status,
                "changed_by": changed_by,
            },
        )
        return entry

    async def record_employee_action(
        self,
        employee_id: str,
        action_type: EmployeeActionType,
        performed_by: str,
        notes: str | None = None,
    ) -> EmployeeAction:
        action = EmployeeAction(
            employee_id=employee_id,
            action_type=action_type.value,
            performed_by=performed_by,
            notes=notes,
        )
        self._session.add(action)
        await self._session.flush()
        logger.info(
            "Employee action recorded",
            extra={
                "employee_id": employee_id,
                "action_type": action_type.value,
                "performed_by": performed_by,
            },
        )
        return action

    async def get_bid_history(self, bid_id: str) -> list[BidHistoryEntry]:
        """History of a bid, newest first."""
        result = await self._session.execute(
            select(BidHistoryEntry)
            .where(BidHistoryEntry.bid_id == bid_id)
            .order_by(BidHistoryEntry.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_employee_actions(self, employee_id: str) -> list[EmployeeAction]:
        """Action log for an employee, newest first."""
        result = await self._session.execute(
            select(EmployeeAction)
            .where(EmployeeAction.employee_id == employee_id)
            .order_by(EmployeeAction.created_at.desc())
        )
        return list(result.scalars().all())
