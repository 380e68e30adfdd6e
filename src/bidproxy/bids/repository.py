"""
Bid repository for database operations.

Every status-affecting write appends its history entry on the same session,
so both land in the caller's transaction together.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bidproxy.audit.models import BidHistoryEntry
from bidproxy.audit.recorder import AuditTrailRecorder
from bidproxy.bids.models import Bid, BidStatus
from bidproxy.shared.database import utcnow
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)

_UNSET = object()


class BidRepository:
    """Repository for bid database operations."""

    def __init__(
        self,
        session: AsyncSession,
        recorder: AuditTrailRecorder | None = None,
    ) -> None:
        self._session = session
        self._recorder = recorder or AuditTrailRecorder(session)

    async def create(self, bid: Bid) -> Bid:
        """Persist a new bid as pending and not refunded."""
        bid.status = BidStatus.PENDING.value
        bid.is_refunded = False
        self._session.add(bid)
        await self._session.flush()
        await self._session.refresh(bid)
        logger.info(
            "Created bid",
            extra={
                "bid_id": bid.id,
                "customer_id": bid.customer_id,
                "lot_number": bid.lot_number,
            },
        )
        return bid

    async def get_by_id(self, bid_id: str) -> Bid | None:
        result = await self._session.execute(select(Bid).where(Bid.id == bid_id))
        return result.scalar_one_or_none()

    async def get_for_update(self, bid_id: str) -> Bid | None:
        """Load a bid under a row lock, overwriting any stale identity-map copy.

        Backends without row locks (SQLite) ignore FOR UPDATE.
        """
        result = await self._session.execute(
            select(Bid)
            .where(Bid.id == bid_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_customer(self, customer_id: str) -> list[Bid]:
        """Bids owned by a customer, newest first."""
        result = await self._session.execute(
            select(Bid).where(Bid.customer_id == customer_id).order_by(Bid.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Bid]:
        """Every bid, newest first."""
        result = await self._session.execute(select(Bid).order_by(Bid.created_at.desc()))
        return list(result.scalars().all())

    async def _transition(
        self,
        bid: Bid,
        new_status: BidStatus,
        changed_by: str,
        history_notes: str | None,
    ) -> Bid:
        previous_status = bid.status
        bid.status = new_status.value
        await self._session.flush()
        await self._recorder.record_bid_transition(
            bid_id=bid.id,
            previous_status=previous_status,
            new_status=new_status.value,
            changed_by=changed_by,
            notes=history_notes,
        )
        await self._session.refresh(bid)
        return bid

    async def update_status(
        self,
        bid: Bid,
        new_status: BidStatus,
        changed_by: str,
        notes: str | None = None,
    ) -> Bid:
        """Move a bid to any status and record the transition.

        Notes overwrite the bid's notes only when given; the history entry
        always carries exactly the notes passed in.
        """
        if notes:
            bid.notes = notes
        return await self._transition(bid, new_status, changed_by, notes)

    async def approve(
        self,
        bid: Bid,
        approved_by: str,
        approved_at: datetime | None = None,
    ) -> Bid:
        bid.approved_by = approved_by
        bid.approved_at = approved_at or utcnow()
        return await self._transition(
            bid,
            BidStatus.APPROVED,
            approved_by,
            "Bid approved by employee",
        )

    async def reject(
        self,
        bid: Bid,
        rejected_by: str,
        notes: str,
        rejected_at: datetime | None = None,
    ) -> Bid:
        bid.rejected_by = rejected_by
        bid.rejected_at = rejected_at or utcnow()
        bid.notes = notes
        return await self._transition(bid, BidStatus.REJECTED, rejected_by, notes)

    async def update_payment_info(
        self,
        bid: Bid,
        *,
        payment_intent_id: str | None | object = _UNSET,
        deposit_refund_id: str | None | object = _UNSET,
        fee_refund_id: str | None | object = _UNSET,
        is_refunded: bool | object = _UNSET,
    ) -> Bid:
        """Set payment fields without touching status or history."""
        if payment_intent_id is not _UNSET:
            bid.stripe_payment_intent_id = payment_intent_id
        if deposit_refund_id is not _UNSET:
            bid.stripe_deposit_refund_id = deposit_refund_id
        if fee_refund_id is not _UNSET:
            bid.stripe_fee_refund_id = fee_refund_id
        if is_refunded is not _UNSET:
            # Refunded never goes back to False.
            bid.is_refunded = bool(bid.is_refunded or is_refunded)
        await self._session.flush()
        await self._session.refresh(bid)
        return bid

    async def delete(self, bid: Bid) -> None:
        """Hard-delete a bid; its history rows go with it."""
        await self._session.delete(bid)
        await self._session.flush()
        logger.info("Deleted bid", extra={"bid_id": bid.id, "status": bid.status})

    async def get_history(self, bid_id: str) -> list[BidHistoryEntry]:
        return await self._recorder.get_bid_history(bid_id)

    async def commit(self) -> None:
        """Make pending writes durable before a per-bid lock is released."""
        await self._session.commit()
