"""
Bid lifecycle service.

Owns the policy layer over bids: which transitions are legal, when payment
intents are created, when refunds are issued, and the audit entries that
accompany each.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal

from bidproxy.audit.models import BidHistoryEntry
from bidproxy.auth.schemas import CurrentUser
from bidproxy.bids.models import (
    REFUNDABLE_STATUSES,
    Bid,
    BidStatus,
    compute_bid_amounts,
)
from bidproxy.bids.repository import BidRepository
from bidproxy.bids.schemas import BidCreate, BidStatusUpdate
from bidproxy.config import Settings, get_settings
from bidproxy.payments.interface import Refund
from bidproxy.payments.service import PaymentService
from bidproxy.shared.exceptions import (
    BidNotFoundError,
    BidOwnershipError,
    BidStateError,
    ValidationError,
)
from bidproxy.shared.logging import get_logger

logger = get_logger(__name__)

# Per-bid locks shared by every service instance in this process. An entry
# lives only while some task holds or waits on it.
_bid_locks: dict[str, asyncio.Lock] = {}
_bid_lock_waiters: dict[str, int] = {}


@asynccontextmanager
async def bid_lock(bid_id: str) -> AsyncIterator[None]:
    """Serialize payment operations on one bid within this process."""
    lock = _bid_locks.setdefault(bid_id, asyncio.Lock())
    _bid_lock_waiters[bid_id] = _bid_lock_waiters.get(bid_id, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _bid_lock_waiters[bid_id] -= 1
        if not _bid_lock_waiters[bid_id]:
            del _bid_lock_waiters[bid_id]
            del _bid_locks[bid_id]


class BidLifecycleService:
    """Service for bid business logic."""

    def __init__(
        self,
        repository: BidRepository,
        payments: PaymentService,
        settings: Settings | None = None,
    ) -> None:
        self._repository = repository
        self._payments = payments
        self._settings = settings or get_settings()

    # Customer operations

    async def create_bid(self, data: BidCreate, customer: CurrentUser) -> Bid:
        """Create a pending bid; fee, deposit and total are computed here."""
        amounts = compute_bid_amounts(
            data.max_bid_amount,
            service_fee=self._settings.service_fee,
            deposit_rate=self._settings.deposit_rate,
        )
        bid = Bid(
            customer_id=customer.id,
            lot_number=data.lot_number.strip(),
            max_bid_amount=amounts.max_bid_amount,
            service_fee=amounts.service_fee,
            deposit_amount=amounts.deposit_amount,
            total_paid=amounts.total_paid,
        )
        return await self._repository.create(bid)

    async def list_customer_bids(self, customer: CurrentUser) -> list[Bid]:
        return await self._repository.list_by_customer(customer.id)

    async def get_customer_bid(self, bid_id: str, customer: CurrentUser) -> Bid:
        """Get a bid the caller owns.

        Raises:
            BidNotFoundError: If the bid does not exist.
            BidOwnershipError: If it belongs to another customer.
        """
        bid = await self.get_bid(bid_id)
        if bid.customer_id != customer.id:
            logger.warning(
                "Bid ownership check failed",
                extra={"bid_id": bid_id, "user_id": customer.id},
            )
            raise BidOwnershipError(bid_id)
        return bid

    async def get_customer_bid_history(
        self,
        bid_id: str,
        customer: CurrentUser,
    ) -> list[BidHistoryEntry]:
        await self.get_customer_bid(bid_id, customer)
        return await self._repository.get_history(bid_id)

    async def create_payment_intent(self, bid_id: str, customer: CurrentUser) -> str | None:
        """Return the client secret for the bid's payment intent.

        At most one intent exists per bid: if one is already stored it is
        re-fetched from the gateway and its secret returned unchanged.
        """
        await self.get_customer_bid(bid_id, customer)

        async with bid_lock(bid_id):
            bid = await self._require_for_update(bid_id)

            if bid.stripe_payment_intent_id:
                intent = await self._payments.get_intent(bid.stripe_payment_intent_id)
                logger.info(
                    "Reusing existing payment intent",
                    extra={"bid_id": bid.id, "payment_intent_id": intent.id},
                )
                return intent.client_secret

            intent = await self._payments.create_intent(
                amount=Decimal(bid.total_paid),
                metadata={
                    "bidId": bid.id,
                    "customerId": bid.customer_id,
                    "lotNumber": bid.lot_number,
                },
            )
            await self._repository.update_payment_info(bid, payment_intent_id=intent.id)
            await self._repository.commit()

        logger.info(
            "Payment intent attached to bid",
            extra={"bid_id": bid_id, "payment_intent_id": intent.id},
        )
        return intent.client_secret

    # Employee operations

    async def get_bid(self, bid_id: str) -> Bid:
        bid = await self._repository.get_by_id(bid_id)
        if bid is None:
            raise BidNotFoundError(bid_id)
        return bid

    async def list_all_bids(self) -> list[Bid]:
        return await self._repository.list_all()

    async def approve_bid(self, bid_id: str, employee: CurrentUser) -> Bid:
        bid = await self.get_bid(bid_id)
        if bid.bid_status is not BidStatus.PENDING:
            raise BidStateError(
                "Only pending bids can be approved",
                bid_id=bid_id,
                current_status=bid.status,
            )

        bid = await self._repository.approve(bid, approved_by=employee.id)
        logger.info("Bid approved", extra={"bid_id": bid_id, "employee_id": employee.id})
        return bid

    async def reject_bid(
        self,
        bid_id: str,
        employee: CurrentUser,
        notes: str | None,
    ) -> Bid:
        """Reject a pending bid with a reason.

        The reason is checked before the bid is even looked up, so a blank
        reason fails regardless of the bid's status.
        """
        reason = (notes or "").strip()
        if not reason:
            raise ValidationError("Rejection reason is required", details={"bid_id": bid_id})

        bid = await self.get_bid(bid_id)
        if bid.bid_status is not BidStatus.PENDING:
            raise BidStateError(
                "Only pending bids can be rejected",
                bid_id=bid_id,
                current_status=bid.status,
            )

        bid = await self._repository.reject(bid, rejected_by=employee.id, notes=reason)
        logger.info("Bid rejected", extra={"bid_id": bid_id, "employee_id": employee.id})
        return bid

    async def update_bid_status(
        self,
        bid_id: str,
        data: BidStatusUpdate,
        employee: CurrentUser,
    ) -> Bid:
        """Move a bid to any status in the enum.

        Only enum membership is checked; the lifecycle edges are not enforced
        on this path. Concurrent updates are last-write-wins, each with its
        own history entry.
        """
        bid = await self.get_bid(bid_id)
        previous_status = bid.status
        bid = await self._repository.update_status(
            bid,
            data.status,
            changed_by=employee.id,
            notes=data.notes,
        )
        logger.info(
            "Bid status updated",
            extra={
                "bid_id": bid_id,
                "from_status": previous_status,
                "to_status": data.status.value,
                "employee_id": employee.id,
            },
        )
        return bid

    async def refund_bid(self, bid_id: str, employee: CurrentUser) -> tuple[Bid, Refund]:
        """Issue one full refund for an outbid or lost bid.

        Runs under the bid's lock with the row re-read (FOR UPDATE where
        supported) and committed before the lock is released, so of two
        concurrent requests the second sees is_refunded and fails.

        Raises:
            BidNotFoundError: If the bid does not exist.
            BidStateError: Wrong status, already refunded, or no payment.
            PaymentGatewayError: If the gateway rejects the refund.
        """
        async with bid_lock(bid_id):
            bid = await self._require_for_update(bid_id)

            if bid.bid_status not in REFUNDABLE_STATUSES:
                raise BidStateError(
                    "Only outbid or lost bids can be refunded",
                    bid_id=bid_id,
                    current_status=bid.status,
                )
            if bid.is_refunded:
                raise BidStateError(
                    "Bid has already been refunded",
                    bid_id=bid_id,
                    current_status=bid.status,
                )
            if not bid.stripe_payment_intent_id:
                raise BidStateError(
                    "No payment found for this bid",
                    bid_id=bid_id,
                    current_status=bid.status,
                )

            refund = await self._payments.refund(bid.stripe_payment_intent_id)
            bid = await self._repository.update_payment_info(
                bid,
                deposit_refund_id=refund.id,
                fee_refund_id=refund.id,
                is_refunded=True,
            )
            await self._repository.commit()

        logger.info(
            "Bid refunded",
            extra={"bid_id": bid_id, "refund_id": refund.id, "employee_id": employee.id},
        )
        return bid, refund

    async def delete_bid(self, bid_id: str, employee: CurrentUser) -> None:
        """Hard-delete a finished bid together with its history."""
        bid = await self.get_bid(bid_id)
        if not bid.is_deletable:
            raise BidStateError(
                "Only won or lost bids can be deleted",
                bid_id=bid_id,
                current_status=bid.status,
            )

        await self._repository.delete(bid)
        logger.info("Bid deleted", extra={"bid_id": bid_id, "employee_id": employee.id})

    async def _require_for_update(self, bid_id: str) -> Bid:
        bid = await self._repository.get_for_update(bid_id)
        if bid is None:
            raise BidNotFoundError(bid_id)
        return bid
