"""
SQLAlchemy models for bids.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bidproxy.shared.database import Base, new_id, utcnow

if TYPE_CHECKING:
    from bidproxy.audit.models import BidHistoryEntry

CENTS = Decimal("0.01")
DEFAULT_SERVICE_FEE = Decimal("215.00")
DEFAULT_DEPOSIT_RATE = Decimal("0.10")


class BidStatus(str, Enum):
    """Bid lifecycle status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WINNING = "winning"
    OUTBID = "outbid"
    WON = "won"
    LOST = "lost"


REFUNDABLE_STATUSES = frozenset({BidStatus.OUTBID, BidStatus.LOST})
DELETABLE_STATUSES = frozenset({BidStatus.WON, BidStatus.LOST})


@dataclass(frozen=True)
class BidAmounts:
    """Money fixed on a bid at creation time."""

    max_bid_amount: Decimal
    service_fee: Decimal
    deposit_amount: Decimal
    total_paid: Decimal


def compute_bid_amounts(
    max_bid_amount: Decimal,
    service_fee: Decimal = DEFAULT_SERVICE_FEE,
    deposit_rate: Decimal = DEFAULT_DEPOSIT_RATE,
) -> BidAmounts:
    """Derive deposit and total from the declared maximum bid.

    deposit = round(rate * max_bid, 2), total = fee + deposit.
    """
    max_bid = Decimal(max_bid_amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    fee = Decimal(service_fee).quantize(CENTS, rounding=ROUND_HALF_UP)
    deposit = (Decimal(deposit_rate) * max_bid).quantize(CENTS, rounding=ROUND_HALF_UP)
    return BidAmounts(
        max_bid_amount=max_bid,
        service_fee=fee,
        deposit_amount=deposit,
        total_paid=fee + deposit,
    )


class Bid(Base):
    """A customer's maximum-bid instruction on one auction lot."""

    __tablename__ = "bids"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    customer_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    lot_number: Mapped[str] = mapped_column(String(100), nullable=False)
    max_bid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    service_fee: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=DEFAULT_SERVICE_FEE,
    )
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BidStatus.PENDING.value,
        index=True,
    )

    # Payment
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Both hold the id of the single full refund.
    stripe_deposit_refund_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_fee_refund_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_refunded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Review
    approved_by: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("users.id"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("users.id"), nullable=True
    )
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    history: Mapped[list["BidHistoryEntry"]] = relationship(
        "BidHistoryEntry",
        cascade="all, delete-orphan",
        order_by="BidHistoryEntry.created_at",
    )

    @property
    def bid_status(self) -> BidStatus:
        return BidStatus(self.status)

    @property
    def is_deletable(self) -> bool:
        return self.bid_status in DELETABLE_STATUSES

    def __repr__(self) -> str:
        return f"<Bid(id={self.id}, lot={self.lot_number}, status={self.status})>"


# Register the history mapper alongside Bid so the relationship resolves.
import bidproxy.audit.models  # noqa: E402,F401
