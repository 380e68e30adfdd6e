"""
Pydantic schemas for bid API.

JSON keys are camelCase; money travels as two-decimal strings.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from bidproxy.bids.models import BidStatus

Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: f"{Decimal(v):.2f}", return_type=str, when_used="json"),
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BidCreate(_CamelModel):
    """Schema for creating a bid. Fees and deposit are computed server-side."""

    lot_number: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Lot number in the auction house catalog",
    )
    max_bid_amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Highest amount the customer authorizes",
    )


class BidStatusUpdate(_CamelModel):
    """Schema for a generic status change made by an employee."""

    status: BidStatus = Field(..., description="New bid status")
    notes: str | None = Field(None, max_length=5000, description="Optional note")


class BidRejection(_CamelModel):
    """Schema for rejecting a pending bid."""

    notes: str | None = Field(None, max_length=5000, description="Rejection reason")


class BidResponse(_CamelModel):
    """Schema for bid response."""

    id: str
    customer_id: str
    lot_number: str
    max_bid_amount: Money
    service_fee: Money
    deposit_amount: Money
    total_paid: Money
    status: BidStatus
    stripe_payment_intent_id: str | None = None
    stripe_deposit_refund_id: str | None = None
    stripe_fee_refund_id: str | None = None
    is_refunded: bool
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class BidHistoryResponse(_CamelModel):
    """Schema for one bid history entry."""

    id: str
    bid_id: str
    previous_status: BidStatus | None = None
    new_status: BidStatus
    changed_by: str
    notes: str | None = None
    created_at: datetime


class PaymentIntentResponse(_CamelModel):
    """Client secret handed to the browser to confirm payment."""

    client_secret: str | None


class RefundResponse(_CamelModel):
    """Result of a refund."""

    message: str
    refund_id: str
    bid: BidResponse


class MessageResponse(_CamelModel):
    message: str
