"""
Bid API routers.

Customers see and pay for their own bids; employees review and settle all
of them. Domain errors are translated centrally in `bidproxy.main`.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidproxy.auth.rbac import CustomerUser, EmployeeUser
from bidproxy.bids.repository import BidRepository
from bidproxy.bids.schemas import (
    BidCreate,
    BidHistoryResponse,
    BidRejection,
    BidResponse,
    BidStatusUpdate,
    MessageResponse,
    PaymentIntentResponse,
    RefundResponse,
)
from bidproxy.bids.service import BidLifecycleService
from bidproxy.payments.factory import get_payment_gateway
from bidproxy.payments.interface import PaymentGateway
from bidproxy.payments.service import PaymentService
from bidproxy.shared.database import get_db_session
from bidproxy.shared.logging import get_logger
from bidproxy.shared.schemas import ErrorResponse

logger = get_logger(__name__)

customer_router = APIRouter(prefix="/api/customer/bids", tags=["customer-bids"])
employee_router = APIRouter(prefix="/api/employee/bids", tags=["employee-bids"])

_AUTH_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Insufficient permissions"},
}
_BID_RESPONSES = {
    **_AUTH_RESPONSES,
    404: {"model": ErrorResponse, "description": "Bid not found"},
}
_STATE_RESPONSES = {
    **_BID_RESPONSES,
    400: {"model": ErrorResponse, "description": "Not allowed in the bid's current state"},
}


def get_bid_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
) -> BidLifecycleService:
    """Dependency for bid lifecycle service."""
    return BidLifecycleService(BidRepository(session), PaymentService(gateway))


BidServiceDep = Annotated[BidLifecycleService, Depends(get_bid_service)]


# Customer endpoints


@customer_router.get("", response_model=list[BidResponse], responses=_AUTH_RESPONSES)
async def list_my_bids(
    current_user: CustomerUser,
    service: BidServiceDep,
) -> list[BidResponse]:
    """List the caller's bids, newest first."""
    bids = await service.list_customer_bids(current_user)
    return [BidResponse.model_validate(b) for b in bids]


@customer_router.post(
    "",
    response_model=BidResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_AUTH_RESPONSES,
        400: {"model": ErrorResponse, "description": "Validation error"},
    },
)
async def create_bid(
    data: BidCreate,
    current_user: CustomerUser,
    service: BidServiceDep,
) -> BidResponse:
    """Create a bid on a lot.

    Service fee, deposit and total are computed server-side; the bid starts
    out pending review.
    """
    logger.info(
        "Creating bid",
        extra={"user_id": current_user.id, "lot_number": data.lot_number},
    )
    bid = await service.create_bid(data, current_user)
    return BidResponse.model_validate(bid)


@customer_router.get("/{bid_id}", response_model=BidResponse, responses=_BID_RESPONSES)
async def get_my_bid(
    bid_id: str,
    current_user: CustomerUser,
    service: BidServiceDep,
) -> BidResponse:
    bid = await service.get_customer_bid(bid_id, current_user)
    return BidResponse.model_validate(bid)


@customer_router.get(
    "/{bid_id}/history",
    response_model=list[BidHistoryResponse],
    responses=_BID_RESPONSES,
)
async def get_my_bid_history(
    bid_id: str,
    current_user: CustomerUser,
    service: BidServiceDep,
) -> list[BidHistoryResponse]:
    """Status history of one of the caller's bids, newest first."""
    entries = await service.get_customer_bid_history(bid_id, current_user)
    return [BidHistoryResponse.model_validate(e) for e in entries]


@customer_router.post(
    "/{bid_id}/payment-intent",
    response_model=PaymentIntentResponse,
    responses={
        **_BID_RESPONSES,
        500: {"model": ErrorResponse, "description": "Payment gateway failure"},
    },
)
async def create_payment_intent(
    bid_id: str,
    current_user: CustomerUser,
    service: BidServiceDep,
) -> PaymentIntentResponse:
    """Get the client secret used to pay for a bid.

    Repeated calls return the same intent's secret.
    """
    client_secret = await service.create_payment_intent(bid_id, current_user)
    return PaymentIntentResponse(client_secret=client_secret)


# Employee endpoints


@employee_router.get("", response_model=list[BidResponse], responses=_AUTH_RESPONSES)
async def list_all_bids(
    current_user: EmployeeUser,
    service: BidServiceDep,
) -> list[BidResponse]:
    """List every bid, newest first."""
    bids = await service.list_all_bids()
    return [BidResponse.model_validate(b) for b in bids]


@employee_router.post("/{bid_id}/approve", response_model=BidResponse, responses=_STATE_RESPONSES)
async def approve_bid(
    bid_id: str,
    current_user: EmployeeUser,
    service: BidServiceDep,
) -> BidResponse:
    bid = await service.approve_bid(bid_id, current_user)
    return BidResponse.model_validate(bid)


@employee_router.post("/{bid_id}/reject", response_model=BidResponse, responses=_STATE_RESPONSES)
async def reject_bid(
    bid_id: str,
    data: BidRejection,
    current_user: EmployeeUser,
    service: BidServiceDep,
) -> BidResponse:
    """Reject a pending bid; a non-blank reason is required."""
    bid = await service.reject_bid(bid_id, current_user, data.notes)
    return BidResponse.model_validate(bid)


@employee_router.patch("/{bid_id}/status", response_model=BidResponse, responses=_STATE_RESPONSES)
async def update_bid_status(
    bid_id: str,
    data: BidStatusUpdate,
    current_user: EmployeeUser,
    service: BidServiceDep,
) -> BidResponse:
    """Set the bid's status as the auction progresses."""
    bid = await service.update_bid_status(bid_id, data, current_user)
    return BidResponse.model_validate(bid)


@employee_router.post(
    "/{bid_id}/refund",
    response_model=RefundResponse,
    responses={
        **_STATE_RESPONSES,
        500: {"model": ErrorResponse, "description": "Payment gateway failure"},
    },
)
async def refund_bid(
    bid_id: str,
    current_user: EmployeeUser,
    service: BidServiceDep,
) -> RefundResponse:
    """Refund an outbid or lost bid in full."""
    bid, refund = await service.refund_bid(bid_id, current_user)
    return RefundResponse(
        message="Refund processed successfully",
        refund_id=refund.id,
        bid=BidResponse.model_validate(bid),
    )


@employee_router.delete("/{bid_id}", response_model=MessageResponse, responses=_STATE_RESPONSES)
async def delete_bid(
    bid_id: str,
    current_user: EmployeeUser,
    service: BidServiceDep,
) -> MessageResponse:
    await service.delete_bid(bid_id, current_user)
    return MessageResponse(message="Bid deleted successfully")
