"""
Bid lifecycle: entity, repository, policy service and HTTP routers.
"""

from bidproxy.bids.models import (
    DELETABLE_STATUSES,
    REFUNDABLE_STATUSES,
    Bid,
    BidAmounts,
    BidStatus,
    compute_bid_amounts,
)
from bidproxy.bids.repository import BidRepository
from bidproxy.bids.service import BidLifecycleService

__all__ = [
    "DELETABLE_STATUSES",
    "REFUNDABLE_STATUSES",
    "Bid",
    "BidAmounts",
    "BidLifecycleService",
    "BidRepository",
    "BidStatus",
    "compute_bid_amounts",
]
