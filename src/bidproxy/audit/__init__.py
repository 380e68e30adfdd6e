"""
Append-only audit trail for bids and employee accounts.
"""

from bidproxy.audit.models import BidHistoryEntry, EmployeeAction, EmployeeActionType
from bidproxy.audit.recorder import AuditTrailRecorder

__all__ = [
    "AuditTrailRecorder",
    "BidHistoryEntry",
    "EmployeeAction",
    "EmployeeActionType",
]
