"""Service layer for the venue booking engine."""

from .availability_service import AvailabilityService
from .base import BaseService
from .booking_approval_service import BookingApprovalService, calculate_booking_amount
from .conflict_checker import ConflictChecker
from .deposit_ledger_service import DepositLedgerService, evaluate

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingApprovalService",
    "ConflictChecker",
    "DepositLedgerService",
    "calculate_booking_amount",
    "evaluate",
]
