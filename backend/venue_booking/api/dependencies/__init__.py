"""
FastAPI dependencies for the venue booking engine.
"""

from .database import get_db
from .services import (
    get_availability_service,
    get_booking_approval_service,
    get_conflict_checker,
    get_deposit_ledger_service,
    get_notification_publisher,
)

__all__ = [
    "get_db",
    "get_availability_service",
    "get_booking_approval_service",
    "get_conflict_checker",
    "get_deposit_ledger_service",
    "get_notification_publisher",
]
