# backend/venue_booking/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each request gets its own services bound to the request's session and a
fresh notification publisher, so staged notifications never leak between
requests.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events.publisher import NotificationPublisher
from ...services.availability_service import AvailabilityService
from ...services.booking_approval_service import BookingApprovalService
from ...services.conflict_checker import ConflictChecker
from ...services.deposit_ledger_service import DepositLedgerService
from .database import get_db

logger = logging.getLogger(__name__)


def get_notification_publisher() -> NotificationPublisher:
    """Publisher with the default logging sender."""
    return NotificationPublisher()


def get_conflict_checker(
    db: Session = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_notification_publisher),
) -> ConflictChecker:
    return ConflictChecker(db, publisher=publisher)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_approval_service(
    db: Session = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_notification_publisher),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
) -> BookingApprovalService:
    """
    Get booking approval service instance with all dependencies.

    Args:
        db: Database session
        publisher: Post-commit notification publisher
        conflict_checker: Conflict checker sharing the same session

    Returns:
        BookingApprovalService instance
    """
    return BookingApprovalService(db, conflict_checker=conflict_checker, publisher=publisher)


def get_deposit_ledger_service(
    db: Session = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_notification_publisher),
) -> DepositLedgerService:
    return DepositLedgerService(db, publisher=publisher)
