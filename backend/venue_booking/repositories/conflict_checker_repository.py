# backend/venue_booking/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository

Read-only queries backing booking conflict detection. Everything here runs
with default isolation; a concurrent approval may land between a check and
the subsequent create, which the approval workflow resolves by cancelling
colliding siblings.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import ApprovalStatus, BookingStatus, EventStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.event import Event
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConflictCheckerRepository(BaseRepository[Booking]):
    """Repository for conflict checking data access."""

    def __init__(self, db: Session):
        """Initialize with Booking model as primary."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def find_duplicate(
        self,
        venue_id: str,
        event_id: Optional[str],
        start_date: date,
        start_time: Optional[str],
        end_time: Optional[str],
        exclude_booking_id: Optional[str] = None,
    ) -> Optional[Booking]:
        """A live booking with the same venue, event, start date and time window, other than ``exclude_booking_id``."""
        try:
            query = self.db.query(Booking).filter(
                Booking.venue_id == venue_id,
                Booking.event_start_date == start_date,
                Booking.booking_status != BookingStatus.CANCELLED,
            )
            query = query.filter(Booking.event_id.is_(None) if event_id is None else Booking.event_id == event_id)
            query = query.filter(Booking.start_time.is_(None) if start_time is None else Booking.start_time == start_time)
            query = query.filter(Booking.end_time.is_(None) if end_time is None else Booking.end_time == end_time)
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking duplicate booking: {str(e)}")
            raise RepositoryException(f"Failed to check duplicates: {str(e)}") from e

    def get_approved_overlapping(
        self,
        venue_id: str,
        start_date: date,
        end_date: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Approved, non-cancelled bookings on the venue whose date range
        intersects ``[start_date, end_date]``.
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.venue_id == venue_id,
                Booking.approval_status == ApprovalStatus.APPROVED,
                Booking.booking_status != BookingStatus.CANCELLED,
                Booking.event_start_date <= end_date,
                Booking.event_end_date >= start_date,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return query.order_by(Booking.event_start_date, Booking.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting approved bookings for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict bookings: {str(e)}") from e

    def count_approved_event_bookings(
        self,
        venue_id: str,
        start_date: date,
        end_date: date,
        exclude_event_id: Optional[str] = None,
    ) -> int:
        """Bookings that are approved and whose linked event is approved too."""
        try:
            query = (
                self.db.query(Booking)
                .join(Event, Event.id == Booking.event_id)
                .filter(
                    Booking.venue_id == venue_id,
                    Booking.approval_status == ApprovalStatus.APPROVED,
                    Booking.booking_status != BookingStatus.CANCELLED,
                    Event.status == EventStatus.APPROVED,
                    Booking.event_start_date <= end_date,
                    Booking.event_end_date >= start_date,
                )
            )
            if exclude_event_id:
                query = query.filter(Booking.event_id != exclude_event_id)
            return query.count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting approved event bookings: {str(e)}")
            raise RepositoryException(f"Failed to count event bookings: {str(e)}") from e

    def get_pending_in_range(
        self,
        venue_id: str,
        start_date: date,
        end_date: date,
        exclude_event_id: Optional[str] = None,
    ) -> List[Booking]:
        """Bookings still awaiting a manager decision within the date range."""
        try:
            query = self.db.query(Booking).filter(
                Booking.venue_id == venue_id,
                Booking.approval_status == ApprovalStatus.PENDING,
                Booking.booking_status != BookingStatus.CANCELLED,
                Booking.event_start_date <= end_date,
                Booking.event_end_date >= start_date,
            )
            if exclude_event_id:
                query = query.filter(or_(Booking.event_id.is_(None), Booking.event_id != exclude_event_id))
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting pending bookings: {str(e)}")
            raise RepositoryException(f"Failed to get pending bookings: {str(e)}") from e
