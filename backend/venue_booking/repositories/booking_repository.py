# backend/venue_booking/repositories/booking_repository.py
"""
Booking Repository

Data access for venue bookings used by the approval workflow, the payment
ledger and the availability calculator. Relations are loaded explicitly per
query instead of being re-fetched piecemeal by callers.
"""

from datetime import date
import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload, selectinload

from ..core.enums import COLLIDING_SIBLING_STATUSES, BookingStatus
from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.booking import Booking, BookingDate
from ..models.venue import Venue
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for venue booking reads and writes."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Booking.venue).selectinload(Venue.booking_conditions),
            joinedload(Booking.event),
            selectinload(Booking.booking_dates),
        )

    def get_booking_with_details(self, booking_id: str, *, for_update: bool = False) -> Optional[Booking]:
        """
        Load a booking with its venue, venue conditions, event and dates.

        Args:
            booking_id: The booking to load
            for_update: Take a row lock on the booking (ignored on SQLite)
        """
        try:
            query = self._apply_eager_loading(self.db.query(Booking).filter(Booking.id == booking_id))
            if for_update and supports_row_locks(self.db):
                query = query.with_for_update(of=Booking)
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to load booking: {str(e)}") from e

    def get_bookings_in_range(self, venue_id: str, start_date: date, end_date: date) -> List[Booking]:
        """
        Non-cancelled bookings of a venue with at least one booking date in
        ``[start_date, end_date]``.
        """
        try:
            booking_ids = (
                self.db.query(BookingDate.booking_id)
                .join(Booking, Booking.id == BookingDate.booking_id)
                .filter(
                    Booking.venue_id == venue_id,
                    Booking.booking_status != BookingStatus.CANCELLED,
                    BookingDate.date >= start_date,
                    BookingDate.date <= end_date,
                )
                .distinct()
            )
            return (
                self.db.query(Booking)
                .options(selectinload(Booking.booking_dates))
                .filter(Booking.id.in_(booking_ids.scalar_subquery()))
                .order_by(Booking.event_start_date, Booking.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings in range for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get bookings: {str(e)}") from e

    def get_colliding_siblings(
        self,
        venue_id: str,
        event_start_date: date,
        exclude_booking_id: str,
        statuses: Sequence[BookingStatus] = COLLIDING_SIBLING_STATUSES,
    ) -> List[Booking]:
        """Other bookings on the same venue and start date that an approval displaces."""
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.venue_id == venue_id,
                    Booking.event_start_date == event_start_date,
                    Booking.id != exclude_booking_id,
                    Booking.booking_status.in_(list(statuses)),
                )
                .order_by(Booking.created_at)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting colliding bookings for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get colliding bookings: {str(e)}") from e

    def replace_dates(self, booking: Booking, dates: Iterable[BookingDate]) -> Booking:
        """Swap the booking's date rows; orphaned rows are deleted on flush."""
        booking.booking_dates = list(dates)
        self.flush()
        return booking
