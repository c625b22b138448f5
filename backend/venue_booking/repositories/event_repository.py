# backend/venue_booking/repositories/event_repository.py
"""
Event Repository

Read access to the events bookings are made for, including the organizer
lookup the payment pipeline uses to decide who pays.
"""

from dataclasses import dataclass
from datetime import date
import logging
from typing import List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import BookingStatus, PayerKind
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.event import Event
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganizerRef:
    """Who pays for an event's venues."""

    payer_id: str
    kind: PayerKind


class OrganizerResolver(Protocol):
    def resolve_organizer(self, event_id: str) -> Optional[OrganizerRef]:
        ...


class EventRepository(BaseRepository[Event]):
    def __init__(self, db: Session):
        super().__init__(db, Event)

    def resolve_organizer(self, event_id: str) -> Optional[OrganizerRef]:
        """
        Organization takes precedence over the organizing user.

        Returns None for an unknown event or one without any organizer.
        """
        event = self.get_by_id(event_id, load_relationships=False)
        if event is None:
            return None
        if event.organizer_organization_id:
            return OrganizerRef(event.organizer_organization_id, PayerKind.ORGANIZATION)
        if event.organizer_user_id:
            return OrganizerRef(event.organizer_user_id, PayerKind.USER)
        return None

    def get_event_venue_ids(self, event_id: str) -> List[str]:
        """Venues that have a live booking for the event."""
        try:
            rows = (
                self.db.query(Booking.venue_id)
                .filter(Booking.event_id == event_id, Booking.booking_status != BookingStatus.CANCELLED)
                .distinct()
                .all()
            )
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting venues for event {event_id}: {str(e)}")
            raise RepositoryException(f"Failed to get event venues: {str(e)}") from e

    def get_window(self, event_id: str) -> Optional[tuple]:
        """``(start_date, end_date, start_time, end_time)`` of the event, if dated."""
        event = self.get_by_id(event_id, load_relationships=False)
        if event is None or event.start_date is None:
            return None
        end: date = event.end_date or event.start_date
        return event.start_date, end, event.start_time, event.end_time
