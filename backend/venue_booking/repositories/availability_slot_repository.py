# backend/venue_booking/repositories/availability_slot_repository.py
"""
Availability Slot Repository

Slots are insert-only: the approval workflow writes them and the absence
checks read them.
"""

from datetime import date
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import SlotStatus
from ..core.exceptions import RepositoryException
from ..models.venue import AvailabilitySlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilitySlotRepository(BaseRepository[AvailabilitySlot]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilitySlot)

    def create_slots(self, slots: List[Dict[str, Any]]) -> List[AvailabilitySlot]:
        """Insert every slot of one approval in a single flush."""
        return self.bulk_create(slots)

    def get_slots_for_date(self, venue_id: str, on_date: date) -> List[AvailabilitySlot]:
        try:
            return (
                self.db.query(AvailabilitySlot)
                .filter(
                    AvailabilitySlot.venue_id == venue_id,
                    AvailabilitySlot.date == on_date,
                    AvailabilitySlot.status == SlotStatus.BOOKED,
                )
                .order_by(AvailabilitySlot.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting slots for venue {venue_id} on {on_date}: {str(e)}")
            raise RepositoryException(f"Failed to get slots: {str(e)}") from e

    def has_booked_slot(self, venue_id: str, on_date: date) -> bool:
        """True when any booked slot exists for the venue on that day."""
        try:
            query = self.db.query(AvailabilitySlot.id).filter(
                AvailabilitySlot.venue_id == venue_id,
                AvailabilitySlot.date == on_date,
                AvailabilitySlot.status == SlotStatus.BOOKED,
            )
            return self.db.query(query.exists()).scalar() or False
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking slot for venue {venue_id} on {on_date}: {str(e)}")
            raise RepositoryException(f"Failed to check slot: {str(e)}") from e

    def get_slots_for_booking(self, booking_id: str) -> List[AvailabilitySlot]:
        return self._execute_query(
            self.db.query(AvailabilitySlot)
            .filter(AvailabilitySlot.booking_id == booking_id)
            .order_by(AvailabilitySlot.date)
        )
