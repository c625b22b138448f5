"""
Venue Repository

Loads venues together with their booking policy.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.venue import BookingCondition, Venue
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class VenueRepository(BaseRepository[Venue]):
    def __init__(self, db: Session):
        super().__init__(db, Venue)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Venue.booking_conditions))

    def get_condition(self, venue_id: str) -> Optional[BookingCondition]:
        """Return the authoritative (first configured) booking condition."""
        try:
            return (
                self.db.query(BookingCondition)
                .filter(BookingCondition.venue_id == venue_id)
                .order_by(BookingCondition.created_at, BookingCondition.id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booking condition for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to load booking condition: {str(e)}") from e
