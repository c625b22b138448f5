# backend/venue_booking/repositories/__init__.py
"""
Repository layer for the venue booking engine.

Repositories own all query construction. They flush but never commit.
"""

from .availability_slot_repository import AvailabilitySlotRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .conflict_checker_repository import ConflictCheckerRepository
from .event_repository import EventRepository, OrganizerRef, OrganizerResolver
from .factory import RepositoryFactory
from .payment_repository import InvoiceRepository, PaymentRepository
from .venue_repository import VenueRepository

__all__ = [
    "AvailabilitySlotRepository",
    "BaseRepository",
    "BookingRepository",
    "ConflictCheckerRepository",
    "EventRepository",
    "IRepository",
    "InvoiceRepository",
    "OrganizerRef",
    "OrganizerResolver",
    "PaymentRepository",
    "RepositoryFactory",
    "VenueRepository",
]
