# backend/venue_booking/repositories/factory.py
"""
Repository Factory for the venue booking engine.

Provides centralized creation of repository instances so every repository
used inside one unit of work is bound to the same session.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_slot_repository import AvailabilitySlotRepository
    from .booking_repository import BookingRepository
    from .conflict_checker_repository import ConflictCheckerRepository
    from .event_repository import EventRepository
    from .payment_repository import InvoiceRepository, PaymentRepository
    from .venue_repository import VenueRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations in tests.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_conflict_checker_repository(db: Session) -> "ConflictCheckerRepository":
        """Create repository for conflict checking operations."""
        from .conflict_checker_repository import ConflictCheckerRepository

        return ConflictCheckerRepository(db)

    @staticmethod
    def create_venue_repository(db: Session) -> "VenueRepository":
        from .venue_repository import VenueRepository

        return VenueRepository(db)

    @staticmethod
    def create_availability_slot_repository(db: Session) -> "AvailabilitySlotRepository":
        from .availability_slot_repository import AvailabilitySlotRepository

        return AvailabilitySlotRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)

    @staticmethod
    def create_invoice_repository(db: Session) -> "InvoiceRepository":
        from .payment_repository import InvoiceRepository

        return InvoiceRepository(db)

    @staticmethod
    def create_event_repository(db: Session) -> "EventRepository":
        """Create repository for event lookups and organizer resolution."""
        from .event_repository import EventRepository

        return EventRepository(db)
