# backend/venue_booking/core/enums.py
"""
Core enums for the venue booking engine.

Booking status, approval status and event status are three separate state
spaces. Each gets its own closed enum so a value from one can never be
compared against another by accident.
"""

from enum import Enum


class BookingStatus(str, Enum):
    """Lifecycle of a venue booking."""

    PENDING = "PENDING"
    APPROVED_NOT_PAID = "APPROVED_NOT_PAID"
    APPROVED_PAID = "APPROVED_PAID"
    CANCELLED = "CANCELLED"


class ApprovalStatus(str, Enum):
    """Manager decision on the booking/event linkage."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EventStatus(str, Enum):
    """Lifecycle of the event a booking is made for."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


class VenueBookingType(str, Enum):
    """Granularity at which a venue is rented."""

    DAILY = "DAILY"
    HOURLY = "HOURLY"


class VenueStatus(str, Enum):
    """Occupancy state a booking holds on its venue."""

    BOOKED = "BOOKED"
    AVAILABLE = "AVAILABLE"


class SlotStatus(str, Enum):
    BOOKED = "BOOKED"


class PayerKind(str, Enum):
    USER = "USER"
    ORGANIZATION = "ORGANIZATION"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


# Transitions a manager may request explicitly. Automatic cancellation by a
# colliding approval only ever touches PENDING and APPROVED_NOT_PAID.
CANCELLABLE_BOOKING_STATUSES = frozenset(
    {
        BookingStatus.PENDING,
        BookingStatus.APPROVED_NOT_PAID,
        BookingStatus.APPROVED_PAID,
    }
)

COLLIDING_SIBLING_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED_NOT_PAID)
