"""
Database models for the venue booking engine.

Importing this package registers every table on ``Base.metadata``.
"""

from .booking import Booking, BookingDate
from .event import Event
from .payment import Invoice, Payment
from .venue import AvailabilitySlot, BookingCondition, Venue

__all__ = [
    "AvailabilitySlot",
    "Booking",
    "BookingCondition",
    "BookingDate",
    "Event",
    "Invoice",
    "Payment",
    "Venue",
]
