# backend/venue_booking/routes/__init__.py
"""API route modules."""

from . import venue_bookings

__all__ = ["venue_bookings"]
