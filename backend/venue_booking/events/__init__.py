"""Domain events and post-commit notification dispatch."""

from venue_booking.events.booking_events import BookingApproved, BookingCancelled, DepositFulfilled
from venue_booking.events.publisher import (
    LoggingNotificationSender,
    NotificationPublisher,
    NotificationSender,
)

__all__ = [
    "BookingApproved",
    "BookingCancelled",
    "DepositFulfilled",
    "LoggingNotificationSender",
    "NotificationPublisher",
    "NotificationSender",
]
