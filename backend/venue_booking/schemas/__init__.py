"""Pydantic schemas for the venue booking engine."""

from .availability import DateAvailability, DayAvailability, TimeRange, VenueAvailability
from .base_responses import ErrorResponse, ServiceResult
from .booking import (
    ApprovalResult,
    BookingDateIn,
    BookingDatesUpdate,
    BookingRequest,
    BookingResponse,
    CancelBookingRequest,
    CandidateBooking,
    ConflictCheckResult,
)
from .payment import (
    DepositEvaluation,
    PaymentData,
    PaymentHistory,
    PaymentResponse,
    PaymentResult,
    PaymentSummary,
)

__all__ = [
    "ApprovalResult",
    "BookingDateIn",
    "BookingDatesUpdate",
    "BookingRequest",
    "BookingResponse",
    "CancelBookingRequest",
    "CandidateBooking",
    "ConflictCheckResult",
    "DateAvailability",
    "DayAvailability",
    "DepositEvaluation",
    "ErrorResponse",
    "PaymentData",
    "PaymentHistory",
    "PaymentResponse",
    "PaymentResult",
    "PaymentSummary",
    "ServiceResult",
    "TimeRange",
    "VenueAvailability",
]
