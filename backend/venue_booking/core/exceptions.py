# backend/venue_booking/core/exceptions.py
"""
Domain-specific exceptions for the venue booking engine.

These exceptions carry a stable ``code`` plus structured ``details`` and can
be converted to an HTTP error at the API boundary.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Input validation


class InvalidTimeFormat(ValidationException):
    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid time format: {value!r}. Expected HH:mm",
            code="INVALID_TIME_FORMAT",
            details={"value": value},
        )


class InvalidDateRange(ValidationException):
    def __init__(self, message: str, **details: Any):
        super().__init__(message=message, code="INVALID_DATE_RANGE", details=details)


class InvalidBookingDates(ValidationException):
    def __init__(self, message: str, **details: Any):
        super().__init__(message=message, code="INVALID_BOOKING_DATES", details=details)


class PaymentRejected(ValidationException):
    def __init__(self, message: str, **details: Any):
        super().__init__(message=message, code="PAYMENT_REJECTED", details=details)


# Lookups


class BookingNotFound(NotFoundException):
    def __init__(self, booking_id: str):
        super().__init__(
            message=f"Booking {booking_id} not found",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id},
        )


class VenueNotFound(NotFoundException):
    def __init__(self, venue_id: str):
        super().__init__(
            message=f"Venue {venue_id} not found",
            code="VENUE_NOT_FOUND",
            details={"venue_id": venue_id},
        )


class EventNotFound(NotFoundException):
    def __init__(self, event_id: str):
        super().__init__(
            message=f"Event {event_id} not found",
            code="EVENT_NOT_FOUND",
            details={"event_id": event_id},
        )


# Scheduling conflicts


class DuplicateBooking(ConflictException):
    def __init__(self, venue_id: str, event_id: Optional[str]):
        super().__init__(
            message="Booking already exists with the same venue, event, date, and time.",
            code="DUPLICATE_BOOKING",
            details={"venue_id": venue_id, "event_id": event_id},
        )


class TimeConflict(ConflictException):
    def __init__(self, booking_id: str, start_time: str, end_time: str):
        super().__init__(
            message=f"Time conflict detected with existing booking from {start_time} to {end_time}.",
            code="TIME_CONFLICT",
            details={
                "conflicting_booking_id": booking_id,
                "start_time": start_time,
                "end_time": end_time,
            },
        )


class BufferViolation(ConflictException):
    def __init__(self, message: str, booking_id: str, buffer_minutes: int):
        super().__init__(
            message=message,
            code="BUFFER_VIOLATION",
            details={"conflicting_booking_id": booking_id, "buffer_minutes": buffer_minutes},
        )


class VenueAlreadyBooked(ConflictException):
    def __init__(self, venue_id: str, count: int):
        super().__init__(
            message=f"Venue {venue_id} is already booked for an approved event on the same date(s).",
            code="VENUE_ALREADY_BOOKED",
            details={"venue_id": venue_id, "conflicting_bookings": count},
        )


# Workflow rules


class PayerUndetermined(BusinessRuleException):
    def __init__(self, booking_id: str):
        super().__init__(
            message=f"Cannot determine the payer for booking {booking_id}",
            code="PAYER_UNDETERMINED",
            details={"booking_id": booking_id},
        )


class InvalidStatusTransition(BusinessRuleException):
    def __init__(self, booking_id: str, current: str, target: str):
        super().__init__(
            message=f"Booking {booking_id} cannot move from {current} to {target}",
            code="INVALID_STATUS_TRANSITION",
            details={"booking_id": booking_id, "current": current, "target": target},
        )


class ConditionNotFound(ServiceException):
    """A venue without a BookingCondition cannot take deposit payments."""

    def __init__(self, venue_id: str):
        super().__init__(
            message=f"Venue {venue_id} has no booking condition configured",
            code="CONDITION_NOT_FOUND",
            details={"venue_id": venue_id},
        )


class TransactionFailed(ServiceException):
    """
    Wraps any failure inside a transactional workflow.

    The originating error is kept on ``cause``; message, code and HTTP status
    are taken from it when it is a domain error so callers still see the real
    reason.
    """

    def __init__(self, operation: str, cause: Exception):
        self.cause = cause
        if isinstance(cause, DomainException):
            message = cause.message
            details = {"operation": operation, "cause": cause.code, **cause.details}
            self.status_code = cause.status_code
        else:
            message = f"{operation} failed: {cause}"
            details = {"operation": operation, "cause": type(cause).__name__}
        super().__init__(message=message, code="TRANSACTION_FAILED", details=details)


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues, query
    failures, or constraint violations.
    """
