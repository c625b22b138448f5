# backend/venue_booking/routes/venue_bookings.py
"""
Venue booking routes

Thin HTTP boundary over the booking engine. All business logic lives in the
services; each endpoint wraps the service result in the standard
``{success, message, data}`` envelope.

Endpoints:
    POST /bookings/check-conflict            → Validate a candidate booking window
    POST /bookings                           → Request a booking (PENDING)
    PUT /bookings/{booking_id}/dates         → Replace a booking's dates
    POST /bookings/{booking_id}/approve      → Approve a PENDING booking
    POST /bookings/{booking_id}/cancel       → Manager cancellation
    POST /bookings/{booking_id}/payments     → Record a payment
    GET /bookings/{booking_id}/payments      → Payment history and summary
    GET /venues/{venue_id}/availability      → Free gaps per day
    GET /venues/{venue_id}/availability/{on_date} → Materialized-slot lookup
    POST /events/{event_id}/reject-conflicting → Reject pending bookings colliding with an approved event
"""

from datetime import date
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ..api.dependencies.services import (
    get_availability_service,
    get_booking_approval_service,
    get_conflict_checker,
    get_deposit_ledger_service,
)
from ..core.exceptions import DomainException
from ..schemas.availability import DateAvailability, VenueAvailability
from ..schemas.base_responses import ErrorResponse, ServiceResult
from ..schemas.booking import (
    ApprovalResult,
    BookingDatesUpdate,
    BookingRequest,
    BookingResponse,
    CancelBookingRequest,
    CandidateBooking,
    ConflictCheckResult,
)
from ..schemas.payment import PaymentData, PaymentHistory, PaymentResult
from ..services.availability_service import AvailabilityService
from ..services.booking_approval_service import BookingApprovalService
from ..services.conflict_checker import ConflictChecker
from ..services.deposit_ledger_service import DepositLedgerService

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["venue-bookings"],
    responses={
        400: {"model": ErrorResponse, "description": "Malformed input"},
        404: {"model": ErrorResponse, "description": "Booking, venue or event not found"},
        409: {"model": ErrorResponse, "description": "Scheduling conflict"},
        422: {"model": ErrorResponse, "description": "Business rule or request validation failure"},
    },
)

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("/bookings/check-conflict", response_model=ServiceResult[ConflictCheckResult])
def check_conflict(
    candidate: CandidateBooking = Body(...),
    include_event_check: bool = Query(False, description="Also check approved events on the venue"),
    checker: ConflictChecker = Depends(get_conflict_checker),
) -> ServiceResult[ConflictCheckResult]:
    try:
        result = checker.check_conflict(candidate, include_event_check=include_event_check)
        return ServiceResult(success=True, message="No conflicts found", data=result)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post(
    "/bookings",
    response_model=ServiceResult[BookingResponse],
    status_code=status.HTTP_201_CREATED,
)
def request_booking(
    payload: BookingRequest = Body(...),
    service: BookingApprovalService = Depends(get_booking_approval_service),
) -> ServiceResult[BookingResponse]:
    try:
        booking = service.request_booking(payload)
        return ServiceResult(
            success=True,
            message="Booking requested",
            data=BookingResponse.model_validate(booking),
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.put("/bookings/{booking_id}/dates", response_model=ServiceResult[BookingResponse])
def update_booking_dates(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: BookingDatesUpdate = Body(...),
    service: BookingApprovalService = Depends(get_booking_approval_service),
) -> ServiceResult[BookingResponse]:
    try:
        booking = service.update_booking_dates(booking_id, payload)
        return ServiceResult(
            success=True,
            message="Booking dates updated",
            data=BookingResponse.model_validate(booking),
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/bookings/{booking_id}/approve", response_model=ServiceResult[ApprovalResult])
def approve_booking(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: BookingApprovalService = Depends(get_booking_approval_service),
) -> ServiceResult[ApprovalResult]:
    """
    Approve a booking.

    Materializes slots, opens the payment ledger, cancels colliding bookings
    and issues the invoice in one transaction.
    """
    try:
        result = service.approve_booking(booking_id)
        message = "Booking approved"
        if result.cancelled_booking_ids:
            message += f"; {len(result.cancelled_booking_ids)} conflicting booking(s) cancelled"
        return ServiceResult(success=True, message=message, data=result)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/bookings/{booking_id}/cancel", response_model=ServiceResult[BookingResponse])
def cancel_booking(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: CancelBookingRequest = Body(...),
    service: BookingApprovalService = Depends(get_booking_approval_service),
) -> ServiceResult[BookingResponse]:
    try:
        booking = service.cancel_booking(booking_id, payload.reason)
        return ServiceResult(
            success=True,
            message="Booking cancelled",
            data=BookingResponse.model_validate(booking),
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post(
    "/bookings/{booking_id}/payments",
    response_model=ServiceResult[PaymentResult],
    status_code=status.HTTP_201_CREATED,
)
def record_payment(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: PaymentData = Body(...),
    service: DepositLedgerService = Depends(get_deposit_ledger_service),
) -> ServiceResult[PaymentResult]:
    try:
        result = service.record_payment(booking_id, payload)
        return ServiceResult(success=True, message=result.message, data=result)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.get("/bookings/{booking_id}/payments", response_model=ServiceResult[PaymentHistory])
def get_payment_history(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: DepositLedgerService = Depends(get_deposit_ledger_service),
) -> ServiceResult[PaymentHistory]:
    try:
        return ServiceResult(success=True, data=service.get_payment_history(booking_id))
    except DomainException as exc:
        handle_domain_exception(exc)


@router.get("/venues/{venue_id}/availability", response_model=ServiceResult[VenueAvailability])
def get_available_slots(
    venue_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    start_date: date = Query(..., description="First day, YYYY-MM-DD"),
    end_date: date = Query(..., description="Last day, YYYY-MM-DD"),
    service: AvailabilityService = Depends(get_availability_service),
) -> ServiceResult[VenueAvailability]:
    try:
        return ServiceResult(success=True, data=service.get_available_slots(venue_id, start_date, end_date))
    except DomainException as exc:
        handle_domain_exception(exc)


@router.get("/venues/{venue_id}/availability/{on_date}", response_model=ServiceResult[DateAvailability])
def check_availability(
    venue_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    on_date: date = Path(..., description="Day to check, YYYY-MM-DD"),
    hour: Optional[int] = Query(None, ge=0, le=23, description="Check a single hour instead of the whole day"),
    service: AvailabilityService = Depends(get_availability_service),
) -> ServiceResult[DateAvailability]:
    try:
        if hour is None:
            result = service.check_date_availability(venue_id, on_date)
        else:
            result = service.check_hour_availability(venue_id, on_date, hour)
        return ServiceResult(success=True, data=result)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/events/{event_id}/reject-conflicting", response_model=ServiceResult[List[str]])
def reject_conflicting_pending(
    event_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    checker: ConflictChecker = Depends(get_conflict_checker),
) -> ServiceResult[List[str]]:
    try:
        rejected = checker.reject_conflicting_pending(event_id)
        return ServiceResult(
            success=True,
            message=f"{len(rejected)} pending booking(s) rejected",
            data=rejected,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
