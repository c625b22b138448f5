# backend/venue_booking/schemas/booking.py
"""
Booking schemas for the venue booking engine.

Dates travel as ``YYYY-MM-DD`` and times of day as 24-hour ``HH:mm``
strings. Time strings are kept as given here; the services validate them
so that a malformed time surfaces as ``InvalidTimeFormat``.
"""

from datetime import date, datetime
from decimal import Decimal
import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.enums import ApprovalStatus, BookingStatus, VenueStatus

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"{field_name} must be a YYYY-MM-DD date-only string")
        return candidate
    return value


class BookingDateIn(BaseModel):
    """One requested day; hourly venues list the hours they need."""

    date: date
    hours: Optional[List[int]] = Field(default=None, description="Hours of the day (0-23)")

    @field_validator("date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        return _ensure_date_only(v, "date")

    @field_validator("hours")
    @classmethod
    def validate_hours(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        for hour in v:
            if hour < 0 or hour > 23:
                raise ValueError(f"Invalid hour {hour}. Hours must be between 0 and 23")
        if len(set(v)) != len(v):
            raise ValueError("Hours must not repeat within a date")
        return sorted(v)


class CandidateBooking(BaseModel):
    """A proposed booking window submitted for conflict checking."""

    venue_id: str
    event_id: Optional[str] = None
    start_date: date
    end_date: date
    start_time: Optional[str] = Field(default=None, description="HH:mm")
    end_time: Optional[str] = Field(default=None, description="HH:mm")
    # Set when re-checking an existing booking so it does not collide with itself
    booking_id: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object, info) -> object:
        return _ensure_date_only(v, info.field_name)

    @property
    def has_time_window(self) -> bool:
        return bool(self.start_time and self.end_time)


class ConflictCheckResult(BaseModel):
    """Returned when a candidate passed every check."""

    venue_id: str
    start_date: date
    end_date: date
    checks_passed: List[str]


class BookingRequest(BaseModel):
    """Request a venue for an event; the booking starts PENDING."""

    venue_id: str
    requester_id: str
    event_id: Optional[str] = None
    organization_id: Optional[str] = None
    dates: List[BookingDateIn] = Field(..., min_length=1)
    start_time: Optional[str] = Field(default=None, description="HH:mm")
    end_time: Optional[str] = Field(default=None, description="HH:mm")


class BookingDatesUpdate(BaseModel):
    dates: List[BookingDateIn] = Field(..., min_length=1)
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class CancelBookingRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Cancellation reason must not be blank")
        return v


class BookingDateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    hours: Optional[List[int]] = None


class BookingResponse(BaseModel):
    """Booking as returned by the engine's operations."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    venue_id: str
    requester_id: str
    event_id: Optional[str] = None
    organization_id: Optional[str] = None
    event_start_date: date
    event_end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    booking_status: BookingStatus
    approval_status: ApprovalStatus
    venue_status: VenueStatus
    amount_to_be_paid: Decimal
    is_paid: bool
    cancellation_reason: Optional[str] = None
    created_at: datetime
    booking_dates: List[BookingDateOut] = Field(default_factory=list)


class ApprovalResult(BaseModel):
    """Outcome of an approval transaction."""

    booking: BookingResponse
    slots_created: int
    payer_id: str
    payer_kind: str
    invoice_id: str
    invoice_due_date: datetime
    cancelled_booking_ids: List[str] = Field(default_factory=list)
