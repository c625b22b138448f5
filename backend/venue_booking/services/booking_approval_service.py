# backend/venue_booking/services/booking_approval_service.py
"""
Booking Approval Service for the venue booking engine

Owns the booking lifecycle from request to approval or cancellation:

    PENDING -> APPROVED_NOT_PAID -> APPROVED_PAID
    PENDING | APPROVED_NOT_PAID | APPROVED_PAID -> CANCELLED

Approval is a single transaction. Slots, the payment ledger anchor, sibling
cancellations and the invoice are written together or not at all, and
notifications go out only after the commit.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import (
    CANCELLABLE_BOOKING_STATUSES,
    ApprovalStatus,
    BookingStatus,
    PaymentStatus,
    VenueBookingType,
    VenueStatus,
)
from ..core.exceptions import (
    BookingNotFound,
    EventNotFound,
    InvalidBookingDates,
    InvalidStatusTransition,
    PayerUndetermined,
    TransactionFailed,
    VenueNotFound,
)
from ..events.booking_events import BookingApproved, BookingCancelled
from ..models.booking import Booking, BookingDate
from ..models.venue import BookingCondition, Venue
from ..repositories import RepositoryFactory
from ..repositories.event_repository import OrganizerRef, OrganizerResolver
from ..schemas.booking import (
    ApprovalResult,
    BookingDateIn,
    BookingDatesUpdate,
    BookingRequest,
    BookingResponse,
    CandidateBooking,
)
from ..utils.time_window import iter_days, minutes_to_time_string, normalize_time
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)


def calculate_booking_amount(venue: Venue, booking_dates: Iterable) -> Decimal:
    """
    Price of a booking.

    Hourly venues charge ``base_amount`` per booked hour, counting a date
    with no hours as one hour. Every other venue charges ``base_amount``
    once, whatever the number of dates.
    """
    base = Decimal(venue.base_amount or 0)
    if venue.booking_type != VenueBookingType.HOURLY:
        return base
    units = sum(max(1, len(entry.hours or [])) for entry in booking_dates)
    return base * units


class BookingApprovalService(BaseService):
    """
    Service for booking requests, date edits, approval and cancellation.
    """

    def __init__(
        self,
        db: Session,
        conflict_checker: Optional[ConflictChecker] = None,
        organizer_resolver: Optional[OrganizerResolver] = None,
        **kwargs,
    ):
        super().__init__(db, **kwargs)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.venue_repository = RepositoryFactory.create_venue_repository(db)
        self.slot_repository = RepositoryFactory.create_availability_slot_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.invoice_repository = RepositoryFactory.create_invoice_repository(db)
        self.event_repository = RepositoryFactory.create_event_repository(db)
        self.organizer_resolver = organizer_resolver or self.event_repository
        self.conflict_checker = conflict_checker or ConflictChecker(db, publisher=self.publisher)

    # Booking requests

    @staticmethod
    def calculate_booking_amount(venue: Venue, booking_dates: Iterable) -> Decimal:
        return calculate_booking_amount(venue, booking_dates)

    def _validate_dates(self, venue: Venue, dates: Sequence[BookingDateIn]) -> List[BookingDateIn]:
        """Dates must be unique; hourly venues need hours, daily venues refuse them."""
        seen = set()
        for entry in dates:
            if entry.date in seen:
                raise InvalidBookingDates(f"Date {entry.date.isoformat()} is listed more than once")
            seen.add(entry.date)

            if venue.booking_type == VenueBookingType.HOURLY and not entry.hours:
                raise InvalidBookingDates(
                    f"Hourly venue requires hours for {entry.date.isoformat()}",
                    date=entry.date.isoformat(),
                )
            if venue.booking_type == VenueBookingType.DAILY and entry.hours:
                raise InvalidBookingDates(
                    f"Daily venue does not accept hours for {entry.date.isoformat()}",
                    date=entry.date.isoformat(),
                )
        return sorted(dates, key=lambda entry: entry.date)

    @staticmethod
    def _derive_times(
        venue: Venue,
        dates: Sequence[BookingDateIn],
        start_time: Optional[str],
        end_time: Optional[str],
    ):
        """Explicit times win; hourly venues otherwise span their booked hours."""
        if start_time or end_time:
            return (
                normalize_time(start_time) if start_time else None,
                normalize_time(end_time) if end_time else None,
            )
        if not venue.is_hourly:
            return None, None
        hours = [hour for entry in dates for hour in (entry.hours or [])]
        first, last = min(hours), max(hours) + 1
        end = settings.day_end_time if last == 24 else minutes_to_time_string(last * 60)
        return minutes_to_time_string(first * 60), end

    @BaseService.measure_operation("request_booking")
    def request_booking(self, data: BookingRequest) -> Booking:
        """
        Store a PENDING booking after validating its dates and checking conflicts.

        Raises:
            VenueNotFound, EventNotFound: unknown references
            InvalidBookingDates: dates do not fit the venue mode
            any conflict checker error
        """
        venue = self.venue_repository.get_by_id(data.venue_id)
        if venue is None:
            raise VenueNotFound(data.venue_id)
        if data.event_id and self.event_repository.get_by_id(data.event_id, load_relationships=False) is None:
            raise EventNotFound(data.event_id)

        dates = self._validate_dates(venue, data.dates)
        start_time, end_time = self._derive_times(venue, dates, data.start_time, data.end_time)

        candidate = CandidateBooking(
            venue_id=venue.id,
            event_id=data.event_id,
            start_date=dates[0].date,
            end_date=dates[-1].date,
            start_time=start_time,
            end_time=end_time,
        )
        self.conflict_checker.check_conflict(candidate)

        with self.transaction():
            booking = self.booking_repository.create(
                venue_id=venue.id,
                requester_id=data.requester_id,
                event_id=data.event_id,
                organization_id=data.organization_id,
                event_start_date=candidate.start_date,
                event_end_date=candidate.end_date,
                start_time=start_time,
                end_time=end_time,
                booking_status=BookingStatus.PENDING,
                approval_status=ApprovalStatus.PENDING,
                venue_status=VenueStatus.BOOKED,
                amount_to_be_paid=calculate_booking_amount(venue, dates),
                booking_dates=[BookingDate(date=entry.date, hours=entry.hours) for entry in dates],
            )

        self.log_operation("request_booking", booking_id=booking.id, venue_id=venue.id)
        return booking

    @BaseService.measure_operation("update_booking_dates")
    def update_booking_dates(self, booking_id: str, data: BookingDatesUpdate) -> Booking:
        """Replace a booking's dates and re-derive its range and amount."""
        booking = self.booking_repository.get_booking_with_details(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        if booking.is_cancelled:
            raise InvalidBookingDates(
                f"Cannot change dates of cancelled booking {booking_id}", booking_id=booking_id
            )

        venue = booking.venue
        dates = self._validate_dates(venue, data.dates)
        start_time, end_time = data.start_time, data.end_time
        if not (start_time or end_time) and not venue.is_hourly:
            start_time, end_time = booking.start_time, booking.end_time
        start_time, end_time = self._derive_times(venue, dates, start_time, end_time)
        self.conflict_checker.check_conflict(
            CandidateBooking(
                venue_id=venue.id,
                event_id=booking.event_id,
                start_date=dates[0].date,
                end_date=dates[-1].date,
                start_time=start_time,
                end_time=end_time,
                booking_id=booking.id,
            )
        )

        with self.transaction():
            self.booking_repository.replace_dates(
                booking, [BookingDate(date=entry.date, hours=entry.hours) for entry in dates]
            )
            booking.event_start_date = dates[0].date
            booking.event_end_date = dates[-1].date
            booking.start_time = start_time
            booking.end_time = end_time
            booking.amount_to_be_paid = calculate_booking_amount(venue, dates)
            self.booking_repository.flush()

        self.log_operation("update_booking_dates", booking_id=booking.id, dates=len(dates))
        return booking

    # Approval

    @BaseService.measure_operation("approve_booking")
    def approve_booking(self, booking_id: str) -> ApprovalResult:
        """
        Approve a PENDING booking in one transaction.

        Any failure rolls back every step and is raised as TransactionFailed
        carrying the original error.
        """
        try:
            with self.transaction():
                result = self._approve(booking_id)
        except Exception as e:
            self.logger.error(f"Approval of booking {booking_id} rolled back: {str(e)}")
            raise TransactionFailed("approve_booking", e) from e

        self.log_operation(
            "approve_booking",
            booking_id=booking_id,
            slots=result.slots_created,
            cancelled=len(result.cancelled_booking_ids),
        )
        return result

    def _approve(self, booking_id: str) -> ApprovalResult:
        booking = self.booking_repository.get_booking_with_details(booking_id, for_update=True)
        if booking is None:
            raise BookingNotFound(booking_id)
        if booking.booking_status != BookingStatus.PENDING:
            raise InvalidStatusTransition(
                booking_id, booking.booking_status.value, BookingStatus.APPROVED_NOT_PAID.value
            )
        if booking.approval_status == ApprovalStatus.REJECTED:
            raise InvalidStatusTransition(
                booking_id, ApprovalStatus.REJECTED.value, ApprovalStatus.APPROVED.value
            )
        venue = booking.venue
        condition = venue.condition

        booking.booking_status = BookingStatus.APPROVED_NOT_PAID
        booking.approval_status = ApprovalStatus.APPROVED
        self.booking_repository.flush()

        slots = self._materialize_slots(booking, venue, condition)
        payer = self._resolve_payer(booking)

        self.payment_repository.create(
            booking_id=booking.id,
            payer_id=payer.payer_id,
            payer_kind=payer.kind,
            amount_paid=Decimal("0"),
            status=PaymentStatus.PENDING,
            notes="Ledger opened at approval",
        )

        cancelled_ids = self._cancel_siblings(booking)
        invoice = self._issue_invoice(booking, condition, payer)

        self.publisher.stage(
            BookingApproved(
                booking_id=booking.id,
                venue_id=booking.venue_id,
                event_id=booking.event_id,
                payer_id=payer.payer_id,
                amount_to_be_paid=booking.amount_to_be_paid,
                approved_at=invoice.invoice_date,
            )
        )

        return ApprovalResult(
            booking=BookingResponse.model_validate(booking),
            slots_created=len(slots),
            payer_id=payer.payer_id,
            payer_kind=payer.kind.value,
            invoice_id=invoice.id,
            invoice_due_date=invoice.due_date,
            cancelled_booking_ids=cancelled_ids,
        )

    def _materialize_slots(self, booking: Booking, venue: Venue, condition: Optional[BookingCondition]):
        """
        DAILY venues get one slot per day of the range plus the trailing
        transition days. HOURLY venues get one slot per booked date carrying
        the booking's time window.
        """
        note = settings.slot_note_template.format(event_id=booking.event_id or booking.id)
        base = {"venue_id": venue.id, "booking_id": booking.id, "event_id": booking.event_id}
        slots = []

        if venue.booking_type == VenueBookingType.DAILY:
            for day in iter_days(booking.event_start_date, booking.event_end_date):
                slots.append({**base, "date": day, "notes": note})
            transition_days = (condition.transition_time or 0) if condition else 0
            transition_note = settings.transition_note_template.format(
                event_id=booking.event_id or booking.id
            )
            for offset in range(1, transition_days + 1):
                slots.append(
                    {**base, "date": booking.event_end_date + timedelta(days=offset), "notes": transition_note}
                )
        else:
            days: List[date] = [entry.date for entry in booking.booking_dates] or list(
                iter_days(booking.event_start_date, booking.event_end_date)
            )
            for day in days:
                slots.append(
                    {
                        **base,
                        "date": day,
                        "start_time": booking.start_time,
                        "end_time": booking.end_time,
                        "notes": note,
                    }
                )

        return self.slot_repository.create_slots(slots)

    def _resolve_payer(self, booking: Booking) -> OrganizerRef:
        payer = self.organizer_resolver.resolve_organizer(booking.event_id) if booking.event_id else None
        if payer is None:
            raise PayerUndetermined(booking.id)
        return payer

    def _cancel_siblings(self, booking: Booking) -> List[str]:
        """Cancel other PENDING/APPROVED_NOT_PAID bookings on the same venue and start date."""
        reason = settings.conflict_cancellation_reason
        now = datetime.now(timezone.utc)
        cancelled = []
        for sibling in self.booking_repository.get_colliding_siblings(
            booking.venue_id, booking.event_start_date, booking.id
        ):
            sibling.booking_status = BookingStatus.CANCELLED
            sibling.venue_status = VenueStatus.AVAILABLE
            sibling.cancellation_reason = reason
            cancelled.append(sibling.id)
            self.publisher.stage(
                BookingCancelled(
                    booking_id=sibling.id,
                    requester_id=sibling.requester_id,
                    reason=reason,
                    cancelled_at=now,
                    displaced_by=booking.id,
                )
            )
        if cancelled:
            self.booking_repository.flush()
        return cancelled

    def _issue_invoice(self, booking: Booking, condition: Optional[BookingCondition], payer: OrganizerRef):
        invoice_date = datetime.now(timezone.utc)
        due_date = invoice_date
        if condition and condition.deposit_required_time:
            due_date = invoice_date + timedelta(hours=condition.deposit_required_time)
        return self.invoice_repository.create(
            booking_id=booking.id,
            venue_id=booking.venue_id,
            event_id=booking.event_id,
            payer_id=payer.payer_id,
            payer_kind=payer.kind,
            invoice_date=invoice_date,
            due_date=due_date,
            total_amount=booking.amount_to_be_paid,
        )

    # Cancellation

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, reason: str) -> Booking:
        """
        Manager cancellation from PENDING or either approved state.

        Raises:
            BookingNotFound
            InvalidStatusTransition: booking already cancelled
        """
        with self.transaction():
            booking = self.booking_repository.get_booking_with_details(booking_id, for_update=True)
            if booking is None:
                raise BookingNotFound(booking_id)
            if booking.booking_status not in CANCELLABLE_BOOKING_STATUSES:
                raise InvalidStatusTransition(
                    booking_id, booking.booking_status.value, BookingStatus.CANCELLED.value
                )

            booking.booking_status = BookingStatus.CANCELLED
            booking.venue_status = VenueStatus.AVAILABLE
            booking.cancellation_reason = reason
            self.booking_repository.flush()

            self.publisher.stage(
                BookingCancelled(
                    booking_id=booking.id,
                    requester_id=booking.requester_id,
                    reason=reason,
                    cancelled_at=datetime.now(timezone.utc),
                )
            )

        self.log_operation("cancel_booking", booking_id=booking_id)
        return booking

