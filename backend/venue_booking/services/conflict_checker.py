# backend/venue_booking/services/conflict_checker.py
"""
Conflict Checker Service for the venue booking engine

Single validation entry point run before a booking is created and before an
event is approved. Checks run in a fixed order and stop at the first
failure, so a rejected candidate always gets exactly one reason:

1. Input validation (time format, inverted windows)
2. Exact duplicate
3. Time overlap with an approved booking
4. Buffer between approved bookings
5. Event-level occupancy (opt-in)

A side without a time window covers the whole day.
"""

from datetime import date
import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import ApprovalStatus
from ..core.exceptions import (
    BufferViolation,
    DuplicateBooking,
    EventNotFound,
    TimeConflict,
    VenueAlreadyBooked,
)
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from ..schemas.booking import CandidateBooking, ConflictCheckResult
from ..utils.time_window import (
    minutes_to_time_string,
    normalize_time,
    overlaps,
    to_minutes_of_day,
    validate_window,
    within_buffer,
)
from .base import BaseService

logger = logging.getLogger(__name__)

WHOLE_DAY_START = 0


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts.

    Reads run with default isolation and may be stale; the approval workflow
    resolves any collision that slips through by cancelling siblings.
    """

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None, **kwargs):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional ConflictCheckerRepository instance
        """
        super().__init__(db, **kwargs)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)
        self.event_repository = RepositoryFactory.create_event_repository(db)

    @property
    def buffer_minutes(self) -> int:
        return settings.booking_buffer_minutes

    def _day_window(self, start_time: Optional[str], end_time: Optional[str]) -> Tuple[int, int]:
        """Minutes window for one day; no times means the whole day."""
        if start_time and end_time:
            return to_minutes_of_day(start_time), to_minutes_of_day(end_time)
        return WHOLE_DAY_START, to_minutes_of_day(settings.day_end_time) + 1

    def _window_label(self, booking: Booking) -> Tuple[str, str]:
        if booking.has_time_window:
            return booking.start_time, booking.end_time
        return minutes_to_time_string(WHOLE_DAY_START), settings.day_end_time

    @BaseService.measure_operation("check_conflict")
    def check_conflict(
        self, candidate: CandidateBooking, *, include_event_check: bool = False
    ) -> ConflictCheckResult:
        """
        Validate a candidate booking window against the venue's bookings.

        Args:
            candidate: Proposed booking
            include_event_check: Also run the event-level occupancy check

        Returns:
            ConflictCheckResult listing the checks that ran

        Raises:
            InvalidTimeFormat, InvalidDateRange: malformed input
            DuplicateBooking, TimeConflict, BufferViolation, VenueAlreadyBooked
        """
        start_time = normalize_time(candidate.start_time) if candidate.start_time else None
        end_time = normalize_time(candidate.end_time) if candidate.end_time else None
        validate_window(candidate.start_date, candidate.end_date, start_time, end_time)
        checks = ["validation"]

        duplicate = self.repository.find_duplicate(
            candidate.venue_id,
            candidate.event_id,
            candidate.start_date,
            start_time,
            end_time,
            exclude_booking_id=candidate.booking_id,
        )
        if duplicate is not None:
            self.logger.info(f"Duplicate booking {duplicate.id} for venue {candidate.venue_id}")
            raise DuplicateBooking(candidate.venue_id, candidate.event_id)
        checks.append("duplicate")

        approved = self.repository.get_approved_overlapping(
            candidate.venue_id,
            candidate.start_date,
            candidate.end_date,
            exclude_booking_id=candidate.booking_id,
        )
        cand_start, cand_end = self._day_window(start_time, end_time)

        for booking in approved:
            other_start, other_end = self._day_window(booking.start_time, booking.end_time)
            if overlaps(cand_start, cand_end, other_start, other_end):
                label_start, label_end = self._window_label(booking)
                self.logger.info(
                    f"Time conflict on venue {candidate.venue_id} with booking {booking.id} "
                    f"({label_start}-{label_end})"
                )
                raise TimeConflict(booking.id, label_start, label_end)
        checks.append("overlap")

        if start_time and end_time:
            self._check_buffer(cand_start, cand_end, approved)
        checks.append("buffer")

        if include_event_check:
            venue_ids = [candidate.venue_id]
            if candidate.event_id:
                venue_ids += [
                    venue_id
                    for venue_id in self.event_repository.get_event_venue_ids(candidate.event_id)
                    if venue_id != candidate.venue_id
                ]
            self.check_event_venues(
                venue_ids, candidate.start_date, candidate.end_date, exclude_event_id=candidate.event_id
            )
            checks.append("event")

        return ConflictCheckResult(
            venue_id=candidate.venue_id,
            start_date=candidate.start_date,
            end_date=candidate.end_date,
            checks_passed=checks,
        )

    def _check_buffer(self, cand_start: int, cand_end: int, approved: Iterable[Booking]) -> None:
        buffer_minutes = self.buffer_minutes
        for booking in approved:
            if not booking.has_time_window:
                continue
            other_start = to_minutes_of_day(booking.start_time)
            other_end = to_minutes_of_day(booking.end_time)
            if within_buffer(other_end, cand_start, buffer_minutes):
                raise BufferViolation(
                    f"Booking starts too soon after another booking ends at {booking.end_time}. "
                    f"A {buffer_minutes}-minute buffer is required.",
                    booking.id,
                    buffer_minutes,
                )
            if within_buffer(cand_end, other_start, buffer_minutes):
                raise BufferViolation(
                    f"Booking ends too close before another booking starts at {booking.start_time}. "
                    f"A {buffer_minutes}-minute buffer is required.",
                    booking.id,
                    buffer_minutes,
                )

    @BaseService.measure_operation("check_event_venues")
    def check_event_venues(
        self,
        venue_ids: Iterable[str],
        start_date: date,
        end_date: date,
        exclude_event_id: Optional[str] = None,
    ) -> None:
        """
        Reject if any venue already hosts an approved booking of an approved
        event within ``[start_date, end_date]``.

        Raises:
            VenueAlreadyBooked: naming the first occupied venue
        """
        validate_window(start_date, end_date)
        for venue_id in venue_ids:
            count = self.repository.count_approved_event_bookings(
                venue_id, start_date, end_date, exclude_event_id=exclude_event_id
            )
            if count > 0:
                self.logger.info(f"Venue {venue_id} already booked by {count} approved event booking(s)")
                raise VenueAlreadyBooked(venue_id, count)

    @BaseService.measure_operation("reject_conflicting_pending")
    def reject_conflicting_pending(self, event_id: str) -> List[str]:
        """
        After an event is approved, reject pending bookings by other events
        on its venues whose window meets the event's window widened by the
        buffer on both sides.

        Returns:
            Ids of the bookings that were rejected
        """
        window = self.event_repository.get_window(event_id)
        if window is None:
            if self.event_repository.get_by_id(event_id, load_relationships=False) is None:
                raise EventNotFound(event_id)
            return []

        start_date, end_date, start_time, end_time = window
        event_start, event_end = self._day_window(start_time, end_time)
        widened_start = event_start - self.buffer_minutes
        widened_end = event_end + self.buffer_minutes

        rejected: List[str] = []
        with self.transaction():
            for venue_id in self.event_repository.get_event_venue_ids(event_id):
                pending = self.repository.get_pending_in_range(
                    venue_id, start_date, end_date, exclude_event_id=event_id
                )
                for booking in pending:
                    other_start, other_end = self._day_window(booking.start_time, booking.end_time)
                    if overlaps(widened_start, widened_end, other_start, other_end):
                        booking.approval_status = ApprovalStatus.REJECTED
                        rejected.append(booking.id)
            self.repository.flush()

        if rejected:
            self.log_operation("reject_conflicting_pending", event_id=event_id, rejected=len(rejected))
        return rejected
