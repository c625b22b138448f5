# backend/venue_booking/services/availability_service.py
"""
Availability Service for the venue booking engine

Computes, per calendar day, the free gaps left between a venue's bookings,
and answers point lookups against the slots materialized at approval time.
"""

from collections import defaultdict
from datetime import date
import logging
from typing import Dict, Iterable, List, Tuple, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import InvalidDateRange, InvalidTimeFormat, VenueNotFound
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import DateAvailability, DayAvailability, TimeRange, VenueAvailability
from ..utils.time_window import (
    iter_days,
    minutes_to_time_string,
    overlaps,
    parse_iso_date,
    to_minutes_of_day,
)
from .base import BaseService

logger = logging.getLogger(__name__)

Interval = Tuple[int, int]


def sweep_day(intervals: Iterable[Interval], day_end: int) -> Tuple[List[Interval], List[Interval]]:
    """
    Single left-to-right sweep over one day's occupied intervals.

    Returns ``(gaps, booked)`` where ``booked`` is the merged occupied
    intervals. The cursor only ever advances, so overlapping or duplicated
    intervals are tolerated.
    """
    gaps: List[Interval] = []
    booked: List[Interval] = []
    cursor = 0

    for start, end in sorted(intervals):
        if start > cursor:
            gaps.append((cursor, start))
            booked.append((start, end))
        elif booked and start <= booked[-1][1]:
            booked[-1] = (booked[-1][0], max(booked[-1][1], end))
        else:
            booked.append((start, end))
        cursor = max(cursor, end)

    if cursor < day_end:
        gaps.append((cursor, day_end))

    return gaps, booked


class AvailabilityService(BaseService):
    """Read-only availability queries. Results may be stale under concurrent approvals."""

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, **kwargs)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.venue_repository = RepositoryFactory.create_venue_repository(db)
        self.slot_repository = RepositoryFactory.create_availability_slot_repository(db)

    def _require_venue(self, venue_id: str) -> None:
        if self.venue_repository.get_by_id(venue_id, load_relationships=False) is None:
            raise VenueNotFound(venue_id)

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self,
        venue_id: str,
        start_date: Union[str, date],
        end_date: Union[str, date],
    ) -> VenueAvailability:
        """
        Free gaps per day for ``[start_date, end_date]`` inclusive.

        Args:
            venue_id: Venue to inspect
            start_date: First day (YYYY-MM-DD or date)
            end_date: Last day (YYYY-MM-DD or date)

        Raises:
            InvalidDateRange: Inverted or oversized range
            VenueNotFound: Unknown venue
        """
        start = parse_iso_date(start_date)
        end = parse_iso_date(end_date)
        if start > end:
            raise InvalidDateRange(
                "Start date cannot be after end date.",
                start_date=start.isoformat(),
                end_date=end.isoformat(),
            )
        span = (end - start).days + 1
        if span > settings.max_availability_range_days:
            raise InvalidDateRange(
                f"Date range cannot exceed {settings.max_availability_range_days} days.",
                days=span,
            )

        self._require_venue(venue_id)
        day_end = to_minutes_of_day(settings.day_end_time)

        occupied: Dict[date, List[Interval]] = defaultdict(list)
        for booking in self.booking_repository.get_bookings_in_range(venue_id, start, end):
            if not booking.has_time_window:
                continue
            try:
                interval = (to_minutes_of_day(booking.start_time), to_minutes_of_day(booking.end_time))
            except InvalidTimeFormat:
                self.logger.warning(f"Skipping booking {booking.id} with malformed time window")
                continue
            if interval[0] >= interval[1]:
                self.logger.warning(f"Skipping booking {booking.id} with inverted time window")
                continue
            for booking_date in booking.booking_dates:
                if start <= booking_date.date <= end:
                    occupied[booking_date.date].append(interval)

        days: List[DayAvailability] = []
        for day in iter_days(start, end):
            intervals = occupied.get(day)
            if not intervals:
                days.append(DayAvailability(date=day, fully_free=True))
                continue
            with self.measure_operation_context("sweep_day"):
                gaps, booked = sweep_day(intervals, day_end)
            days.append(
                DayAvailability(
                    date=day,
                    fully_free=False,
                    booked=[self._to_range(interval) for interval in booked],
                    gaps=[self._to_range(gap) for gap in gaps],
                )
            )

        self.log_operation("get_available_slots", venue_id=venue_id, days=len(days))
        return VenueAvailability(venue_id=venue_id, start_date=start, end_date=end, days=days)

    @staticmethod
    def _to_range(interval: Interval) -> TimeRange:
        return TimeRange(
            start_time=minutes_to_time_string(interval[0]),
            end_time=minutes_to_time_string(interval[1]),
        )

    def check_date_availability(self, venue_id: str, on_date: Union[str, date]) -> DateAvailability:
        """Whether no booked slot has been materialized for the venue on that day."""
        day = parse_iso_date(on_date)
        self._require_venue(venue_id)
        taken = self.slot_repository.has_booked_slot(venue_id, day)
        return DateAvailability(venue_id=venue_id, date=day, available=not taken)

    def check_hour_availability(
        self, venue_id: str, on_date: Union[str, date], hour: int
    ) -> DateAvailability:
        """
        Whether the hour ``[hour:00, hour+1:00)`` is free of materialized slots.

        Whole-day slots (no time window) block every hour.
        """
        if hour < 0 or hour > 23:
            raise InvalidTimeFormat(f"{hour}:00")
        day = parse_iso_date(on_date)
        self._require_venue(venue_id)

        hour_start, hour_end = hour * 60, (hour + 1) * 60
        available = True
        for slot in self.slot_repository.get_slots_for_date(venue_id, day):
            if not (slot.start_time and slot.end_time):
                available = False
                break
            slot_start = to_minutes_of_day(slot.start_time)
            slot_end = to_minutes_of_day(slot.end_time)
            if overlaps(slot_start, slot_end, hour_start, hour_end):
                available = False
                break

        return DateAvailability(venue_id=venue_id, date=day, hour=hour, available=available)

