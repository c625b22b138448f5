# backend/tests/services/test_availability_service.py
"""
Tests for AvailabilityService.

Covers the per-day gap sweep, tolerance of overlapping and time-less
bookings, and the slot-based absence checks.
"""

from datetime import date

import pytest

from venue_booking.core.enums import BookingStatus, VenueBookingType
from venue_booking.core.exceptions import InvalidDateRange, VenueNotFound
from venue_booking.models import AvailabilitySlot
from venue_booking.services.availability_service import AvailabilityService, sweep_day
from venue_booking.utils.time_window import minutes_to_time_string, to_minutes_of_day

DAY = date(2025, 6, 10)


def _pairs(ranges):
    return [(r.start_time, r.end_time) for r in ranges]


class TestSweepDay:
    def test_single_interval(self):
        gaps, booked = sweep_day([(600, 720)], 1439)
        assert gaps == [(0, 600), (720, 1439)]
        assert booked == [(600, 720)]

    def test_overlapping_intervals_never_regress(self):
        gaps, booked = sweep_day([(600, 900), (660, 720), (600, 900)], 1439)
        assert gaps == [(0, 600), (900, 1439)]
        assert booked == [(600, 900)]

    def test_interval_from_midnight(self):
        gaps, booked = sweep_day([(0, 120)], 1439)
        assert gaps == [(120, 1439)]

    def test_interval_to_day_end_leaves_no_trailing_gap(self):
        gaps, _ = sweep_day([(600, 1439)], 1439)
        assert gaps == [(0, 600)]

    def test_gaps_and_booked_partition_the_day(self):
        intervals = [(480, 540), (530, 600), (700, 760), (1000, 1100), (1050, 1080)]
        gaps, booked = sweep_day(intervals, 1439)
        pieces = sorted(gaps + booked)
        assert pieces[0][0] == 0
        assert pieces[-1][1] == 1439
        for (_, end), (start, _) in zip(pieces, pieces[1:]):
            assert end == start


class TestGetAvailableSlots:
    def test_day_without_bookings_is_fully_free(self, db, venue_factory):
        venue = venue_factory()
        result = AvailabilityService(db).get_available_slots(venue.id, DAY, DAY)

        assert len(result.days) == 1
        assert result.days[0].fully_free is True
        assert result.days[0].gaps == []

    def test_gaps_between_bookings(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        booking_factory(venue, [DAY], hours=[10, 11], start_time="10:00", end_time="12:00")
        booking_factory(venue, [DAY], hours=[14], start_time="14:00", end_time="15:00")

        day = AvailabilityService(db).get_available_slots(venue.id, "2025-06-10", "2025-06-10").days[0]

        assert day.fully_free is False
        assert _pairs(day.gaps) == [("00:00", "10:00"), ("12:00", "14:00"), ("15:00", "23:59")]
        assert _pairs(day.booked) == [("10:00", "12:00"), ("14:00", "15:00")]

    def test_overlapping_bookings_tolerated(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        booking_factory(venue, [DAY], hours=[9], start_time="09:00", end_time="13:00")
        booking_factory(venue, [DAY], hours=[10], start_time="10:00", end_time="11:00")

        day = AvailabilityService(db).get_available_slots(venue.id, DAY, DAY).days[0]

        assert _pairs(day.gaps) == [("00:00", "09:00"), ("13:00", "23:59")]

    def test_booking_without_times_is_skipped(self, db, venue_factory, booking_factory):
        venue = venue_factory(booking_type=VenueBookingType.DAILY)
        booking_factory(venue, [DAY])
        booking_factory(venue, [DAY], start_time="18:00", end_time="20:00")

        day = AvailabilityService(db).get_available_slots(venue.id, DAY, DAY).days[0]

        assert _pairs(day.gaps) == [("00:00", "18:00"), ("20:00", "23:59")]

    def test_cancelled_bookings_ignored(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        booking_factory(
            venue,
            [DAY],
            hours=[10],
            start_time="10:00",
            end_time="11:00",
            booking_status=BookingStatus.CANCELLED,
        )

        day = AvailabilityService(db).get_available_slots(venue.id, DAY, DAY).days[0]

        assert day.fully_free is True

    def test_multi_day_range_groups_by_date(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        booking_factory(
            venue,
            [date(2025, 6, 10), date(2025, 6, 12)],
            hours=[8],
            start_time="08:00",
            end_time="09:00",
        )

        days = AvailabilityService(db).get_available_slots(venue.id, date(2025, 6, 10), date(2025, 6, 12)).days

        assert [d.date for d in days] == [date(2025, 6, 10), date(2025, 6, 11), date(2025, 6, 12)]
        assert [d.fully_free for d in days] == [False, True, False]

    def test_gaps_reconstruct_the_day(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        for start, end in [("06:00", "07:30"), ("07:00", "08:00"), ("12:15", "13:45"), ("20:00", "22:00")]:
            booking_factory(venue, [DAY], hours=[int(start[:2])], start_time=start, end_time=end)

        day = AvailabilityService(db).get_available_slots(venue.id, DAY, DAY).days[0]

        pieces = sorted(
            (to_minutes_of_day(r.start_time), to_minutes_of_day(r.end_time)) for r in day.gaps + day.booked
        )
        assert minutes_to_time_string(pieces[0][0]) == "00:00"
        assert minutes_to_time_string(pieces[-1][1]) == "23:59"
        for (_, end), (start, _) in zip(pieces, pieces[1:]):
            assert end == start

    def test_inverted_range_rejected(self, db, venue_factory):
        venue = venue_factory()
        with pytest.raises(InvalidDateRange):
            AvailabilityService(db).get_available_slots(venue.id, date(2025, 6, 2), date(2025, 6, 1))

    def test_oversized_range_rejected(self, db, venue_factory):
        venue = venue_factory()
        with pytest.raises(InvalidDateRange):
            AvailabilityService(db).get_available_slots(venue.id, date(2025, 1, 1), date(2026, 6, 1))

    def test_unknown_venue(self, db):
        with pytest.raises(VenueNotFound):
            AvailabilityService(db).get_available_slots("01J00000000000000000000000", DAY, DAY)


class TestSlotChecks:
    def _slot(self, db, venue, **kwargs):
        db.add(AvailabilitySlot(venue_id=venue.id, date=DAY, **kwargs))
        db.commit()

    def test_date_available_without_slots(self, db, venue_factory):
        venue = venue_factory()
        assert AvailabilityService(db).check_date_availability(venue.id, DAY).available is True

    def test_date_taken_by_slot(self, db, venue_factory):
        venue = venue_factory(booking_type=VenueBookingType.DAILY)
        self._slot(db, venue)
        assert AvailabilityService(db).check_date_availability(venue.id, DAY).available is False

    def test_hour_availability_respects_slot_window(self, db, venue_factory):
        venue = venue_factory()
        self._slot(db, venue, start_time="10:00", end_time="12:00")
        service = AvailabilityService(db)

        assert service.check_hour_availability(venue.id, DAY, 9).available is True
        assert service.check_hour_availability(venue.id, DAY, 10).available is False
        assert service.check_hour_availability(venue.id, DAY, 11).available is False
        assert service.check_hour_availability(venue.id, DAY, 12).available is True

    def test_whole_day_slot_blocks_every_hour(self, db, venue_factory):
        venue = venue_factory(booking_type=VenueBookingType.DAILY)
        self._slot(db, venue)
        assert AvailabilityService(db).check_hour_availability(venue.id, DAY, 3).available is False
