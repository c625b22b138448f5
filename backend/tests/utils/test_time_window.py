# backend/tests/utils/test_time_window.py
from datetime import date

import pytest

from venue_booking.core.exceptions import InvalidDateRange, InvalidTimeFormat
from venue_booking.utils.time_window import (
    date_ranges_intersect,
    iter_days,
    minutes_to_time_string,
    normalize_time,
    overlaps,
    parse_iso_date,
    to_minutes_of_day,
    validate_window,
    within_buffer,
)


class TestToMinutesOfDay:
    @pytest.mark.parametrize(
        "value,expected",
        [("00:00", 0), ("09:30", 570), ("23:59", 1439), ("7:05", 425)],
    )
    def test_parses_valid_times(self, value, expected):
        assert to_minutes_of_day(value) == expected

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "12", "12:3a", "", "-1:00", None])
    def test_rejects_malformed_times(self, value):
        with pytest.raises(InvalidTimeFormat) as exc_info:
            to_minutes_of_day(value)
        assert exc_info.value.code == "INVALID_TIME_FORMAT"
        assert exc_info.value.status_code == 400

    def test_normalize_pads(self):
        assert normalize_time("7:05") == "07:05"
        assert minutes_to_time_string(425) == "07:05"


class TestOverlapAndBuffer:
    def test_overlap_is_half_open(self):
        assert overlaps(600, 720, 660, 780)
        assert overlaps(600, 720, 600, 720)
        # Touching endpoints do not overlap
        assert not overlaps(600, 720, 720, 780)
        assert not overlaps(720, 780, 600, 720)

    def test_containment_overlaps(self):
        assert overlaps(540, 1020, 600, 660)

    def test_within_buffer_boundaries(self):
        assert within_buffer(720, 720)
        assert within_buffer(720, 749)
        assert not within_buffer(720, 750)
        # Starts before the other ends: an overlap, not a buffer issue
        assert not within_buffer(720, 700)

    def test_custom_buffer(self):
        assert within_buffer(600, 650, buffer_minutes=60)
        assert not within_buffer(600, 650, buffer_minutes=15)


class TestDates:
    def test_parse_iso_date(self):
        assert parse_iso_date("2025-06-01") == date(2025, 6, 1)
        assert parse_iso_date(date(2025, 6, 1)) == date(2025, 6, 1)

    @pytest.mark.parametrize("value", ["2025-13-01", "06/01/2025", "tomorrow"])
    def test_parse_iso_date_rejects_garbage(self, value):
        with pytest.raises(InvalidDateRange):
            parse_iso_date(value)

    def test_date_ranges_intersect_inclusive(self):
        assert date_ranges_intersect(date(2025, 6, 1), date(2025, 6, 3), date(2025, 6, 3), date(2025, 6, 5))
        assert not date_ranges_intersect(date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 3), date(2025, 6, 5))

    def test_iter_days_inclusive(self):
        days = list(iter_days(date(2025, 2, 27), date(2025, 3, 2)))
        assert days == [date(2025, 2, 27), date(2025, 2, 28), date(2025, 3, 1), date(2025, 3, 2)]

    def test_iter_days_single_day(self):
        assert list(iter_days(date(2025, 6, 1), date(2025, 6, 1))) == [date(2025, 6, 1)]


class TestValidateWindow:
    def test_start_after_end_rejected(self):
        with pytest.raises(InvalidDateRange):
            validate_window(date(2025, 6, 2), date(2025, 6, 1))

    def test_same_day_inverted_times_rejected(self):
        with pytest.raises(InvalidDateRange):
            validate_window(date(2025, 6, 1), date(2025, 6, 1), "12:00", "10:00")

    def test_same_day_equal_times_rejected(self):
        with pytest.raises(InvalidDateRange):
            validate_window(date(2025, 6, 1), date(2025, 6, 1), "10:00", "10:00")

    def test_multi_day_allows_any_time_order(self):
        validate_window(date(2025, 6, 1), date(2025, 6, 2), "22:00", "02:00")

    def test_half_window_rejected(self):
        with pytest.raises(InvalidDateRange):
            validate_window(date(2025, 6, 1), date(2025, 6, 1), "10:00", None)

    def test_bad_time_reported_as_time_format(self):
        with pytest.raises(InvalidTimeFormat):
            validate_window(date(2025, 6, 1), date(2025, 6, 1), "10:00", "25:00")

    def test_whole_day_window_ok(self):
        validate_window(date(2025, 6, 1), date(2025, 6, 3))
