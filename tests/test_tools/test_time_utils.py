"""
Tests for Time Utilities
========================

Tolerant parsing of stored date strings and minute arithmetic.
"""

import pytest
from datetime import datetime, date, time, timedelta, timezone

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tools.time_utils import (
    parse_iso_datetime,
    parse_iso_date,
    parse_intake_time,
    minutes_until,
    is_within_dates,
    trailing_days,
    format_iso_date,
    to_local_naive,
)


class TestParsing:
    """Tests for date, date-time and intake time parsing"""

    def test_parse_date_only(self):
        assert parse_iso_datetime("2024-06-10") == datetime(2024, 6, 10, 0, 0)

    def test_parse_date_time(self):
        assert parse_iso_datetime("2024-06-10T08:30") == datetime(2024, 6, 10, 8, 30)

    @pytest.mark.parametrize("value", ["", "   ", "not a date", "2024-13-01", None, 42, []])
    def test_invalid_values_return_none(self, value):
        assert parse_iso_datetime(value) is None

    def test_aware_value_becomes_local_naive(self):
        aware = datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc)
        parsed = parse_iso_datetime("2024-06-10T08:00:00Z")

        assert parsed.tzinfo is None
        assert parsed == aware.astimezone().replace(tzinfo=None)

    def test_parse_iso_date_from_date_time(self):
        assert parse_iso_date("2024-06-10T23:59") == date(2024, 6, 10)

    def test_parse_iso_date_passthrough(self):
        assert parse_iso_date(date(2024, 6, 10)) == date(2024, 6, 10)

    def test_parse_intake_time(self):
        assert parse_intake_time("08:05") == time(8, 5)

    @pytest.mark.parametrize("value", ["8h", "25:00", "12:60", "8:00", "08:0", " 08:00", "08:00\n", "", None, 800])
    def test_malformed_intake_time(self, value):
        assert parse_intake_time(value) is None


class TestArithmetic:
    """Tests for minute differences and date ranges"""

    def test_minutes_until_future(self):
        now = datetime(2024, 6, 10, 7, 50)
        assert minutes_until(datetime(2024, 6, 10, 8, 0), now) == 10

    def test_minutes_until_past_is_negative(self):
        now = datetime(2024, 6, 10, 8, 15)
        assert minutes_until(datetime(2024, 6, 10, 8, 0), now) == -15

    def test_partial_minutes_truncate_toward_zero(self):
        now = datetime(2024, 6, 10, 7, 55, 30)
        target = datetime(2024, 6, 10, 8, 0)

        assert minutes_until(target, now) == 4
        assert minutes_until(now, target) == -4

    def test_is_within_dates_inclusive(self):
        start, end = date(2024, 6, 1), date(2024, 6, 10)

        assert is_within_dates(start, start, end)
        assert is_within_dates(end, start, end)
        assert not is_within_dates(end + timedelta(days=1), start, end)

    def test_unknown_bounds_never_match(self):
        assert not is_within_dates(date(2024, 6, 5), None, date(2024, 6, 10))
        assert not is_within_dates(date(2024, 6, 5), date(2024, 6, 1), None)

    def test_trailing_days_oldest_first(self):
        days = list(trailing_days(date(2024, 6, 10), 7))

        assert len(days) == 7
        assert days[0] == date(2024, 6, 4)
        assert days[-1] == date(2024, 6, 10)

    def test_format_iso_date(self):
        assert format_iso_date(date(2024, 6, 1)) == "2024-06-01"

    def test_naive_value_unchanged(self):
        value = datetime(2024, 6, 10, 8, 0)
        assert to_local_naive(value) is value
