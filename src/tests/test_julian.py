"""
===============================================================================
HELIOTRANSFER - Julian Date Test Suite
===============================================================================
Tests for calendar conversions, configuration date parsing and transit-time
formatting.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from datetime import date, datetime, timezone

import pytest
from numpy.testing import assert_allclose

from heliotransfer.core.constants import J2000
from heliotransfer.core.julian import (
    calendar_date,
    datetime_from_julian_date,
    format_date,
    format_transit_time,
    julian_date_from_calendar,
    julian_date_from_datetime,
    parse_date,
)


class TestCalendarConversions:

    @pytest.mark.parametrize("day, jd", [
        (date(2000, 1, 1), 2451544.5),
        (date(2025, 11, 21), 2461000.5),
        (date(1970, 1, 1), 2440587.5),
    ])
    def test_reference_dates(self, day, jd):
        assert julian_date_from_calendar(day.year, day.month, day.day) == jd
        assert calendar_date(jd) == day
        assert calendar_date(jd + 0.99) == day

    def test_j2000_noon(self):
        when = datetime(2000, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert julian_date_from_datetime(when) == J2000

    def test_naive_datetime_is_utc(self):
        assert julian_date_from_datetime(datetime(2000, 1, 1, 12)) == J2000

    def test_datetime_roundtrip(self):
        when = datetime(2031, 7, 4, 18, 30, 15, tzinfo=timezone.utc)
        back = datetime_from_julian_date(julian_date_from_datetime(when))
        assert abs((back - when).total_seconds()) < 1e-3

    def test_format_date(self):
        assert format_date(2461000.5) == "2025-11-21"


class TestParseDate:

    def test_number(self):
        assert parse_date(2451545) == 2451545.0
        assert parse_date(2451545.25) == 2451545.25

    def test_numeric_string(self):
        assert parse_date("2451600.5") == 2451600.5

    def test_iso_string(self):
        assert parse_date("2025-11-21") == 2461000.5

    def test_date_object(self):
        assert parse_date(date(2000, 1, 1)) == 2451544.5

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_date("next tuesday")


class TestTransitTime:

    def test_days(self):
        assert format_transit_time(212.3) == "212.30 days"

    def test_exactly_one_year_in_days(self):
        assert format_transit_time(365.25) == "365.25 days"

    def test_years(self):
        assert format_transit_time(730.5) == "2.00 years"
        assert_allclose(float(format_transit_time(400.0).split()[0]), 1.10)
