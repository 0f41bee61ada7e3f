"""
===============================================================================
HELIOTRANSFER - Julian Dates
===============================================================================
The game clock runs on a continuous day count from the Julian epoch. A
JulianDate is a plain float number of days, which resolves well below a
second across centuries, so the two operations the astrodynamics core needs
are ordinary arithmetic:

    date - date      -> duration in days
    date + duration  -> date

The helpers below convert between that time line and the civil calendar
(UTC) through the Unix epoch, JD 2440587.5 = 1970-01-01 00:00.
===============================================================================
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import Union

from heliotransfer.core.constants import JULIAN_YEAR_DAYS, SECONDS_PER_DAY, UNIX_EPOCH_JD

JulianDate = float

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_UNIX_EPOCH_DATE = date(1970, 1, 1)


def julian_date_from_datetime(when: datetime) -> JulianDate:
    """
    Convert a datetime to a Julian date.

    Naive datetimes are taken to be UTC.
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return UNIX_EPOCH_JD + (when - _UNIX_EPOCH).total_seconds() / SECONDS_PER_DAY


def datetime_from_julian_date(jd: JulianDate) -> datetime:
    """Convert a Julian date to an aware UTC datetime."""
    return _UNIX_EPOCH + timedelta(days=jd - UNIX_EPOCH_JD)


def julian_date_from_calendar(year: int, month: int, day: int) -> JulianDate:
    """
    Julian date at 00:00 UTC of a calendar day.

    Example: 2000-01-01 -> 2451544.5
    """
    return UNIX_EPOCH_JD + (date(year, month, day) - _UNIX_EPOCH_DATE).days


def calendar_date(jd: JulianDate) -> date:
    """Calendar day (UTC) containing the given Julian date."""
    return _UNIX_EPOCH_DATE + timedelta(days=math.floor(jd - UNIX_EPOCH_JD))


def parse_date(value: Union[str, float, int]) -> JulianDate:
    """
    Interpret a configuration value as a Julian date.

    Numbers (or numeric strings) are Julian dates; other strings must be ISO
    calendar dates ``YYYY-MM-DD``.

    Raises:
        ValueError: If the string is neither numeric nor an ISO date.
    """
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass
    day = date.fromisoformat(text)
    return julian_date_from_calendar(day.year, day.month, day.day)


def format_date(jd: JulianDate) -> str:
    """ISO calendar day of a Julian date."""
    return calendar_date(jd).isoformat()


def format_transit_time(days: float) -> str:
    """Transit time in days, or in Julian years once it exceeds one year."""
    if days > JULIAN_YEAR_DAYS:
        return f"{days / JULIAN_YEAR_DAYS:.2f} years"
    return f"{days:.2f} days"
