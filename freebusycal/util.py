"""Utility methods used by multiple modules."""

from __future__ import annotations

import datetime

from dateutil.relativedelta import MO, relativedelta

__all__ = [
    "local_timezone",
    "normalize_datetime",
    "start_of_week",
]


MIDNIGHT = datetime.time()


def local_timezone() -> datetime.tzinfo:
    """Get the local timezone to use when converting date to datetime."""
    if local_tz := datetime.datetime.now().astimezone().tzinfo:
        return local_tz
    return datetime.timezone.utc


def today() -> datetime.date:
    """Return the current date, as a separate function to facilitate mocking."""
    return datetime.date.today()


def start_of_week(day: datetime.date | None = None) -> datetime.date:
    """Return the Monday on or before the day, or of the current week."""
    if day is None:
        day = today()
    return day + relativedelta(weekday=MO(-1))


def normalize_datetime(
    value: datetime.date | datetime.datetime, tzinfo: datetime.tzinfo | None = None
) -> datetime.datetime:
    """Convert date or datetime to a value that can be used for comparison.

    Dates become midnight and floating times are placed in the timezone,
    which defaults to the local timezone.
    """
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, MIDNIGHT)
    if value.tzinfo is None:
        if tzinfo is None:
            tzinfo = local_timezone()
        value = value.replace(tzinfo=tzinfo)
    return value
