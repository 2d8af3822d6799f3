"""Library for parsing DATE-TIME values.

A DATE-TIME is either in UTC (a trailing 'Z'), relative to the timezone
named by a TZID parameter, or floating, meaning it has no timezone and is
interpreted in whatever timezone the reader is in.
"""

from __future__ import annotations

import datetime
import logging
import re
import zoneinfo

from freebusycal.parsing.property import Property

from .date import DATE_REGEX, parse_date

_LOGGER = logging.getLogger(__name__)


DATETIME_REGEX = re.compile(r"^([0-9]{8})T([0-9]{6})(Z)?$")
TZID = "TZID"
ATTR_VALUE = "VALUE"
VALUE_DATE = "DATE"


def _timezone(tzid: str) -> datetime.tzinfo | None:
    """Return the timezone for a TZID, or None when it is unknown."""
    # Some producers quote the TZID with a leading '/' for global ids
    tzid = tzid.lstrip("/")
    try:
        return zoneinfo.ZoneInfo(tzid)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        _LOGGER.warning("Unknown TZID '%s', treating time as floating", tzid)
        return None


def parse_date_time(
    value: str, tzid: str | None = None
) -> datetime.datetime:
    """Parse a rfc5545 DATE-TIME value into a datetime.datetime."""
    if not (match := DATETIME_REGEX.fullmatch(value)):
        raise ValueError(f"Expected value to match DATE-TIME pattern: {value}")

    # Example: TZID=America/New_York:19980119T020000
    timezone: datetime.tzinfo | None = None
    if match.group(3):  # Example: 19980119T070000Z
        timezone = datetime.timezone.utc
    elif tzid:
        timezone = _timezone(tzid)

    # Example: 19980118T230000
    date_value = match.group(1)
    year = int(date_value[0:4])
    month = int(date_value[4:6])
    day = int(date_value[6:])
    time_value = match.group(2)
    hour = int(time_value[0:2])
    minute = int(time_value[2:4])
    second = int(time_value[4:6])

    result = datetime.datetime(year, month, day, hour, minute, second, tzinfo=timezone)
    _LOGGER.debug("parse_date_time returned %s", result)
    return result


def parse_date_or_date_time(prop: Property) -> datetime.date | datetime.datetime:
    """Parse the value of a DTSTART-like property.

    The value is a DATE when the VALUE=DATE parameter is present or the value
    has no time part, otherwise it is a DATE-TIME with an optional TZID.
    """
    value = prop.value.strip()
    value_type = prop.get_parameter_value(ATTR_VALUE)
    if value_type == VALUE_DATE or DATE_REGEX.fullmatch(value):
        return parse_date(value)
    tzid = prop.get_parameter_value(TZID)
    if isinstance(tzid, list):
        tzid = tzid[0]
    return parse_date_time(value, tzid)
