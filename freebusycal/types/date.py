"""Library for parsing DATE values."""

from __future__ import annotations

import datetime
import logging
import re

_LOGGER = logging.getLogger(__name__)

DATE_REGEX = re.compile(r"^([0-9]{8})$")


def parse_date(value: str) -> datetime.date:
    """Parse a rfc5545 DATE value into a datetime.date."""
    if not (match := DATE_REGEX.fullmatch(value)):
        raise ValueError(f"Expected value to match DATE pattern: '{value}'")
    date_value = match.group(1)
    year = int(date_value[0:4])
    month = int(date_value[4:6])
    day = int(date_value[6:])

    result = datetime.date(year, month, day)
    _LOGGER.debug("parse_date returned %s", result)
    return result
