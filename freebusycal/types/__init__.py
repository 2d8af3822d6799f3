"""Library for parsing rfc5545 property value data types.

The parsers take the already unescaped value of a property and return the
python equivalent, raising ValueError when the value does not match the
expected pattern.
"""

from .date import parse_date
from .date_time import parse_date_time, parse_date_or_date_time
from .duration import parse_duration
from .period import FreeBusyType, Period, parse_period

__all__ = [
    "FreeBusyType",
    "Period",
    "parse_date",
    "parse_date_time",
    "parse_date_or_date_time",
    "parse_duration",
    "parse_period",
]
