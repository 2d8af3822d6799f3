"""A timespan is defined by a start and end time and used for comparisons.

Busy time may come from all day events that have no specific time and from
floating times that need to be interpreted in the timezone of the person
whose availability is computed. A timespan is unambiguous in that it is
created with that timezone.
"""

from __future__ import annotations

import datetime
import functools
from typing import Any

from .util import normalize_datetime

__all__ = ["Timespan"]


@functools.total_ordering
class Timespan:
    """An unambiguous definition of a start and end time.

    A timespan can never be a "floating" time range and is always aligned
    to some kind of timezone or utc.
    """

    def __init__(self, start: datetime.datetime, end: datetime.datetime) -> None:
        """Initialize Timespan."""
        if not start.tzinfo:
            raise ValueError(f"Start time did not have a timezone: {start}")
        if end < start:
            raise ValueError(f"End time {end} is before start time {start}")
        self._start = start
        self._end = end

    @classmethod
    def of(  # pylint: disable=invalid-name
        cls,
        start: datetime.date | datetime.datetime,
        end: datetime.date | datetime.datetime,
        tzinfo: datetime.tzinfo | None = None,
    ) -> Timespan:
        """Create a Timespan for the date range, resolving floating times."""
        return Timespan(
            normalize_datetime(start, tzinfo), normalize_datetime(end, tzinfo)
        )

    @property
    def start(self) -> datetime.datetime:
        """Return the timespan start as a datetime."""
        return self._start

    @property
    def end(self) -> datetime.datetime:
        """Return the timespan end as a datetime."""
        return self._end

    @property
    def duration(self) -> datetime.timedelta:
        """Return the timespan duration."""
        return self._end - self._start

    def intersects(self, other: Timespan) -> bool:
        """Return True if this timespan overlaps with the other timespan.

        A zero length timespan overlaps a timespan it starts within.
        """
        if self._start == self._end:
            return other.start <= self._start < other.end
        if other.start == other.end:
            return self._start <= other.start < self._end
        return self._start < other.end and other.start < self._end

    def includes(self, other: Timespan) -> bool:
        """Return True if the other timespan starts and ends within this one."""
        return self._start <= other.start and other.end <= self._end

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Timespan):
            return NotImplemented
        return (self._start, self._end) == (other.start, other.end)

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Timespan):
            return NotImplemented
        return (self._start, self._end) < (other.start, other.end)

    def __hash__(self) -> int:
        return hash((self._start, self._end))

    def __repr__(self) -> str:
        return f"Timespan({self._start.isoformat()}, {self._end.isoformat()})"
