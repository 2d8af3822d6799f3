"""Library for parsing PERIOD values."""

from __future__ import annotations

import datetime
import enum
import logging
from typing import Any, Optional

from pydantic import BaseModel, field_validator, model_validator

from .date_time import parse_date_time
from .duration import parse_duration

_LOGGER = logging.getLogger(__name__)


class FreeBusyType(str, enum.Enum):
    """Specifies the free/busy time type."""

    FREE = "FREE"
    """The time interval is free for scheduling."""

    BUSY = "BUSY"
    """One or more events have been scheduled for the interval."""

    BUSY_UNAVAILABLE = "BUSY-UNAVAILABLE"
    """The interval can not be scheduled."""

    BUSY_TENTATIVE = "BUSY-TENTATIVE"
    """One or more events have been tentatively scheduled for the interval."""


class Period(BaseModel):
    """A value with a precise period of time."""

    start: datetime.datetime
    """Start of the period of time."""

    end: Optional[datetime.datetime] = None
    """End of the period of the time (duration is implicit)."""

    duration: Optional[datetime.timedelta] = None
    """Duration of the period of time (end time is implicit)."""

    free_busy_type: Optional[FreeBusyType] = None
    """Specifies the free or busy time type."""

    @property
    def end_value(self) -> datetime.datetime:
        """A computed end value based on either or duration."""
        if self.end:
            return self.end
        if not self.duration:
            raise ValueError("Invalid period missing both end and duration")
        return self.start + self.duration

    @field_validator("free_busy_type", mode="before")
    @classmethod
    def parse_free_busy_type(cls, value: Any) -> Any:
        """Treat unrecognized free/busy types as busy time."""
        if isinstance(value, str) and value.upper() not in {
            item.value for item in FreeBusyType
        }:
            _LOGGER.debug("Unknown FBTYPE '%s', treating as BUSY", value)
            return FreeBusyType.BUSY
        if isinstance(value, str):
            return value.upper()
        return value

    @model_validator(mode="after")
    def check_end_or_duration(self) -> Period:
        """Validate that the period has exactly one of end or duration."""
        if (self.end is None) == (self.duration is None):
            raise ValueError("Period must have exactly one of end or duration")
        return self


def parse_period(
    value: str,
    tzid: str | None = None,
    free_busy_type: str | None = None,
) -> Period:
    """Parse a rfc5545 PERIOD value, e.g. '19970101T180000Z/PT5H30M'."""
    parts = value.split("/")
    if len(parts) != 2:
        raise ValueError(f"Period did not have two time values: {value}")
    start_value, end_value = parts
    start = parse_date_time(start_value, tzid)
    if end_value.lstrip("+-").startswith("P"):
        return Period(
            start=start,
            duration=parse_duration(end_value),
            free_busy_type=free_busy_type,
        )
    return Period(
        start=start,
        end=parse_date_time(end_value, tzid),
        free_busy_type=free_busy_type,
    )
