"""A grid of free and busy time slots computed from calendar data.

The availability of a person is shown as a table of days and time slots
within working hours, where each slot is either free or busy. Busy time is
taken from the events of a calendar and from the busy periods of any
free/busy components it contains.

The range of days and the time slots are configured with a `FreeBusyConfig`:

```python
from freebusycal.freebusy import FreeBusyConfig, generate

config = FreeBusyConfig(num_days=7, start_hour=9, end_hour=17, interval=30)
calendar = generate([ics_content], config)
if calendar.is_free(datetime.date(2024, 1, 1), 9, 30):
    ...
```

Recurring events are not expanded, only their first instance is busy.
"""

from __future__ import annotations

import datetime
import logging
import zoneinfo
from collections.abc import Iterable
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from .calendar_data import merge_calendar_data
from .parsing.component import Component, parse
from .parsing.property import Property
from .timespan import Timespan
from .types import FreeBusyType, parse_date_or_date_time, parse_duration, parse_period
from .util import local_timezone, start_of_week

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "FreeBusyConfig",
    "FreeBusyCalendar",
    "busy_timespans",
    "generate",
]

VEVENT = "VEVENT"
VFREEBUSY = "VFREEBUSY"
TRANSPARENT = "TRANSPARENT"
CANCELLED = "CANCELLED"
ONE_DAY = datetime.timedelta(days=1)
SATURDAY = 5

# A free/busy grid maps a date to an hour to a minute to True when free
Grid = dict[datetime.date, dict[int, dict[int, bool]]]


class FreeBusyConfig(BaseModel):
    """Configuration of the days and time slots in a free/busy grid."""

    start_date: datetime.date = Field(default_factory=lambda: start_of_week())
    """First day of the grid, defaults to the Monday of the current week."""

    num_days: int = Field(default=14, ge=1)
    """Number of days from the start date, including weekend days."""

    start_hour: int = Field(default=9, ge=1, le=22)
    """First hour of each day, inclusive."""

    end_hour: int = Field(default=17, le=23)
    """Last hour of each day, exclusive."""

    interval: int = Field(default=60, ge=1, le=60)
    """Length of a time slot in minutes."""

    include_weekends: bool = False
    """Show Saturday and Sunday, which otherwise still count in num_days."""

    timezone: Optional[str] = None
    """Timezone of the grid, defaults to the local timezone."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def end_date(self) -> datetime.date:
        """The day after the last day of the grid."""
        return self.start_date + datetime.timedelta(days=self.num_days)

    @property
    def tzinfo(self) -> datetime.tzinfo:
        """Return the timezone that the grid slots are in."""
        if self.timezone:
            return zoneinfo.ZoneInfo(self.timezone)
        return local_timezone()

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str | None) -> str | None:
        """Validate the timezone is a known IANA timezone."""
        if value is not None:
            try:
                zoneinfo.ZoneInfo(value)
            except (zoneinfo.ZoneInfoNotFoundError, ValueError) as err:
                raise ValueError(f"Unknown timezone '{value}'") from err
        return value

    @model_validator(mode="after")
    def check_hours(self) -> FreeBusyConfig:
        """Validate the end hour is not before the start hour."""
        if self.end_hour < self.start_hour:
            raise ValueError(
                f"end_hour {self.end_hour} must not be before start_hour {self.start_hour}"
            )
        return self


def _event_timespan(event: Component, tzinfo: datetime.tzinfo) -> Timespan | None:
    """Return the time occupied by an event, or None if it has no start."""
    if (dtstart_prop := event.get_property("DTSTART")) is None:
        _LOGGER.debug("Skipping %s without DTSTART", event.type)
        return None
    dtstart = parse_date_or_date_time(dtstart_prop)
    end: datetime.date | datetime.datetime
    if (dtend_prop := event.get_property("DTEND")) is not None:
        end = parse_date_or_date_time(dtend_prop)
    elif (duration := event.get_pvalue("DURATION")) is not None:
        end = dtstart + parse_duration(duration.strip())
    elif isinstance(dtstart, datetime.datetime):
        end = dtstart
    else:
        end = dtstart + ONE_DAY
    if event.get_property("RRULE") is not None:
        _LOGGER.warning(
            "Recurrence of event '%s' is not expanded", event.get_pvalue("UID")
        )
    return Timespan.of(dtstart, end, tzinfo)


def _is_busy_event(event: Component) -> bool:
    transp = (event.get_pvalue("TRANSP") or "").strip().upper()
    status = (event.get_pvalue("STATUS") or "").strip().upper()
    return transp != TRANSPARENT and status != CANCELLED


def _free_busy_timespans(prop: Property, tzinfo: datetime.tzinfo) -> list[Timespan]:
    """Return the busy periods of a FREEBUSY property."""
    fbtype = prop.get_parameter_value("FBTYPE")
    if isinstance(fbtype, list):
        fbtype = fbtype[0]
    tzid = prop.get_parameter_value("TZID")
    if isinstance(tzid, list):
        tzid = tzid[0]
    timespans = []
    for value in prop.value.split(","):
        period = parse_period(value.strip(), tzid, fbtype)
        if period.free_busy_type == FreeBusyType.FREE:
            continue
        timespans.append(Timespan.of(period.start, period.end_value, tzinfo))
    return timespans


def busy_timespans(
    calendar: Component, tzinfo: datetime.tzinfo | None = None
) -> list[Timespan]:
    """Return the sorted busy timespans of the events in a calendar.

    Transparent and cancelled events do not make time busy. Values that can't
    be parsed are logged and skipped. Floating times are placed in tzinfo.
    """
    if tzinfo is None:
        tzinfo = local_timezone()
    timespans: list[Timespan] = []
    for event in calendar.get_components(VEVENT):
        if not _is_busy_event(event):
            continue
        try:
            timespan = _event_timespan(event, tzinfo)
        except ValueError as err:
            _LOGGER.warning("Skipping event '%s': %s", event.get_pvalue("UID"), err)
            continue
        if timespan is not None:
            timespans.append(timespan)
    for free_busy in calendar.get_components(VFREEBUSY):
        for prop in free_busy.get_properties("FREEBUSY"):
            try:
                timespans.extend(_free_busy_timespans(prop, tzinfo))
            except ValueError as err:
                _LOGGER.warning("Skipping FREEBUSY '%s': %s", prop.value, err)
    return sorted(timespans)


def _slot_starts(config: FreeBusyConfig) -> list[datetime.time]:
    """Return the start time of every slot of a day."""
    slots = []
    hour, minute = config.start_hour, 0
    while hour < config.end_hour:
        slots.append(datetime.time(hour, minute))
        hour += (minute + config.interval) // 60
        minute = (minute + config.interval) % 60
    return slots


def _grid_dates(config: FreeBusyConfig) -> list[datetime.date]:
    days = (config.start_date + datetime.timedelta(days=i) for i in range(config.num_days))
    return [
        day for day in days if config.include_weekends or day.weekday() < SATURDAY
    ]


class FreeBusyCalendar:
    """The availability of one or more people as a grid of time slots."""

    def __init__(self, config: FreeBusyConfig, grid: Grid | None = None) -> None:
        """Initialize FreeBusyCalendar."""
        self._config = config
        self._grid: Grid = grid if grid is not None else {}

    @classmethod
    def from_calendar(
        cls, calendar: Component, config: FreeBusyConfig | None = None
    ) -> FreeBusyCalendar:
        """Compute the free/busy grid for the events of a calendar."""
        if config is None:
            config = FreeBusyConfig()
        tzinfo = config.tzinfo
        busy = busy_timespans(calendar, tzinfo)
        step = datetime.timedelta(minutes=config.interval)
        grid: Grid = {}
        for day in _grid_dates(config):
            hours: dict[int, dict[int, bool]] = {}
            for start in _slot_starts(config):
                slot_start = datetime.datetime.combine(day, start, tzinfo=tzinfo)
                slot = Timespan(slot_start, slot_start + step)
                free = not any(timespan.intersects(slot) for timespan in busy)
                hours.setdefault(start.hour, {})[start.minute] = free
            grid[day] = hours
        _LOGGER.debug(
            "Computed free/busy grid of %d days from %d busy timespans",
            len(grid),
            len(busy),
        )
        return cls(config, grid)

    @property
    def config(self) -> FreeBusyConfig:
        """Return the configuration the grid was computed with."""
        return self._config

    def is_free(
        self, day: datetime.date | str, hour: int, minute: int = 0
    ) -> bool | None:
        """Return True if the slot is free, or None if it is not in the grid.

        The day may be a date or an ISO formatted date string.
        """
        if isinstance(day, str):
            day = datetime.date.fromisoformat(day)
        return self._grid.get(day, {}).get(hour, {}).get(minute)

    def merge(self, other: FreeBusyCalendar) -> None:
        """Merge the availability of another grid, where busy time wins."""
        for day, hours in other._grid.items():
            existing_hours = self._grid.setdefault(day, {})
            for hour, minutes in hours.items():
                existing = existing_hours.setdefault(hour, {})
                for minute, free in minutes.items():
                    existing[minute] = existing.get(minute, True) and free

    def dates(self) -> list[datetime.date]:
        """Return the days of the grid in order."""
        return sorted(self._grid)

    def times(self) -> list[tuple[datetime.time, datetime.time]]:
        """Return the start and end time of each slot of a day in order."""
        slots = {
            datetime.time(hour, minute)
            for hours in self._grid.values()
            for hour, minutes in hours.items()
            for minute in minutes
        }
        step = datetime.timedelta(minutes=self._config.interval)
        return [
            (start, (datetime.datetime.combine(datetime.date.min, start) + step).time())
            for start in sorted(slots)
        ]


def generate(
    blobs: Iterable[str], config: FreeBusyConfig | None = None
) -> FreeBusyCalendar:
    """Compute a free/busy grid from the calendar data of multiple resources."""
    calendar = parse(merge_calendar_data(blobs))
    return FreeBusyCalendar.from_calendar(calendar, config)
