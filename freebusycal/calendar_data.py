"""Combining calendar data fetched from multiple calendar resources.

A CalDAV calendar-query returns the calendar data of every matching resource
as a separate VCALENDAR object. These are combined into a single VCALENDAR
document before parsing, so that the events of all resources become children
of one calendar component.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from .exceptions import CalendarError
from .parsing.const import CRLF

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "merge_calendar_data",
    "read_calendar_file",
]

VCALENDAR = "VCALENDAR"
_LINES_RE = re.compile(r"\r?\n")
_CALENDAR_WRAPPER_RE = re.compile(r"^(BEGIN|END):VCALENDAR\s*$", re.IGNORECASE)


def merge_calendar_data(blobs: Iterable[str]) -> str:
    """Combine iCalendar objects into a single VCALENDAR document.

    Blank lines and the BEGIN and END lines of the wrapping VCALENDAR
    objects are dropped. Folded lines are kept as they are.
    """
    lines = [f"BEGIN:{VCALENDAR}"]
    count = 0
    for blob in blobs:
        count += 1
        for line in _LINES_RE.split(blob):
            if not line.strip() or _CALENDAR_WRAPPER_RE.match(line):
                continue
            lines.append(line)
    lines.append(f"END:{VCALENDAR}")
    _LOGGER.debug("Merged %d calendar objects into %d lines", count, len(lines))
    return CRLF.join(lines)


def read_calendar_file(path: str | Path) -> str:
    """Read the contents of a local iCalendar file."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as err:
        raise CalendarError(f"Could not load calendar from '{path}': {err}") from err
