"""Rendering a free/busy grid as an HTML table.

The table has a row of day labels, a row of dates and a row for each time
slot of the day, with a cell per day marking the slot as free or busy:

```html
<table class="cal">
<tr><th></th><th class="day">M</th>...</tr>
<tr><th></th><th class="date">01/01</th>...</tr>
<tr><td class="time">09:00</td><td class="avail free">Free</td>...</tr>
</table>
```
"""

from __future__ import annotations

from collections.abc import Sequence
from html import escape

from .freebusy import FreeBusyCalendar

__all__ = [
    "render_table",
]

DAY_LABELS = ("M", "T", "W", "T", "F", "S", "S")
DATE_FORMAT = "%d/%m"
TIME_FORMAT = "%H:%M"
RANGE_SEPARATOR = "&nbsp;&ndash;&nbsp;"


def render_table(
    calendar: FreeBusyCalendar,
    *,
    day_labels: Sequence[str] = DAY_LABELS,
    date_format: str = DATE_FORMAT,
    time_format: str = TIME_FORMAT,
    show_range: bool = False,
    free_label: str = "Free",
    busy_label: str = "Busy",
    css_class: str = "cal",
) -> str:
    """Render the free/busy grid as an HTML table.

    The day labels are indexed by weekday, starting with Monday. When
    show_range is set, time slots are labeled with their start and end time
    instead of only the start time.
    """
    if len(day_labels) != 7:
        raise ValueError(f"Expected 7 day labels, got {len(day_labels)}")
    dates = calendar.dates()
    rows = [f'<table class="{escape(css_class)}">']

    cells = "".join(
        f'<th class="day">{escape(day_labels[day.weekday()])}</th>' for day in dates
    )
    rows.append(f"<tr><th></th>{cells}</tr>")
    cells = "".join(
        f'<th class="date">{escape(day.strftime(date_format))}</th>' for day in dates
    )
    rows.append(f"<tr><th></th>{cells}</tr>")

    free_cell = f'<td class="avail free">{escape(free_label)}</td>'
    busy_cell = f'<td class="avail busy">{escape(busy_label)}</td>'
    for start, end in calendar.times():
        label = escape(start.strftime(time_format))
        if show_range:
            label += RANGE_SEPARATOR + escape(end.strftime(time_format))
        cells = "".join(
            free_cell if calendar.is_free(day, start.hour, start.minute) else busy_cell
            for day in dates
        )
        rows.append(f'<tr><td class="time">{label}</td>{cells}</tr>')

    rows.append("</table>")
    return "\n".join(rows)
