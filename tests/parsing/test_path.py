"""Tests for querying properties with a path."""

import pytest

from freebusycal.parsing.component import Component, parse
from freebusycal.parsing.path import PathSegment, compile_path

CALENDAR = """BEGIN:VCALENDAR
VERSION:2.0
BEGIN:VEVENT
UID:event-1
SUMMARY:First
BEGIN:VALARM
ACTION:DISPLAY
SUMMARY:Alarm
END:VALARM
END:VEVENT
BEGIN:VTODO
UID:todo-1
SUMMARY:Task
END:VTODO
END:VCALENDAR
"""


@pytest.fixture(name="calendar")
def mock_calendar() -> Component:
    """Fixture of a calendar with nested components."""
    return parse(CALENDAR)


def test_compile_path() -> None:
    """Test compiling a path into segments."""
    path = compile_path("/vcalendar/!VEVENT/*")
    assert path
    assert path.anchored
    assert path.segments == (
        PathSegment(negated=False, name="VCALENDAR"),
        PathSegment(negated=True, name="VEVENT"),
        PathSegment(negated=False, name="*"),
    )
    path = compile_path("VEVENT/SUMMARY")
    assert path
    assert not path.anchored


@pytest.mark.parametrize("path", ["", "/", "VEVENT//SUMMARY", "VEVENT/"])
def test_invalid_path(calendar: Component, path: str) -> None:
    """Test that an invalid path matches nothing."""
    assert compile_path(path) is None
    assert calendar.get_properties_by_path(path) == []


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("VEVENT/SUMMARY", ["First"]),
        ("vevent/summary", ["First"]),
        ("VALARM/SUMMARY", ["Alarm"]),
        ("*/SUMMARY", ["First", "Alarm", "Task"]),
        ("!VEVENT/SUMMARY", ["Alarm", "Task"]),
        ("VEVENT/!SUMMARY", ["event-1"]),
        ("VCALENDAR/VERSION", ["2.0"]),
        ("VCALENDAR/VEVENT/SUMMARY", ["First"]),
        ("VCALENDAR/*/SUMMARY", ["First", "Task"]),
        ("VEVENT/VALARM/ACTION", ["DISPLAY"]),
        ("/VCALENDAR/VERSION", ["2.0"]),
        ("/VCALENDAR/VTODO/UID", ["todo-1"]),
        ("/VEVENT/SUMMARY", []),
        ("/VCALENDAR/VALARM/SUMMARY", []),
        ("VJOURNAL/SUMMARY", []),
    ],
)
def test_get_properties_by_path(
    calendar: Component, path: str, expected: list[str]
) -> None:
    """Test matching properties of nested components."""
    assert [p.value for p in calendar.get_properties_by_path(path)] == expected
