"""Tests for DURATION values."""

import datetime

import pytest

from freebusycal.types import parse_duration


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("PT1H", datetime.timedelta(hours=1)),
        ("PT15M", datetime.timedelta(minutes=15)),
        ("-PT15M", datetime.timedelta(minutes=-15)),
        ("+P1D", datetime.timedelta(days=1)),
        ("P2W", datetime.timedelta(weeks=2)),
        ("P1DT2H3M4S", datetime.timedelta(days=1, hours=2, minutes=3, seconds=4)),
        ("PT0S", datetime.timedelta()),
    ],
)
def test_parse_duration(value: str, expected: datetime.timedelta) -> None:
    """Test parsing durations."""
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["1H", "P1H", "P1W2D", ""])
def test_invalid_duration(value: str) -> None:
    """Test values that are not durations."""
    with pytest.raises(ValueError, match="Expected value to match DURATION pattern"):
        parse_duration(value)
