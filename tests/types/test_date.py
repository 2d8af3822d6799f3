"""Tests for DATE values."""

import datetime

import pytest

from freebusycal.types import parse_date


def test_parse_date() -> None:
    """Test parsing a date value."""
    assert parse_date("20240229") == datetime.date(2024, 2, 29)


@pytest.mark.parametrize("value", ["2024-02-29", "20240229T000000", "2024022", ""])
def test_invalid_date(value: str) -> None:
    """Test values that are not dates."""
    with pytest.raises(ValueError, match="Expected value to match DATE pattern"):
        parse_date(value)


def test_invalid_day() -> None:
    """Test a date value that is not a day of the calendar."""
    with pytest.raises(ValueError):
        parse_date("20230229")
