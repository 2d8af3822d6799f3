"""Test fixtures."""

from collections.abc import Generator
import zoneinfo
from unittest.mock import patch

import pytest

LOCAL_TIMEZONE = zoneinfo.ZoneInfo("America/Regina")


@pytest.fixture(autouse=True)
def mock_local_timezone() -> Generator[None, None, None]:
    """Fixture to set a local timezone to use during tests."""
    with patch("freebusycal.util.local_timezone", return_value=LOCAL_TIMEZONE), patch(
        "freebusycal.freebusy.local_timezone", return_value=LOCAL_TIMEZONE
    ):
        yield
