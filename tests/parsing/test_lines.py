"""Tests for unfolding and folding rfc5545 content lines."""

import pytest

from freebusycal.parsing.lines import (
    ContentLines,
    LineCursor,
    fold,
    split_lines,
    unwrap,
    wrap,
)


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ("DESCRIPTION:abc\r\n def", "DESCRIPTION:abcdef"),
        ("DESCRIPTION:abc\n def", "DESCRIPTION:abcdef"),
        ("DESCRIPTION:abc\r def", "DESCRIPTION:abcdef"),
        ("DESCRIPTION:abc\r\n\tdef", "DESCRIPTION:abcdef"),
        ("DESCRIPTION:abc\r\n  def", "DESCRIPTION:abc def"),
        ("SUMMARY:a\r\nSUMMARY:b", "SUMMARY:a\r\nSUMMARY:b"),
    ],
    ids=["crlf", "lf", "cr", "tab", "only-one-space", "no-fold"],
)
def test_unwrap(content: str, expected: str) -> None:
    """Test removing folding from content lines."""
    assert unwrap(content) == expected


def test_wrap_short_lines() -> None:
    """Test that short lines are terminated but not folded."""
    assert wrap("BEGIN:VEVENT\nEND:VEVENT") == "BEGIN:VEVENT\r\nEND:VEVENT\r\n"


def test_wrap_exact_width() -> None:
    """Test that a line of exactly 72 characters passes through."""
    line = "X" * 72
    assert wrap(line) == line + "\r\n"


def test_wrap_long_line() -> None:
    """Test that a long line is folded every 72 characters."""
    line = "D" * 150
    assert wrap(line) == (
        "D" * 72 + "\r\n " + "D" * 72 + "\r\n " + "D" * 6 + "\r\n"
    )


def test_wrap_counts_characters() -> None:
    """Test that folding counts characters rather than bytes."""
    line = "é" * 73
    assert wrap(line) == "é" * 72 + "\r\n é\r\n"


def test_fold_and_unwrap() -> None:
    """Test that unfolding a folded line restores it."""
    line = "DESCRIPTION:" + "0123456789" * 20
    folded = fold(line)
    assert folded != line
    assert all(len(part) <= 73 for part in folded.split("\r\n"))
    assert unwrap(folded) == line


def test_split_lines_keeps_bare_cr() -> None:
    """Test that a bare CR is not a line separator."""
    assert split_lines("BEGIN:VEVENT\r\r\nEND:VEVENT\nX") == [
        "BEGIN:VEVENT\r",
        "END:VEVENT",
        "X",
    ]


def test_content_lines() -> None:
    """Test the immutable sequence of logical lines."""
    lines = ContentLines.from_text("BEGIN:VEVENT\r\nSUMMARY:a\r\n b\r\nEND:VEVENT")
    assert len(lines) == 3
    assert list(lines) == ["BEGIN:VEVENT", "SUMMARY:ab", "END:VEVENT"]
    assert lines[1] == "SUMMARY:ab"


def test_cursor() -> None:
    """Test moving a cursor over the lines."""
    lines = ContentLines(["A", "B", "C"])
    cursor = LineCursor(lines)
    assert cursor.valid
    assert cursor.current == "A"
    cursor.advance()
    ref = cursor.ref()
    assert ref.text == "B"
    cursor.advance()
    cursor.advance()
    assert not cursor.valid
    assert ref.text == "B"
    cursor.seek(0)
    assert cursor.current == "A"
