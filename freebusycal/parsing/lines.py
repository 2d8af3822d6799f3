"""Library for handling rfc5545 content lines.

An iCalendar stream is a sequence of content lines, where long lines may be
"folded" by inserting a line break followed by a single whitespace character.
This module unfolds raw text into logical lines, folds rendered text again
and provides the shared, seekable view over the logical lines that the
component parser walks through.

The lines of a document are stored once in an immutable `ContentLines`
sequence. A `LineCursor` is the single mutable position used while a
component is being parsed, and a `LineRef` is an immutable handle to one
logical line that lazily parsed properties keep around.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .const import CRLF, FOLD, FOLD_INDENT, FOLD_LEN, LINES

__all__ = [
    "unwrap",
    "wrap",
    "fold",
    "split_lines",
    "ContentLines",
    "LineCursor",
    "LineRef",
]

FOLD_RE = re.compile(FOLD)
LINES_RE = re.compile(LINES)


def unwrap(content: str) -> str:
    """Remove rfc5545 folding, joining continuation lines.

    A line break (CRLF, LF or a bare CR) followed by a single space or tab
    is removed entirely.
    """
    return FOLD_RE.sub("", content)


def fold(line: str, width: int = FOLD_LEN) -> str:
    """Insert a CRLF and a space after every `width` characters of line."""
    if len(line) <= width:
        return line
    chunks = [line[i : i + width] for i in range(0, len(line), width)]
    return (CRLF + FOLD_INDENT).join(chunks)


def wrap(content: str) -> str:
    """Apply rfc5545 folding to each line of the content.

    Lines that already are exactly 72 characters long are passed through as
    is, which keeps output of previously folded content stable. Every output
    line ends with a CRLF.
    """
    wrapped = []
    for line in LINES_RE.split(content):
        if len(line) != FOLD_LEN:
            line = fold(line)
        wrapped.append(line + CRLF)
    return "".join(wrapped)


def split_lines(content: str) -> list[str]:
    """Split unfolded content into logical lines.

    Only CRLF and LF are line separators here. A bare CR is left in place
    and handled by the component parser.
    """
    return LINES_RE.split(content)


class ContentLines(Sequence[str]):
    """An immutable sequence of the logical lines of a document."""

    def __init__(self, lines: Sequence[str]) -> None:
        """Initialize ContentLines."""
        self._lines = tuple(lines)

    @classmethod
    def from_text(cls, content: str) -> ContentLines:
        """Unfold the content and split it into logical lines."""
        return cls(split_lines(unwrap(content)))

    def __getitem__(self, index: int) -> str:  # type: ignore[override]
        return self._lines[index]

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __repr__(self) -> str:
        return f"ContentLines({len(self._lines)} lines)"


@dataclass(frozen=True, eq=False)
class LineRef:
    """A reference to a single logical line in a ContentLines sequence."""

    lines: ContentLines
    position: int

    @property
    def text(self) -> str:
        """Return the referenced logical line."""
        return self.lines[self.position]


@dataclass(eq=False)
class LineCursor:
    """A mutable position within a ContentLines sequence.

    A cursor is owned by whichever component is currently parsing. Nested
    components advance the same cursor and leave it positioned on their own
    END line when they return.
    """

    lines: ContentLines
    position: int = 0

    @property
    def valid(self) -> bool:
        """Return True if the cursor points to an existing line."""
        return 0 <= self.position < len(self.lines)

    @property
    def current(self) -> str:
        """Return the line at the cursor position."""
        return self.lines[self.position]

    def advance(self) -> None:
        """Move the cursor to the next line."""
        self.position += 1

    def seek(self, position: int) -> None:
        """Move the cursor to an absolute position."""
        self.position = position

    def ref(self) -> LineRef:
        """Return a reference to the line at the cursor position."""
        return LineRef(self.lines, self.position)
