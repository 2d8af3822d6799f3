"""Parsing expression grammar for property path queries.

A path selects properties within a component tree, in a syntax kind of
similar to a poor man's XPath:

  [/][!]COMPONENT[/[!]COMPONENT...]/[!]PROPERTY

A leading '/' anchors the match at the component the query starts from,
otherwise the whole path is also tried against every descendant. A '!'
before a segment inverts the test for that segment, and '*' matches any
component or property.

The grammar is defined using pyparsing and compiled paths are cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cache

from pyparsing import (
    Literal,
    Opt,
    ParseException,
    ParseResults,
    Suppress,
    Word,
    ZeroOrMore,
    printables,
)

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "PathSegment",
    "PropertyPath",
    "compile_path",
]

WILDCARD = "*"


@dataclass(frozen=True)
class PathSegment:
    """A single component or property test within a path."""

    negated: bool
    name: str

    def matches(self, name: str) -> bool:
        """Return True if the segment selects the component or property name."""
        if self.name == WILDCARD:
            return True
        return (self.name == name) != self.negated


@dataclass(frozen=True)
class PropertyPath:
    """A compiled path query."""

    anchored: bool
    segments: tuple[PathSegment, ...]


def _segment_action(tokens: ParseResults) -> PathSegment:
    return PathSegment(negated=tokens[0] == "!", name=tokens[1].upper())


_NEGATE = Opt(Literal("!"), default="")
_NAME = Word(printables, exclude_chars="/")
_SEGMENT = (_NEGATE + _NAME).set_parse_action(_segment_action)
_ANCHOR = Opt(Literal("/"), default="")
_PATH = _ANCHOR + _SEGMENT + ZeroOrMore(Suppress("/") + _SEGMENT)


@cache
def compile_path(path: str) -> PropertyPath | None:
    """Compile a path query, returning None if it is not a valid path."""
    try:
        result = _PATH.parse_string(path, parse_all=True)
    except ParseException as err:
        _LOGGER.debug("Invalid property path '%s': %s", path, err)
        return None
    anchor, *segments = result
    return PropertyPath(anchored=anchor == "/", segments=tuple(segments))
