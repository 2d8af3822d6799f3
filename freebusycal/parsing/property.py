"""Library for handling rfc5545 properties and parameters.

A property is the definition of an individual attribute describing a
calendar object or a calendar component, serialized as a single logical
content line of the form:

  NAME[;PARAM=VALUE...]:VALUE

For example, given a content line of:

  ATTENDEE;CN="John, Doe";ROLE=CHAIR:mailto:john@example.com

The property has the name 'ATTENDEE', the parameters
{'CN': 'John, Doe', 'ROLE': 'CHAIR'} and the value 'mailto:john@example.com'.

Properties are parsed lazily. A property created by the component parser only
holds a reference to its content line, and the name, value and parameters are
extracted the first time any of them are accessed. Values that were set
explicitly are never overwritten by the lazy parse.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Optional, Union

from freebusycal.filters import FilterElement, parameter_matches, property_matches

from .const import FOLD_LEN
from .lines import LineRef, fold
from .vobject import VObject

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Property",
    "ParameterValue",
]

ParameterValue = Optional[Union[str, list[Optional[str]]]]
"""A parameter is a flag (None), a single value, or a list of repeated values."""

# Content escaping does not apply to these properties culled from RFC2445
NO_ESCAPE_PROPERTIES = frozenset(
    {
        "ATTACH",
        "GEO",
        "PERCENT-COMPLETE",
        "PRIORITY",
        "DURATION",
        "FREEBUSY",
        "TZOFFSETFROM",
        "TZOFFSETTO",
        "TZURL",
        "ATTENDEE",
        "ORGANIZER",
        "RECURRENCE-ID",
        "URL",
        "EXRULE",
        "SEQUENCE",
        "CREATED",
        "RRULE",
        "REPEAT",
        "TRIGGER",
        "RDATE",
        "COMPLETED",
        "DTEND",
        "DUE",
        "DTSTART",
        "DTSTAMP",
        "LAST-MODIFIED",
        "EXDATE",
    }
)

_UNESCAPE_NEWLINE_RE = re.compile(r"\\[nN]")
_UNESCAPE_RETURN_RE = re.compile(r"\\[rR]")
_UNESCAPE_VALUE_RE = re.compile(r'\\([,:"\\])')
_NEWLINE_RE = re.compile(r"\r?\n")
_PARAM_SUFFIX_RE = re.compile(r";.*$")
_GROUP_PREFIX_RE = re.compile(r"^.*[.]")
_QUOTED_RE = re.compile(r'^"(.*)"$', flags=re.DOTALL)
_NAME_DELIMITERS_RE = re.compile(r"[:;]")


def _find_value_separator(line: str) -> int | None:
    """Return the position of the ':' separating the head from the value.

    The separator is the first colon that is not escaped with a backslash
    and not inside a double quoted parameter value.
    """
    pos = line.find(":")
    while pos != -1:
        escaped = pos > 0 and line[pos - 1] == "\\"
        if not escaped and line.count('"', 0, pos) % 2 == 0:
            return pos
        pos = line.find(":", pos + 1)
    return None


def _split_head(head: str) -> list[str]:
    """Split the property name and parameters on unescaped, unquoted ';'."""
    parts = []
    start = 0
    quoted = False
    for pos, char in enumerate(head):
        if char == '"':
            quoted = not quoted
        elif char == ";" and not quoted and head[pos - 1 : pos] != "\\":
            parts.append(head[start:pos])
            start = pos + 1
    parts.append(head[start:])
    return parts


def _parse_parameters(tokens: Iterable[str]) -> dict[str, ParameterValue]:
    """Parse KEY[=VALUE] tokens, accumulating repeated keys into a list."""
    parameters: dict[str, ParameterValue] = {}
    for token in tokens:
        value: str | None
        key, sep, value = token.partition("=")
        if not sep:
            value = None
        elif match := _QUOTED_RE.match(value):
            value = match.group(1)
        key = key.upper()
        if key not in parameters:
            parameters[key] = value
        elif isinstance(existing := parameters[key], list):
            existing.append(value)
        else:
            parameters[key] = [existing, value]
    return parameters


def escape_parameter(value: str) -> str:
    """Quote a parameter value that contains a ';' or ':'."""
    if ";" not in value and ":" not in value:
        return value
    escaped = value.replace('"', '\\"')
    return f'"{escaped}"'


def escape_value(name: str, value: str) -> str:
    """Apply the content escaping rules for the named property."""
    if name in NO_ESCAPE_PROPERTIES:
        return value
    # ADR, N and ORG are escaped the same way. Their ";" separators are
    # escaped on the parts they are built from.
    value = _NEWLINE_RE.sub(r"\\n", value)
    return value.replace(",", "\\,")


def property_name_of(line: str) -> str:
    """Return the uppercase property name of a raw content line."""
    return _NAME_DELIMITERS_RE.split(line, maxsplit=1)[0].upper()


class Property(VObject):
    """An rfc5545 property.

    A property is either created programmatically from a name, value and
    parameters, or from a content line, which may be a plain string or a
    reference into the lines of a parsed document.
    """

    def __init__(
        self,
        name: str | None = None,
        value: str | None = None,
        parameters: Mapping[str, ParameterValue] | None = None,
        *,
        line: str | LineRef | None = None,
        master: VObject | None = None,
    ) -> None:
        """Initialize Property."""
        super().__init__(master)
        self._name: str | None = name.upper() if name else None
        self._value: str | None = value
        self._parameters: dict[str, ParameterValue] | None = None
        if parameters is not None:
            self._parameters = {k.upper(): v for k, v in parameters.items()}
        self._line = line

    @classmethod
    def from_ics(cls, contentline: str) -> Property:
        """Create a Property from an rfc5545 content line."""
        return cls(line=contentline)

    def _source_line(self) -> str:
        if isinstance(self._line, LineRef):
            return self._line.text
        if self._line is not None:
            return self._line
        return ""

    def _parse(self) -> None:
        """Parse the source content line, keeping explicitly set fields."""
        line = self._source_line()
        line = _UNESCAPE_NEWLINE_RE.sub("\n", line)
        line = _UNESCAPE_RETURN_RE.sub("\r", line)

        if (pos := _find_value_separator(line)) is None:
            _LOGGER.debug("Content line has no value separator: %s", line)
            head, raw_value = line, ""
        else:
            head, raw_value = line[:pos], line[pos + 1 :]

        if self._value is None:
            value = _UNESCAPE_VALUE_RE.sub(r"\1", raw_value)
            if value.endswith("\r"):
                value = value[:-1]
            self._value = value

        name, *params = _split_head(head)
        if self._name is None:
            self._name = name.upper()
        if self._parameters is None:
            self._parameters = _parse_parameters(params)

    @property
    def name(self) -> str:
        """Return the uppercase property name."""
        if self._name is None:
            self._parse()
        assert self._name is not None
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        """Rename the property."""
        self._name = name.upper()
        self.invalidate()

    @property
    def value(self) -> str:
        """Return the unescaped property value."""
        if self._value is None:
            self._parse()
        assert self._value is not None
        return self._value

    @value.setter
    def value(self, value: str) -> None:
        """Set the property value."""
        self._value = value
        self.invalidate()

    @property
    def parameters(self) -> dict[str, ParameterValue]:
        """Return a copy of the property parameters keyed by uppercase name.

        Use the setters to modify parameters.
        """
        return {
            key: list(value) if isinstance(value, list) else value
            for key, value in self._parsed_parameters().items()
        }

    @parameters.setter
    def parameters(self, parameters: Mapping[str, ParameterValue]) -> None:
        """Replace all property parameters."""
        self._parameters = {k.upper(): v for k, v in parameters.items()}
        self.invalidate()

    def _parsed_parameters(self) -> dict[str, ParameterValue]:
        if self._parameters is None:
            self._parse()
        assert self._parameters is not None
        return self._parameters

    def get_parameter_value(self, name: str) -> ParameterValue:
        """Return the value of the named parameter, or None."""
        value = self._parsed_parameters().get(name.upper())
        return list(value) if isinstance(value, list) else value

    def set_parameter_value(self, name: str, value: ParameterValue) -> None:
        """Set the value of the named parameter."""
        self._parsed_parameters()[name.upper()] = value
        self.invalidate()

    def clear_parameters(self, names: str | Iterable[str] | None = None) -> None:
        """Remove all parameters, or only the parameters with the given names."""
        parameters = self._parsed_parameters()
        if names is None:
            parameters.clear()
        else:
            remove = (
                {names.upper()} if isinstance(names, str) else {n.upper() for n in names}
            )
            for key in list(parameters):
                if key in remove:
                    del parameters[key]
        self.invalidate()

    def text_match(self, search: str) -> bool:
        """Return True if the property value contains the search text."""
        return search in self.value

    def render_parameters(self) -> str:
        """Encode the parameters as ;KEY=VALUE pairs."""
        rendered = []
        for key, value in self._parsed_parameters().items():
            values: Sequence[str | None] = value if isinstance(value, list) else [value]
            for item in values:
                if item is None:
                    rendered.append(f";{key}")
                else:
                    rendered.append(f";{key}={escape_parameter(item)}")
        return "".join(rendered)

    def render_line(self) -> str:
        """Encode the property as a single unfolded content line."""
        name = self.name
        bare_name = _GROUP_PREFIX_RE.sub("", _PARAM_SUFFIX_RE.sub("", name))
        escaped = escape_value(bare_name, self.value)
        return f"{name}{self.render_parameters()}:{escaped}"

    def render(self) -> str:
        """Encode the property as an rfc5545 content line, folded if needed."""
        return fold(self.render_line(), FOLD_LEN)

    def test_filter(self, filters: Sequence[FilterElement]) -> bool:
        """Return True if the property passes every PROP-FILTER element."""
        return property_matches(self, filters)

    def test_param_filter(
        self, filters: Sequence[FilterElement], value: ParameterValue
    ) -> bool:
        """Return True if the parameter value passes every PARAM-FILTER element."""
        return parameter_matches(self, filters, value)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Property(name={self.name!r}, value={self.value!r}, "
            f"parameters={self.parameters!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Property):
            return NotImplemented
        return (
            self.name == other.name
            and self.value == other.value
            and self.parameters == other.parameters
        )

    __hash__ = None  # type: ignore[assignment]
