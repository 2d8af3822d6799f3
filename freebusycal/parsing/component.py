"""Library for handling rfc5545 components.

An iCalendar object consists of one or more components, that may have
properties or sub-components. An example of a component might be the
calendar itself, an event, a to-do, a journal entry, timezone info, etc.

Components created here have no semantic meaning, but hold all the data
needed to query, filter, modify and re-encode them.

Parsing is lazy. The document is unfolded once into a shared sequence of
logical lines and the root component is parsed into its properties and
direct sub-components. Each sub-component initially only records the range
of lines between its BEGIN and END lines (it is "unexploded") and is parsed
into its own properties and sub-components the first time any of them are
accessed.

A component that was not modified since it was parsed is encoded by
replaying its original lines, otherwise it is encoded from its properties
and sub-components.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Iterator

from freebusycal.compat import is_force_rendering_enabled
from freebusycal.exceptions import (
    CalendarParseError,
    InvalidOperandError,
    MalformedComponentError,
)
from freebusycal.filters import FilterElement, component_matches

from .const import ATTR_BEGIN, ATTR_END, CRLF, KEY_BEGIN, KEY_END
from .lines import ContentLines, LineCursor, wrap
from .path import PathSegment, compile_path
from .property import ParameterValue, Property, property_name_of
from .vobject import VObject

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Component",
    "parse",
]

_GROUP_SEP = "."


def _is_begin(line: str) -> bool:
    return line[: len(KEY_BEGIN)].upper() == KEY_BEGIN


def _is_end(line: str) -> bool:
    return line[: len(KEY_END)].upper() == KEY_END


def _line_type(line: str, prefix_len: int) -> str:
    """Return the component type named on a BEGIN or END line."""
    value = line[prefix_len:].upper()
    # A stray CR is left behind when a document mixes line endings
    if value.endswith("\r"):
        value = value[:-1]
    return value


def _name_set(names: str | Iterable[str]) -> set[str]:
    """Return the set of uppercase names from a name or collection of names."""
    if isinstance(names, str):
        return {names.upper()}
    return {name.upper() for name in names}


def _ungrouped(name: str) -> str:
    """Remove a vCard group prefix (e.g. 'item1.') from a property name."""
    return name.rpartition(_GROUP_SEP)[2]


class Component(VObject):
    """An rfc5545 component.

    A component is created in one of three ways:
      - From rfc5545 text, which is parsed immediately.
      - From a cursor positioned on a BEGIN line of an already unfolded
        document, which only records where the component starts and ends.
      - Programmatically, as an empty component of the given type.
    """

    def __init__(
        self,
        type: str | None = None,  # pylint: disable=redefined-builtin
        *,
        text: str | None = None,
        cursor: LineCursor | None = None,
        master: VObject | None = None,
    ) -> None:
        """Initialize Component."""
        super().__init__(master)
        self._type: str | None = type.upper() if type else None
        self._properties: list[Property] = []
        self._components: list[Component] = []
        self._exploded = True
        self._lines: ContentLines | None = None
        self._source_type: str | None = None
        self._begin: int | None = None
        self._end: int | None = None

        if text is not None:
            self._lines = ContentLines.from_text(text)
            cursor = LineCursor(self._lines)
            self._parse_from(cursor)
            cursor.advance()
            _skip_blank_lines(cursor)
            if cursor.valid:
                raise CalendarParseError(
                    f"Unexpected content after {ATTR_END}:{self._source_type}",
                    detailed_error=cursor.current,
                )
        elif cursor is not None:
            self._lines = cursor.lines
            self._scan(cursor)

    @classmethod
    def from_ics(cls, content: str) -> Component:
        """Parse a component from rfc5545 text."""
        return cls(text=content)

    def _scan(self, cursor: LineCursor) -> None:
        """Record the line range of the component without parsing its contents.

        The cursor must be positioned on the BEGIN line and is left on the
        matching END line. Nesting is verified for the whole range.
        """
        self._begin = cursor.position
        self._source_type = _line_type(cursor.current, len(KEY_BEGIN))
        if self._type is None:
            self._type = self._source_type
        self._exploded = False

        stack: list[str] = []
        while cursor.valid:
            line = cursor.current
            if _is_begin(line):
                stack.append(_line_type(line, len(KEY_BEGIN)))
            elif _is_end(line):
                end_type = _line_type(line, len(KEY_END))
                if not stack or stack[-1] != end_type:
                    expected = stack[-1] if stack else self._source_type
                    raise MalformedComponentError(
                        f"Unexpected '{line}', expected {ATTR_END}:{expected}",
                        detailed_error=line,
                    )
                stack.pop()
                if not stack:
                    self._end = cursor.position
                    return
            cursor.advance()
        raise MalformedComponentError(
            f"Missing {ATTR_END}:{self._source_type}",
            detailed_error=self._lines[self._begin] if self._lines else None,
        )

    def _parse_from(self, cursor: LineCursor) -> None:
        """Parse properties and sub-components starting from a BEGIN line.

        Sub-components are scanned but not parsed. The cursor is left on the
        END line of this component.
        """
        _skip_blank_lines(cursor)
        if not cursor.valid or not _is_begin(cursor.current):
            raise CalendarParseError(
                f"Expected {ATTR_BEGIN} line",
                detailed_error=cursor.current if cursor.valid else None,
            )
        self._begin = cursor.position
        self._source_type = _line_type(cursor.current, len(KEY_BEGIN))
        if self._type is None:
            self._type = self._source_type

        properties: list[Property] = []
        components: list[Component] = []
        cursor.advance()
        while cursor.valid:
            line = cursor.current
            if _is_begin(line):
                components.append(Component(cursor=cursor, master=self))
            elif _is_end(line):
                end_type = _line_type(line, len(KEY_END))
                if end_type != self._source_type:
                    raise MalformedComponentError(
                        f"Unexpected '{line}', expected {ATTR_END}:{self._source_type}",
                        detailed_error=line,
                    )
                self._end = cursor.position
                self._properties = properties
                self._components = components
                self._exploded = True
                return
            elif line:
                properties.append(
                    Property(property_name_of(line), line=cursor.ref(), master=self)
                )
            cursor.advance()
        raise MalformedComponentError(
            f"Missing {ATTR_END}:{self._source_type}",
            detailed_error=self._lines[self._begin] if self._lines else None,
        )

    @property
    def exploded(self) -> bool:
        """Return True if the properties and sub-components are materialized."""
        return self._exploded

    def explode(self) -> None:
        """Parse the properties and sub-components of the component.

        This is a no-op if the component was already parsed or was not
        created from rfc5545 text.
        """
        if self._exploded or self._lines is None or self._begin is None:
            return
        _LOGGER.debug("Exploding %s component at line %s", self._type, self._begin)
        self._parse_from(LineCursor(self._lines, self._begin))

    def close(self) -> None:
        """Release the parsed contents of unmodified components.

        The contents are parsed again from the source lines on next access.
        """
        for component in self._components:
            component.close()
        if self.is_valid() and self._lines is not None:
            self._properties = []
            self._components = []
            self._exploded = False

    def is_valid(self) -> bool:
        """Return True if neither the component nor its parsed children changed."""
        if not self._valid:
            return False
        return all(component.is_valid() for component in self._components)

    @property
    def type(self) -> str:
        """Return the uppercase component type, e.g. 'VEVENT'."""
        return self._type or ""

    @type.setter
    def type(self, value: str) -> None:
        """Set the type of the component."""
        self._type = value.upper()
        self.invalidate()

    @property
    def properties(self) -> list[Property]:
        """Return all properties of the component."""
        self.explode()
        return list(self._properties)

    @property
    def components(self) -> list[Component]:
        """Return all sub-components of the component."""
        self.explode()
        return list(self._components)

    def component_count(self) -> int:
        """Return the number of sub-components."""
        self.explode()
        return len(self._components)

    def properties_count(self) -> int:
        """Return the number of properties."""
        self.explode()
        return len(self._properties)

    def get_component_at(self, position: int) -> Component | None:
        """Return the sub-component at the position, or None if out of range."""
        self.explode()
        if 0 <= position < len(self._components):
            return self._components[position]
        return None

    def get_property_at(self, position: int) -> Property | None:
        """Return the property at the position, or None if out of range."""
        self.explode()
        if 0 <= position < len(self._properties):
            return self._properties[position]
        return None

    def clear_property_at(self, position: int) -> None:
        """Remove the property at the position, if it exists."""
        self.explode()
        if 0 <= position < len(self._properties):
            del self._properties[position]
        self.invalidate()

    def get_property(self, name: str) -> Property | None:
        """Return the first property with the name, or None."""
        self.explode()
        name = name.upper()
        for prop in self._properties:
            if prop.name == name:
                return prop
        return None

    def get_pvalue(self, name: str) -> str | None:
        """Return the value of the first property with the name, or None."""
        if (prop := self.get_property(name)) is None:
            return None
        return prop.value

    def get_properties(self, names: str | Iterable[str] | None = None) -> list[Property]:
        """Return all properties, or those matching one of the names.

        A vCard group prefix such as 'item1.' is ignored when comparing names.
        """
        self.explode()
        if names is None:
            return list(self._properties)
        wanted = _name_set(names)
        return [prop for prop in self._properties if _ungrouped(prop.name) in wanted]

    def clear_properties(self, names: str | Iterable[str] | None = None) -> None:
        """Remove all properties, or those matching one of the names."""
        self.explode()
        if names is None:
            self._properties = []
        else:
            remove = _name_set(names)
            self._properties = [
                prop for prop in self._properties if prop.name not in remove
            ]
        self.invalidate()

    def set_properties(
        self, properties: Iterable[Property], names: str | Iterable[str] | None = None
    ) -> None:
        """Replace all properties, or those matching one of the names."""
        self.clear_properties(names)
        for prop in properties:
            self.add_property(prop)

    def add_property(
        self,
        prop: Property | str,
        value: str | None = None,
        parameters: dict[str, ParameterValue] | None = None,
    ) -> Property:
        """Append a property, given as a Property or as a name and value."""
        self.explode()
        if isinstance(prop, Property):
            prop.master = self
        elif isinstance(prop, str) and value is not None:
            prop = Property(prop, value, parameters or {}, master=self)
        else:
            raise InvalidOperandError(
                f"Property to be added must be a Property or a name and value: {prop!r}"
            )
        self._properties.append(prop)
        self.invalidate()
        return prop

    def get_components(
        self,
        types: str | Iterable[str] | None = None,
        normal_match: bool = True,
    ) -> list[Component]:
        """Return all sub-components, or those matching one of the types.

        When normal_match is False, the sub-components not matching any of
        the types are returned instead.
        """
        self.explode()
        if types is None:
            return list(self._components)
        wanted = _name_set(types)
        return [
            component
            for component in self._components
            if (component.type in wanted) == normal_match
        ]

    def clear_components(self, types: str | Iterable[str] | None = None) -> None:
        """Remove all sub-components, or those matching one of the types.

        When types are given, matching components are also cleared from
        every level of the tree below this component.
        """
        self.explode()
        if types is None:
            self._components = []
        else:
            remove = _name_set(types)
            for component in self._components:
                component.clear_components(remove)
            self._components = [c for c in self._components if c.type not in remove]
        self.invalidate()

    def set_components(
        self,
        components: Iterable[Component],
        types: str | Iterable[str] | None = None,
    ) -> None:
        """Replace all sub-components, or only those matching one of the types."""
        components = list(components)
        _check_components(components)
        self.explode()
        if not types:
            self._components = []
        else:
            self.clear_components(types)
        self.add_component(components)
        self.invalidate()

    def add_component(self, component: Component | Iterable[Component]) -> None:
        """Append a sub-component, or a list of sub-components."""
        self.explode()
        components = [component] if isinstance(component, Component) else component
        if isinstance(components, (str, bytes)) or not isinstance(components, Iterable):
            raise InvalidOperandError(
                f"Component to be added must be a Component: {component!r}"
            )
        components = list(components)
        if not components:
            return
        _check_components(components)
        for child in components:
            child.master = self
            self._components.append(child)
        self.invalidate()

    def mask_components(self, keep: Iterable[str], recursive: bool = True) -> None:
        """Remove sub-components whose type is not in the keep list."""
        self.explode()
        keep = _name_set(keep)
        kept = []
        for component in self._components:
            if component.type not in keep:
                self.invalidate()
                continue
            if recursive:
                component.mask_components(keep)
            kept.append(component)
        self._components = kept

    def mask_properties(
        self,
        keep: Iterable[str],
        component_types: Iterable[str] | None = None,
    ) -> None:
        """Remove properties whose name is not in the keep list.

        Only components of the given types are masked, or all components when
        no types are given. Sub-components are always visited.
        """
        self.explode()
        keep = _name_set(keep)
        if component_types is not None:
            component_types = _name_set(component_types)
        if component_types is None or self.type in component_types:
            kept = [prop for prop in self._properties if prop.name in keep]
            if len(kept) != len(self._properties):
                self._properties = kept
                self.invalidate()
        for component in self._components:
            component.mask_properties(keep, component_types)

    def collect_parameter_values(self, name: str) -> set[str]:
        """Return the distinct values of a parameter used in the whole tree.

        This is mainly used for collecting all referenced TZIDs.
        """
        self.explode()
        values: set[str] = set()
        for component in self._components:
            values |= component.collect_parameter_values(name)
        for prop in self._properties:
            value = prop.get_parameter_value(name)
            for item in value if isinstance(value, list) else [value]:
                if item:
                    values.add(item)
        return values

    def get_properties_by_path(self, path: str) -> list[Property]:
        """Return the properties in the tree matching the path.

        The path has the form [/]COMPONENT[/...]/PROPERTY where any segment
        may be prefixed with '!' to invert the match, or be '*' to match
        anything. Without a leading '/' the path may match at any depth.
        """
        if (compiled := compile_path(path)) is None:
            return []
        properties = self._match_path(compiled.segments, compiled.anchored)
        _LOGGER.debug(
            "Found %d properties within '%s' for path '%s'",
            len(properties),
            self._type,
            path,
        )
        return properties

    def _match_path(
        self, segments: Sequence[PathSegment], anchored: bool
    ) -> list[Property]:
        properties: list[Property] = []
        test, rest = segments[0], segments[1:]
        if rest and test.matches(self.type):
            if len(rest) == 1:
                properties.extend(
                    prop for prop in self.properties if rest[0].matches(prop.name)
                )
            else:
                for component in self.components:
                    properties.extend(component._match_path(rest, anchored=True))
        if not anchored:
            for component in self.components:
                properties.extend(component._match_path(segments, anchored=False))
        return properties

    def test_filter(self, filters: Sequence[FilterElement]) -> bool:
        """Return True if the component passes every COMP-FILTER element."""
        return component_matches(self, filters)

    def _source_lines(self, skip_components: bool) -> Iterator[str]:
        """Yield the original content lines between the BEGIN and END lines."""
        assert self._lines is not None
        assert self._begin is not None and self._end is not None
        depth = 0
        for position in range(self._begin + 1, self._end):
            line = self._lines[position]
            if skip_components:
                if _is_begin(line):
                    depth += 1
                    continue
                if _is_end(line):
                    depth -= 1
                    continue
                if depth > 0:
                    continue
            if line:
                yield line

    def render_unwrapped(self) -> str:
        """Encode the component as rfc5545 text without folding long lines."""
        contentlines = [f"{KEY_BEGIN}{self.type}"]
        if (
            self._lines is not None
            and self._end is not None
            and self.is_valid()
            and not is_force_rendering_enabled()
        ):
            contentlines.extend(self._source_lines(skip_components=self._exploded))
        else:
            self.explode()
            contentlines.extend(prop.render_line() for prop in self._properties)
        if self._exploded:
            for component in self._components:
                if rendered := component.render_unwrapped():
                    contentlines.append(rendered)
        contentlines.append(f"{KEY_END}{self.type}")
        return CRLF.join(contentlines)

    def render(self) -> str:
        """Encode the component as folded rfc5545 text."""
        return wrap(self.render_unwrapped())

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        state = "exploded" if self._exploded else "unexploded"
        return f"Component(type={self._type!r}, {state})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Component):
            return NotImplemented
        return (
            self.type == other.type
            and self.properties == other.properties
            and self.components == other.components
        )

    __hash__ = None  # type: ignore[assignment]


def _skip_blank_lines(cursor: LineCursor) -> None:
    while cursor.valid and not cursor.current:
        cursor.advance()


def _check_components(components: Iterable[object]) -> None:
    for component in components:
        if not isinstance(component, Component):
            raise InvalidOperandError(
                f"Component to be added must be a Component: {component!r}"
            )


def parse(content: str) -> Component:
    """Parse rfc5545 text into a component tree.

    This includes all necessary unfolding of long lines into full properties.
    """
    return Component(text=content)
