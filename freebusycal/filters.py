"""Evaluation of CalDAV and CardDAV query filters against parsed components.

A filter is a tree of elements as sent in the body of a CalDAV
calendar-query or CardDAV addressbook-query REPORT, for example:

```xml
<C:filter xmlns:C="urn:ietf:params:xml:ns:caldav">
  <C:comp-filter name="VCALENDAR">
    <C:comp-filter name="VEVENT">
      <C:prop-filter name="SUMMARY">
        <C:text-match match-type="starts-with">Meeting</C:text-match>
      </C:prop-filter>
    </C:comp-filter>
  </C:comp-filter>
</C:filter>
```

Filters may be parsed from XML with `parse_filter_xml` or assembled with
the builder functions in this module. A list of filters passes only when
every filter in the list passes.

Elements that are not understood in the place they appear are logged and
treated as passing, which matches the permissive behavior clients expect
from existing servers. Time ranges are not evaluated and always pass.
"""

from __future__ import annotations

import enum
import logging
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from .exceptions import FilterError

if TYPE_CHECKING:
    from .parsing.component import Component
    from .parsing.property import ParameterValue, Property

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "FilterKind",
    "FilterElement",
    "is_defined",
    "is_not_defined",
    "comp_filter",
    "prop_filter",
    "param_filter",
    "text_match",
    "time_range",
    "parse_filter_xml",
    "component_matches",
    "property_matches",
    "parameter_matches",
]

CALDAV_NS = "urn:ietf:params:xml:ns:caldav"
CARDDAV_NS = "urn:ietf:params:xml:ns:carddav"
_NAMESPACES = (CALDAV_NS, CARDDAV_NS)

_FILTER_TAG = "filter"
_NEGATE_CONDITION = "negate-condition"
_COLLATION_OCTET = "i;octet"
_YES = "yes"


class FilterKind(str, enum.Enum):
    """The kinds of filter elements that are evaluated."""

    IS_DEFINED = "is-defined"
    IS_NOT_DEFINED = "is-not-defined"
    COMP_FILTER = "comp-filter"
    PROP_FILTER = "prop-filter"
    PARAM_FILTER = "param-filter"
    TIME_RANGE = "time-range"
    TEXT_MATCH = "text-match"


class MatchType(str, enum.Enum):
    """The match-type attribute of a text-match element."""

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts-with"
    ENDS_WITH = "ends-with"


@dataclass
class FilterElement:
    """A single element of a filter tree.

    The tag is either a local name such as 'comp-filter', or a name
    qualified with a CalDAV or CardDAV namespace in ElementTree notation,
    e.g. '{urn:ietf:params:xml:ns:caldav}comp-filter'.
    """

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    content: str = ""
    children: list[FilterElement] = field(default_factory=list)

    @property
    def local_name(self) -> str:
        """Return the tag without its namespace."""
        if self.tag.startswith("{"):
            namespace, _, local = self.tag[1:].partition("}")
            if namespace not in _NAMESPACES:
                return self.tag
            return local
        return self.tag

    @property
    def kind(self) -> FilterKind | None:
        """Return the kind of the element, or None if it is not handled."""
        try:
            return FilterKind(self.local_name)
        except ValueError:
            return None

    @property
    def name(self) -> str:
        """Return the name attribute, naming a component, property or parameter."""
        return self.attributes.get("name", "")

    @property
    def negated(self) -> bool:
        """Return True if the element has negate-condition="yes"."""
        return self.attributes.get(_NEGATE_CONDITION, "").lower() == _YES


def is_defined() -> FilterElement:
    """Return a filter passing when the object exists or has content."""
    return FilterElement(FilterKind.IS_DEFINED.value)


def is_not_defined() -> FilterElement:
    """Return a filter passing when the object is missing or empty."""
    return FilterElement(FilterKind.IS_NOT_DEFINED.value)


def comp_filter(name: str, *children: FilterElement) -> FilterElement:
    """Return a filter for the sub-components of the given type."""
    return FilterElement(
        FilterKind.COMP_FILTER.value, {"name": name}, children=list(children)
    )


def prop_filter(name: str, *children: FilterElement) -> FilterElement:
    """Return a filter for the properties with the given name."""
    return FilterElement(
        FilterKind.PROP_FILTER.value, {"name": name}, children=list(children)
    )


def param_filter(name: str, *children: FilterElement) -> FilterElement:
    """Return a filter for the parameter with the given name."""
    return FilterElement(
        FilterKind.PARAM_FILTER.value, {"name": name}, children=list(children)
    )


def text_match(
    text: str,
    match_type: str | None = None,
    collation: str | None = None,
    negate: bool = False,
) -> FilterElement:
    """Return a filter matching a property or parameter value against text."""
    attributes = {}
    if match_type is not None:
        attributes["match-type"] = match_type
    if collation is not None:
        attributes["collation"] = collation
    if negate:
        attributes[_NEGATE_CONDITION] = _YES
    return FilterElement(FilterKind.TEXT_MATCH.value, attributes, content=text)


def time_range(start: str | None = None, end: str | None = None) -> FilterElement:
    """Return a time-range filter, which is accepted but not evaluated."""
    attributes = {}
    if start is not None:
        attributes["start"] = start
    if end is not None:
        attributes["end"] = end
    return FilterElement(FilterKind.TIME_RANGE.value, attributes)


def _from_xml_element(element: ET.Element) -> FilterElement:
    # Text of a text-match is the literal search string
    content = element.text or ""
    if not content.strip():
        content = ""
    return FilterElement(
        tag=element.tag,
        attributes=dict(element.attrib),
        content=content,
        children=[_from_xml_element(child) for child in element],
    )


def parse_filter_xml(content: str | bytes) -> list[FilterElement]:
    """Parse a filter list from an XML document.

    The document is either a filter element, in which case its children are
    returned, or a single filter element such as a comp-filter.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as err:
        raise FilterError(f"Failed to parse filter XML: {err}") from err
    element = _from_xml_element(root)
    if element.local_name == _FILTER_TAG:
        return element.children
    return [element]


def _text_matches(element: FilterElement, haystack: str) -> bool:
    """Evaluate a text-match element against a value, without negation."""
    search = element.content
    if element.attributes.get("collation", "").lower() != _COLLATION_OCTET:
        search = search.lower()
        haystack = haystack.lower()
    match_type = element.attributes.get("match-type", "").lower()
    if match_type == MatchType.EQUALS:
        return haystack == search
    if match_type == MatchType.STARTS_WITH:
        return haystack.startswith(search)
    if match_type == MatchType.ENDS_WITH:
        return haystack.endswith(search)
    return search in haystack


def _unhandled(element: FilterElement, context: str) -> None:
    _LOGGER.warning("Unhandled filter tag '%s' in %s filter", element.tag, context)


def _check_children(
    element: FilterElement,
    matches: Sequence[Any],
    test: Callable[[Any, Sequence[FilterElement]], bool],
) -> bool:
    """Evaluate the body of a comp-filter or prop-filter.

    An empty body only requires that something matched the name.
    """
    if not element.children:
        return bool(matches)
    first = element.children[0].kind
    if first == FilterKind.IS_NOT_DEFINED:
        return not matches
    if not matches:
        if first == FilterKind.IS_DEFINED:
            return False
        return element.children[0].negated
    return all(test(match, element.children) for match in matches)


def component_matches(component: Component, filters: Sequence[FilterElement]) -> bool:
    """Return True if the component passes every filter in the list."""
    for element in filters:
        match element.kind:
            case FilterKind.IS_DEFINED:
                if not component.properties_count() and not component.component_count():
                    return False
            case FilterKind.IS_NOT_DEFINED:
                if component.properties_count() or component.component_count():
                    return False
            case FilterKind.COMP_FILTER:
                children = component.get_components(element.name)
                if not _check_children(element, children, component_matches):
                    return False
            case FilterKind.PROP_FILTER:
                properties = component.get_properties(element.name)
                if not _check_children(element, properties, property_matches):
                    return False
            case FilterKind.TIME_RANGE:
                _LOGGER.debug("Ignoring time-range filter on %s", component.type)
            case _:
                _unhandled(element, "component")
    return True


def property_matches(prop: Property, filters: Sequence[FilterElement]) -> bool:
    """Return True if the property passes every filter in the list."""
    for element in filters:
        match element.kind:
            case FilterKind.IS_DEFINED:
                if not prop.value:
                    return False
            case FilterKind.IS_NOT_DEFINED:
                if prop.value:
                    return False
            case FilterKind.TIME_RANGE:
                _LOGGER.debug("Ignoring time-range filter on %s", prop.name)
            case FilterKind.TEXT_MATCH:
                if _text_matches(element, prop.value) == element.negated:
                    return False
            case FilterKind.PARAM_FILTER:
                value = prop.get_parameter_value(element.name)
                if not parameter_matches(prop, element.children, value):
                    return False
            case _:
                _unhandled(element, "property")
    return True


def parameter_matches(
    prop: Property, filters: Sequence[FilterElement], value: ParameterValue
) -> bool:
    """Return True if the parameter value of the property passes every filter.

    A multi-valued parameter matches a text-match when any of its values do.
    """
    values = [v for v in (value if isinstance(value, list) else [value]) if v]
    for element in filters:
        match element.kind:
            case FilterKind.IS_DEFINED:
                if not values:
                    return False
            case FilterKind.IS_NOT_DEFINED:
                if values:
                    return False
            case FilterKind.TIME_RANGE:
                _LOGGER.debug("Ignoring time-range filter on %s parameter", prop.name)
            case FilterKind.TEXT_MATCH:
                found = any(_text_matches(element, v) for v in values)
                if found == element.negated:
                    return False
            case _:
                _unhandled(element, "parameter")
    return True
