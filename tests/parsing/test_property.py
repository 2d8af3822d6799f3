"""Tests for handling rfc5545 properties and parameters."""

import pytest

from freebusycal.filters import param_filter, text_match
from freebusycal.parsing.lines import ContentLines, LineRef
from freebusycal.parsing.property import Property


def test_parse_attendee() -> None:
    """Test that quoted parameter values keep their commas."""
    prop = Property.from_ics('ATTENDEE;CN="John, Doe":mailto:john@example.com')
    assert prop.name == "ATTENDEE"
    assert prop.parameters == {"CN": "John, Doe"}
    assert prop.get_parameter_value("cn") == "John, Doe"
    assert prop.value == "mailto:john@example.com"


@pytest.mark.parametrize(
    ("line", "name", "value"),
    [
        ("SUMMARY:Test", "SUMMARY", "Test"),
        ("summary:Test", "SUMMARY", "Test"),
        ("SUMMARY:", "SUMMARY", ""),
        ("SUMMARY", "SUMMARY", ""),
        ("SUMMARY:a\\,b", "SUMMARY", "a,b"),
        ("SUMMARY:a\\:b", "SUMMARY", "a:b"),
        ("SUMMARY:a\\\\b", "SUMMARY", "a\\b"),
        ('SUMMARY:say \\"hi\\"', "SUMMARY", 'say "hi"'),
        ("DESCRIPTION:one\\ntwo\\Nthree", "DESCRIPTION", "one\ntwo\nthree"),
        ("SUMMARY:trailing\r", "SUMMARY", "trailing"),
        ("DTSTART:20240101T090000Z", "DTSTART", "20240101T090000Z"),
        ("URL:http://example.com:8080/a", "URL", "http://example.com:8080/a"),
        ("item1.EMAIL:jane@example.com", "ITEM1.EMAIL", "jane@example.com"),
    ],
)
def test_parse_value(line: str, name: str, value: str) -> None:
    """Test parsing the name and value of content lines."""
    prop = Property.from_ics(line)
    assert prop.name == name
    assert prop.value == value


def test_escaped_colon_in_name() -> None:
    """Test that an escaped colon does not separate the value."""
    prop = Property.from_ics("X-A\\:B:value")
    assert prop.value == "value"


def test_colon_in_quoted_parameter() -> None:
    """Test that a colon inside a quoted parameter value is not a separator."""
    prop = Property.from_ics('ATTENDEE;DELEGATED-FROM="mailto:a@example.com":mailto:b@example.com')
    assert prop.parameters == {"DELEGATED-FROM": "mailto:a@example.com"}
    assert prop.value == "mailto:b@example.com"


def test_parameters() -> None:
    """Test flag, repeated and quoted parameters."""
    prop = Property.from_ics('TEL;type=CELL;TYPE=VOICE;PREF;X-Q="a;b":+1-555-0100')
    assert prop.parameters == {
        "TYPE": ["CELL", "VOICE"],
        "PREF": None,
        "X-Q": "a;b",
    }


def test_preset_fields_not_overwritten() -> None:
    """Test that fields set explicitly are kept when the line is parsed."""
    prop = Property("DESCRIPTION", line="SUMMARY;LANGUAGE=en:Parsed")
    assert prop.name == "DESCRIPTION"
    assert prop.value == "Parsed"
    assert prop.parameters == {"LANGUAGE": "en"}

    prop = Property(value="Explicit", line="SUMMARY:Parsed")
    assert prop.value == "Explicit"
    assert prop.name == "SUMMARY"


def test_from_line_reference() -> None:
    """Test a property lazily parsed from a reference to a document line."""
    lines = ContentLines(["BEGIN:VEVENT", "SUMMARY:From document", "END:VEVENT"])
    prop = Property("SUMMARY", line=LineRef(lines, 1))
    assert prop.value == "From document"


@pytest.mark.parametrize(
    ("name", "value", "expected"),
    [
        ("SUMMARY", "a,b", "SUMMARY:a\\,b"),
        ("DESCRIPTION", "one\ntwo", "DESCRIPTION:one\\ntwo"),
        ("DESCRIPTION", "one\r\ntwo", "DESCRIPTION:one\\ntwo"),
        ("DTSTART", "20240101,20240102", "DTSTART:20240101,20240102"),
        ("RRULE", "FREQ=WEEKLY;BYDAY=MO,TU", "RRULE:FREQ=WEEKLY;BYDAY=MO,TU"),
        ("FREEBUSY", "20240101T090000Z/PT1H,x", "FREEBUSY:20240101T090000Z/PT1H,x"),
        ("ORG", "Example, Inc.", "ORG:Example\\, Inc."),
        ("N", "Doe;Jane;;;", "N:Doe;Jane;;;"),
        ("ITEM1.ATTENDEE", "mailto:a,b", "ITEM1.ATTENDEE:mailto:a,b"),
    ],
)
def test_render_escaping(name: str, value: str, expected: str) -> None:
    """Test escaping of values depends on the property name."""
    assert Property(name, value).render() == expected


def test_render_parameters() -> None:
    """Test encoding of parameters."""
    prop = Property(
        "ATTENDEE",
        "mailto:john@example.com",
        {"CN": "John: Doe", "RSVP": None, "TYPE": ["A", "B"], "ROLE": "CHAIR"},
    )
    assert prop.render() == (
        'ATTENDEE;CN="John: Doe";RSVP;TYPE=A;TYPE=B;ROLE=CHAIR:mailto:john@example.com'
    )


def test_render_quoted_parameter_escapes_quotes() -> None:
    """Test that quotes are escaped in a quoted parameter value."""
    prop = Property("X-TEST", "v", {"X-P": 'a;"b"'})
    assert prop.render() == 'X-TEST;X-P="a;\\"b\\"":v'


def test_render_fold_at_72() -> None:
    """Test a rendered line of exactly 72 characters is not folded."""
    prop = Property("SUMMARY", "x" * (72 - len("SUMMARY:")))
    rendered = prop.render()
    assert len(rendered) == 72
    assert "\r\n" not in rendered


def test_render_fold_at_73() -> None:
    """Test a rendered line of 73 characters is folded once."""
    prop = Property("SUMMARY", "x" * (73 - len("SUMMARY:")))
    rendered = prop.render()
    line = "SUMMARY:" + "x" * 65
    assert rendered == line[:72] + "\r\n " + line[72:]


def test_modify_invalidates() -> None:
    """Test that modifying a property marks it as invalid."""
    prop = Property.from_ics("SUMMARY:Test")
    assert prop.is_valid()
    prop.value = "Changed"
    assert not prop.is_valid()
    assert prop.render() == "SUMMARY:Changed"


def test_set_name() -> None:
    """Test renaming a property uppercases the name."""
    prop = Property.from_ics("SUMMARY:Test")
    prop.name = "description"
    assert prop.name == "DESCRIPTION"
    assert prop.render() == "DESCRIPTION:Test"


def test_parameter_accessors() -> None:
    """Test setting and clearing parameters."""
    prop = Property.from_ics("DTSTART;TZID=Europe/London;VALUE=DATE-TIME:20240101T090000")
    prop.set_parameter_value("x-custom", "1")
    assert prop.get_parameter_value("X-CUSTOM") == "1"
    prop.clear_parameters(["tzid"])
    assert prop.parameters == {"VALUE": "DATE-TIME", "X-CUSTOM": "1"}
    prop.clear_parameters()
    assert prop.parameters == {}
    assert prop.get_parameter_value("VALUE") is None
    assert not prop.is_valid()


def test_text_match() -> None:
    """Test the simple substring search."""
    prop = Property("SUMMARY", "Weekly team meeting")
    assert prop.text_match("team")
    assert not prop.text_match("Team")


def test_param_filter() -> None:
    """Test filtering on a parameter of the property."""
    prop = Property.from_ics("ATTENDEE;PARTSTAT=ACCEPTED:mailto:a@example.com")
    filters = [param_filter("PARTSTAT", text_match("accepted", match_type="equals"))]
    assert prop.test_filter(filters)
    assert prop.test_param_filter(
        filters[0].children, prop.get_parameter_value("PARTSTAT")
    )
    assert not prop.test_param_filter(filters[0].children, "DECLINED")


def test_equality() -> None:
    """Test properties compare by name, value and parameters."""
    assert Property.from_ics("SUMMARY;LANGUAGE=en:Test") == Property(
        "summary", "Test", {"language": "en"}
    )
    assert Property.from_ics("SUMMARY:Test") != Property("SUMMARY", "Other")


def test_render_name_with_parameter_suffix() -> None:
    """Test that parameters left in the name don't change value escaping."""
    assert Property("DTSTART;X", "a,b").render_line() == "DTSTART;X:a,b"
    assert Property("summary;x", "a,b").render_line() == "SUMMARY;X:a\\,b"


def test_multi_valued_parameter_copy() -> None:
    """Test that parameter values returned are copies."""
    prop = Property.from_ics("TEL;TYPE=CELL;TYPE=VOICE:+1-555-0100")
    value = prop.get_parameter_value("TYPE")
    assert value == ["CELL", "VOICE"]
    assert isinstance(value, list)
    value.append("WORK")
    prop.parameters["TYPE"] = "HOME"
    assert prop.get_parameter_value("TYPE") == ["CELL", "VOICE"]
    assert prop.is_valid()
