"""Exceptions for freebusycal library."""


class CalendarError(Exception):
    """Base exception for all freebusycal errors."""


class CalendarParseError(CalendarError):
    """Exception raised when parsing an ical string.

    The 'message' attribute contains a human-readable message about the
    error that occurred. The 'detailed_error' attribute can provide additional
    information about the error, such as the offending content line, useful
    for debugging purposes.
    """

    def __init__(self, message: str, *, detailed_error: str | None = None) -> None:
        """Initialize the CalendarParseError with a message."""
        super().__init__(message)
        self.message = message
        self.detailed_error = detailed_error


class MalformedComponentError(CalendarParseError):
    """Exception raised when a component is not terminated properly.

    A component opened with a BEGIN line must be closed by an END line of
    the same type before the input is exhausted. An END line for a different
    type while a component is open also raises this error.
    """


class InvalidOperandError(CalendarError, TypeError):
    """Exception raised when an object of the wrong type is added to a tree.

    This is a programming error, e.g. adding a string where a Component is
    required, and is raised immediately.
    """


class FilterError(CalendarError):
    """Exception raised when a filter document can't be parsed."""
