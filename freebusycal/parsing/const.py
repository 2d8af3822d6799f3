"""Constants for the content line parser."""

# Related to rfc5545 text parsing
FOLD = r"(?:\r\n|\r|\n)[ \t]"
LINES = r"\r?\n"
FOLD_LEN = 72
FOLD_INDENT = " "
CRLF = "\r\n"
ATTR_BEGIN = "BEGIN"
ATTR_END = "END"

KEY_BEGIN = f"{ATTR_BEGIN}:"
KEY_END = f"{ATTR_END}:"
