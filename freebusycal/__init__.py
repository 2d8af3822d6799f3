"""
.. include:: ../README.md
"""

__all__ = [
    "calendar_data",
    "compat",
    "exceptions",
    "filters",
    "freebusy",
    "html",
    "parsing",
    "timespan",
    "types",
    "util",
]
