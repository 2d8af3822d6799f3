"""Compatibility layer for controlling how calendar content is encoded.

This module provides context managers that change the behavior of the
library for the duration of a block of code.
"""

from .render_compat import enable_force_rendering, is_force_rendering_enabled

__all__ = [
    "enable_force_rendering",
    "is_force_rendering_enabled",
]
