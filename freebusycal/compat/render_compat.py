"""Compatibility layer for rendering components from their parsed objects.

By default a component that was not modified since it was parsed is encoded
by replaying its original source lines, which preserves the exact formatting
of the input. Forcing rendering re-encodes every property from its parsed
name, parameters and value instead, normalizing escaping and folding.
"""

from collections.abc import Generator
import contextlib
import contextvars


_force_rendering = contextvars.ContextVar("force_rendering", default=False)


@contextlib.contextmanager
def enable_force_rendering() -> Generator[None]:
    """Context manager to always render components from parsed objects."""
    token = _force_rendering.set(True)
    try:
        yield
    finally:
        _force_rendering.reset(token)


def is_force_rendering_enabled() -> bool:
    """Check if forced rendering is enabled."""
    return _force_rendering.get()
