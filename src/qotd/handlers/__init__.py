"""Connection handlers."""

from .quote import handle, render_quote, TERMINATOR, ERROR_PREFIX

__all__ = [
    "handle",
    "render_quote",
    "TERMINATOR",
    "ERROR_PREFIX",
]
