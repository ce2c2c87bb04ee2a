"""Small helpers used throughout the shell."""

from __future__ import annotations

import os

VERSION = "es version 0.9.2 2-Mar-2022"


def is_absolute(path: str) -> bool:
    """True if the path begins with ``/``, ``./`` or ``../``."""
    return path.startswith(("/", "./", "../"))


def streq2(text: str, first: str, second: str) -> bool:
    """True if ``text`` is the concatenation of ``first`` and ``second``."""
    return text == first + second


def strerror(err: int) -> str:
    """The system's message for an error number."""
    try:
        message = os.strerror(err)
    except (ValueError, OverflowError):
        return "unknown error"
    return message or "unknown error"