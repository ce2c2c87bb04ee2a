"""Exceptions raised by the shell."""

from __future__ import annotations

from typing import Iterable, NoReturn


class EsError(Exception):
    """A shell exception: a list of words, the first of which names its kind."""

    def __init__(self, exception: Iterable[object]) -> None:
        words = list(exception)
        if not words:
            raise ValueError("an exception needs at least one word")
        super().__init__(*words)
        self.exception = words

    @property
    def kind(self) -> str:
        """The name of the exception, e.g. ``error`` or ``signal``."""
        return str(self.exception[0])

    @property
    def arguments(self) -> list:
        """The words following the exception's name."""
        return self.exception[1:]

    def __str__(self) -> str:
        return " ".join(str(word) for word in self.exception)


def fail(origin: str, message: str) -> NoReturn:
    """Raise an ``error`` exception coming from ``origin``."""
    raise EsError(["error", origin, message])