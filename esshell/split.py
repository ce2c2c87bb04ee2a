"""Splitting text into words at separator characters."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from esshell.term import Term, mkstr


class Splitter:
    """Splits text fed to it in pieces into a list of words.

    With ``coalesce`` runs of separators count as one and produce no empty
    words; otherwise each separator ends a word.  Without ``coalesce`` and
    with no separators, every character is a word.  A NUL character always
    separates.
    """

    def __init__(self, separators: str, coalesce: bool) -> None:
        self._coalesce = coalesce
        self._split_chars = not coalesce and separators == ""
        self._separators = frozenset(separators) | {"\0"}
        self._buffer: Optional[list[str]] = None
        self._words: list[str] = []

    def feed(self, data: str, end_word: bool) -> None:
        """Split more text; with ``end_word`` a partial word at its end is finished."""
        if self._split_chars:
            self._words.extend(data.split("\0", 1)[0])
            return
        buffer = self._buffer
        if not self._coalesce and buffer is None:
            buffer = []
        for char in data:
            if buffer is not None:
                if char in self._separators:
                    self._words.append("".join(buffer))
                    buffer = None if self._coalesce else []
                else:
                    buffer.append(char)
            elif char not in self._separators:
                buffer = [char]
        if end_word and buffer is not None:
            self._words.append("".join(buffer))
            buffer = None
        self._buffer = buffer

    def finish(self) -> list[Term]:
        """End the split and return the words; the splitter starts afresh."""
        if self._buffer is not None:
            self._words.append("".join(self._buffer))
            self._buffer = None
        words, self._words = self._words, []
        return [mkstr(word) for word in words]


def fsplit(
    separators: str, words: Iterable[Union[Term, str]], coalesce: bool
) -> list[Term]:
    """Split every word at the separators, joining the results."""
    splitter = Splitter(separators, coalesce)
    for word in words:
        splitter.feed(word if isinstance(word, str) else word.as_string(), True)
    return splitter.finish()