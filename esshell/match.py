"""Wildcard pattern matching of words against patterns."""

from __future__ import annotations

import enum
from typing import Iterable, Optional, Sequence, Union

from esshell.term import Term, mkstr


class Quoting(enum.Enum):
    """Quoting that applies to a whole pattern."""

    QUOTED = "quoted"
    UNQUOTED = "unquoted"


QUOTED = Quoting.QUOTED
UNQUOTED = Quoting.UNQUOTED

Quote = Union[Quoting, str]
Word = Union[Term, str]

_RANGE_FAIL = -1
_RANGE_ERROR = -2


def _is_quoted(quote: Quote, index: int) -> bool:
    if quote is QUOTED:
        return True
    return isinstance(quote, str) and index < len(quote) and quote[index] == "q"


def _is_raw(quote: Quote, index: int) -> bool:
    if quote is UNQUOTED:
        return True
    return isinstance(quote, str) and index < len(quote) and quote[index] == "r"


def _text(word: Word) -> str:
    return word if isinstance(word, str) else word.as_string()


def _range_match(pattern: str, start: int, quote: Quote, char: str) -> int:
    """Match ``char`` against the class starting after ``[``; return its length."""

    def at(index: int) -> str:
        return pattern[index] if index < len(pattern) else ""

    index = start
    negate = False
    matched = False
    if at(index) == "~" and not _is_quoted(quote, index):
        index += 1
        negate = True
    if at(index) == "]" and not _is_quoted(quote, index):
        index += 1
        matched = char == "]"
    while at(index) != "]" or _is_quoted(quote, index):
        if at(index) == "":
            return _RANGE_ERROR
        if (
            at(index + 1) == "-"
            and not _is_quoted(quote, index + 1)
            and (at(index + 2) not in ("]", "") or _is_quoted(quote, index + 2))
        ):
            if at(index) <= char <= at(index + 2):
                matched = True
            index += 2
        elif at(index) == char:
            matched = True
        index += 1
    if matched != negate:
        return index - start + 1
    return _RANGE_FAIL


def _match(subject: str, si: int, pattern: str, pi: int, quote: Quote) -> bool:
    while True:
        if pi >= len(pattern):
            return si >= len(subject)
        char = pattern[pi]
        pi += 1
        if _is_raw(quote, pi - 1):
            if char == "?":
                if si >= len(subject):
                    return False
                si += 1
            elif char == "*":
                while pi < len(pattern) and pattern[pi] == "*" and _is_raw(quote, pi):
                    pi += 1
                if pi >= len(pattern):
                    return True
                while si < len(subject):
                    if _match(subject, si, pattern, pi, quote):
                        return True
                    si += 1
                return False
            elif char == "[":
                if si >= len(subject):
                    return False
                length = _range_match(pattern, pi, quote, subject[si])
                if length == _RANGE_FAIL:
                    return False
                if length == _RANGE_ERROR:
                    if subject[si] != "[":
                        return False
                else:
                    pi += length
                si += 1
            else:
                if si >= len(subject) or char != subject[si]:
                    return False
                si += 1
        else:
            if si >= len(subject) or char != subject[si]:
                return False
            si += 1


def match(subject: str, pattern: str, quote: Quote = UNQUOTED) -> bool:
    """Match a single word against a single pattern."""
    if quote is QUOTED:
        return subject == pattern
    return _match(subject, 0, pattern, 0, quote)


def _has_wild(pattern: str, quote: Quote, start: int = 0) -> bool:
    if quote is QUOTED:
        return False
    return any(
        char in "*?[" and _is_raw(quote, index)
        for index, char in enumerate(pattern[start:], start)
    )


def has_wild(pattern: str, quote: Quote = UNQUOTED) -> bool:
    """True if the pattern holds an unquoted wildcard."""
    return _has_wild(pattern, quote)


def list_match(
    subjects: Sequence[Word], patterns: Sequence[Word], quotes: Sequence[Quote]
) -> bool:
    """True if any pattern matches any subject; ``()`` matches only ``()`` or stars."""
    if len(quotes) < len(patterns):
        raise ValueError("every pattern needs its quoting")
    if not subjects:
        if not patterns:
            return True
        for pattern, quote in zip(patterns, quotes):
            word = _text(pattern)
            if word and quote is not QUOTED and all(
                char == "*" and _is_raw(quote, index) for index, char in enumerate(word)
            ):
                return True
        return False
    words = [_text(subject) for subject in subjects]
    return any(
        match(word, _text(pattern), quote)
        for pattern, quote in zip(patterns, quotes)
        for word in words
    )


def _extract(
    subject: str, si: int, pattern: str, pi: int, quote: Quote, found: list[str]
) -> list[str]:
    while pi < len(pattern):
        if _is_quoted(quote, pi):
            pi += 1
        else:
            char = pattern[pi]
            pi += 1
            if char == "*":
                if pi >= len(pattern):
                    found.append(subject[si:])
                    return found
                begin = si
                while not _match(subject, si, pattern, pi, quote):
                    si += 1
                found.append(subject[begin:si])
                if _has_wild(pattern, quote, pi):
                    return _extract(subject, si, pattern, pi, quote, found)
                return found
            if char == "[":
                length = _range_match(pattern, pi, quote, subject[si])
                if length != _RANGE_ERROR:
                    pi += length
                    found.append(subject[si])
            elif char == "?":
                found.append(subject[si])
        si += 1
    return found


def _extract_single(subject: str, pattern: str, quote: Quote) -> Optional[list[str]]:
    if not has_wild(pattern, quote) or not match(subject, pattern, quote):
        return None
    return _extract(subject, 0, pattern, 0, quote, [])


def extract_matches(
    subjects: Iterable[Word], patterns: Sequence[Word], quotes: Sequence[Quote]
) -> list[Term]:
    """The wildcarded parts of each subject matched by the first pattern that fits."""
    if len(quotes) < len(patterns):
        raise ValueError("every pattern needs its quoting")
    result: list[Term] = []
    for subject in subjects:
        word = _text(subject)
        for pattern, quote in zip(patterns, quotes):
            parts = _extract_single(word, _text(pattern), quote)
            if parts:
                result.extend(mkstr(part) for part in parts)
                break
    return result