"""Exit statuses: truth of status lists and process wait statuses."""

from __future__ import annotations

import re
import signal
from typing import Iterable, Optional, Union

from esshell.term import Term

_INTEGER = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


def _parse_integer(text: str) -> tuple[int, str]:
    """Parse a leading C-style integer; return its value and what follows."""
    found = _INTEGER.match(text)
    if found is None:
        return 0, text
    sign, digits = found.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif len(digits) > 1:
        value = int(digits, 8)
    else:
        value = int(digits)
    return (-value if sign == "-" else value), text[found.end():]


def _word(item: Union[Term, str]) -> Optional[str]:
    """The string of a status word, or None if it is a closure."""
    if isinstance(item, str):
        return item
    return None if item.is_closure() else item.text


def is_true(status: Optional[Iterable[Union[Term, str]]]) -> bool:
    """A status list is true if every word is empty or ``0``."""
    for item in status or ():
        word = _word(item)
        if word is None or word not in ("", "0"):
            return False
    return True


def exit_status(status: Optional[list]) -> int:
    """Turn a status list into a process exit code."""
    if not status:
        return 0
    if len(status) > 1:
        return 0 if is_true(status) else 1
    word = _word(status[0])
    if word is None:
        return 1
    if word == "":
        return 0
    value, rest = _parse_integer(word)
    if rest or not 0 <= value <= 255:
        return 1
    return value


def _termsig(status: int) -> int:
    return status & 0x7F


def _signaled(status: int) -> bool:
    sig = _termsig(status)
    return sig != 0 and sig != 0x7F


def _core_dumped(status: int) -> bool:
    return bool(status & 0x80)


def _signame(sig: int) -> str:
    try:
        return signal.Signals(sig).name.lower()
    except ValueError:
        return f"sig{sig}"


def _sigmessage(sig: int) -> str:
    try:
        message = signal.strsignal(sig)
    except ValueError:
        message = None
    return message if message is not None else f"unknown signal {sig}"


def make_status(status: int) -> str:
    """Turn a wait status into its status word."""
    if _signaled(status):
        name = _signame(_termsig(status))
        return f"{name}+core" if _core_dumped(status) else name
    return str((status >> 8) & 0xFF)


def status_message(pid: int, status: int) -> Optional[str]:
    """The line to report for a wait status, or None if there is nothing to say."""
    if not _signaled(status):
        return None
    message = _sigmessage(_termsig(status))
    tail = ""
    if _core_dumped(status):
        tail = "--core dumped" if message else "core dumped"
    if not message and not tail:
        return None
    if pid == 0:
        return f"{message}{tail}"
    return f"{pid}: {message}{tail}"