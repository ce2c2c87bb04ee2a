"""Formatted printing with an extensible table of conversions."""

from __future__ import annotations

import operator
import os
from typing import Any, Callable, Iterator, Optional, Union

from esshell.errors import fail
from esshell.util import strerror

FMT_LONG = 1
FMT_SHORT = 2
FMT_UNSIGNED = 4
FMT_ZEROPAD = 8
FMT_LEFTSIDE = 16
FMT_ALTFORM = 32
FMT_F1SET = 64
FMT_F2SET = 128

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_ULONG_MASK = (1 << 64) - 1


class _FormatState:
    """What a conversion sees: the flags and widths so far, the arguments, the output."""

    def __init__(self, args: tuple) -> None:
        self._args: Iterator[Any] = iter(args)
        self._out: list[str] = []
        self.flags = 0
        self.f1 = 0
        self.f2 = 0
        self.invoker = ""

    def next_arg(self) -> Any:
        try:
            return next(self._args)
        except StopIteration:
            raise ValueError("printfmt: too few arguments") from None

    def put(self, text: str) -> None:
        self._out.append(text)

    def pad(self, count: int, char: str) -> None:
        if count > 0:
            self._out.append(char * count)

    @property
    def text(self) -> str:
        return "".join(self._out)


Conversion = Callable[[_FormatState], bool]


def _flag(bit: int) -> Conversion:
    def conversion(state: _FormatState) -> bool:
        state.flags |= bit
        return True

    return conversion


def _digit(state: _FormatState) -> bool:
    value = ord(state.invoker) - ord("0")
    if state.flags & FMT_F2SET:
        state.f2 = 10 * state.f2 + value
    else:
        state.flags |= FMT_F1SET
        state.f1 = 10 * state.f1 + value
    return True


def _zero(state: _FormatState) -> bool:
    if state.flags & (FMT_F1SET | FMT_F2SET):
        return _digit(state)
    state.flags |= FMT_ZEROPAD
    return True


def _string(state: _FormatState) -> bool:
    text = str(state.next_arg())
    if not state.flags & FMT_F1SET:
        state.put(text)
        return False
    width = state.f1 - len(text)
    if state.flags & FMT_LEFTSIDE:
        state.put(text)
        state.pad(width, " ")
    else:
        state.pad(width, " ")
        state.put(text)
    return False


def _as_integer(arg: Any, long: bool) -> int:
    value = operator.index(arg)
    bits = 64 if long else 32
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _to_radix(value: int, radix: int) -> str:
    digits = []
    while True:
        value, rest = divmod(value, radix)
        digits.append(_DIGITS[rest])
        if value == 0:
            return "".join(reversed(digits))


def _integer(state: _FormatState, radix: int, altform: str) -> None:
    flags = state.flags
    value = _as_integer(state.next_arg(), bool(flags & FMT_LONG))
    prefix = ""
    if flags & FMT_UNSIGNED or value >= 0:
        magnitude = value & _ULONG_MASK
    else:
        prefix = "-"
        magnitude = -value
    if flags & FMT_ALTFORM:
        prefix += altform

    number = _to_radix(magnitude, radix)
    zeroes = state.f2 - len(number) if flags & FMT_F2SET and state.f2 > len(number) else 0
    width = len(prefix) + zeroes + len(number)
    padding = state.f1 - width if flags & FMT_F1SET and state.f1 > width else 0

    padchar = " "
    if padding > 0 and flags & FMT_ZEROPAD:
        padchar = "0"
        if not flags & FMT_LEFTSIDE:
            zeroes += padding
            padding = 0

    if not flags & FMT_LEFTSIDE:
        state.pad(padding, padchar)
    state.put(prefix)
    state.pad(zeroes, "0")
    state.put(number)
    if flags & FMT_LEFTSIDE:
        state.pad(padding, padchar)


def _int_conversion(radix: int, altform: str) -> Conversion:
    def conversion(state: _FormatState) -> bool:
        _integer(state, radix, altform)
        return False

    return conversion


def _char(state: _FormatState) -> bool:
    arg = state.next_arg()
    if isinstance(arg, str):
        if len(arg) != 1:
            raise TypeError("%c expects a single character")
        state.put(arg)
    else:
        state.put(chr(operator.index(arg) & 0xFF))
    return False


def _percent(state: _FormatState) -> bool:
    state.put("%")
    return False


def _bad(state: _FormatState) -> bool:
    raise ValueError(f"bad conversion character in printfmt: %{state.invoker}")


def _default_table() -> dict[str, Conversion]:
    table: dict[str, Conversion] = {
        "s": _string,
        "c": _char,
        "d": _int_conversion(10, ""),
        "o": _int_conversion(8, "0"),
        "x": _int_conversion(16, "0x"),
        "%": _percent,
        "u": _flag(FMT_UNSIGNED),
        "h": _flag(FMT_SHORT),
        "l": _flag(FMT_LONG),
        "#": _flag(FMT_ALTFORM),
        "-": _flag(FMT_LEFTSIDE),
        ".": _flag(FMT_F2SET),
        "0": _zero,
    }
    table.update({digit: _digit for digit in "123456789"})
    return table


class Formatter:
    """A printf-like formatter whose conversions can be replaced or extended.

    A conversion receives the formatting state and returns True when it only
    set flags or widths, or False when it produced output.
    """

    def __init__(self) -> None:
        self._table = _default_table()

    def install(
        self, char: Union[str, int], conversion: Optional[Conversion]
    ) -> Conversion:
        """Install a conversion for ``char`` and return the one it replaces.

        With ``conversion`` None the table is left unchanged.
        """
        if isinstance(char, int):
            key = chr(char & 0xFF)
        elif isinstance(char, str) and len(char) == 1:
            key = char
        else:
            raise TypeError("a conversion character must be a single character")
        old = self._table.get(key, _bad)
        if conversion is not None:
            self._table[key] = conversion
        return old

    def format(self, fmt: str, *args: Any) -> str:
        """Format the arguments according to ``fmt``."""
        state = _FormatState(args)
        chars = iter(fmt)
        for char in chars:
            if char == "\0":
                break
            if char != "%":
                state.put(char)
                continue
            state.flags = state.f1 = state.f2 = 0
            while True:
                state.invoker = next(chars, "\0")
                if not self._table.get(state.invoker, _bad)(state):
                    break
        return state.text


_DEFAULT = Formatter()


def sprint(fmt: str, *args: Any) -> str:
    """Format into a string with the standard conversions."""
    return _DEFAULT.format(fmt, *args)


def fprint(fd: int, fmt: str, *args: Any) -> int:
    """Format and write to a file descriptor; return the number of bytes written."""
    data = sprint(fmt, *args).encode("utf-8", "surrogateescape")
    view = memoryview(data)
    try:
        while view:
            written = os.write(fd, view)
            view = view[written:]
    except OSError as error:
        fail("es:fprint", f"fprint: {strerror(error.errno or 0)}")
    return len(data)