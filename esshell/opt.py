"""Parsing of options given to primitives."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from esshell.errors import fail
from esshell.term import Term, mkstr


class OptionParser:
    """Reads single-letter options from the front of an argument list.

    ``next_option`` returns each option letter in turn and None when the
    options end.  A letter followed by ``:`` in the option string takes an
    argument, fetched with ``argument``.  With ``throws`` false, an unknown
    option yields ``?`` and a missing argument ``:`` instead of an error.
    """

    def __init__(
        self,
        args: Iterable[Union[Term, str]],
        caller: str,
        usage: str,
        throws: bool = True,
    ) -> None:
        self._args = [mkstr(arg) if isinstance(arg, str) else arg for arg in args]
        self._pos = 0
        self._nextchar = 0
        self._caller = caller
        self._usage: Optional[str] = usage
        self._throws = throws
        self._argument: Optional[Term] = None

    def next_option(self, options: str) -> Optional[str]:
        """The next option letter, or None when there are no more options."""
        if self._argument is not None:
            raise RuntimeError("the previous option's argument was not taken")
        if self._nextchar == 0:
            if self._pos >= len(self._args):
                return None
            arg = self._args[self._pos].as_string()
            if not arg.startswith("-") or arg == "-":
                return None
            if arg == "--":
                self._pos += 1
                return None
            self._nextchar = 1
        else:
            arg = self._args[self._pos].as_string()

        char = arg[self._nextchar]
        self._nextchar += 1
        where = options.find(char)
        if char == ":" or where < 0:
            usage = self._usage
            self._usage = None
            self._pos = len(self._args)
            self._nextchar = 0
            if self._throws:
                fail(self._caller, f"illegal option: -{char} -- usage: {usage}")
            return "?"

        if self._nextchar >= len(arg):
            self._nextchar = 0
            self._pos += 1

        if options[where + 1 : where + 2] == ":":
            if self._pos >= len(self._args):
                if self._throws:
                    fail(
                        self._caller,
                        f"option -{char} expects an argument -- usage: {self._usage}",
                    )
                return ":"
            if self._nextchar == 0:
                self._argument = self._args[self._pos]
            else:
                self._argument = mkstr(arg[self._nextchar :])
            self._nextchar = 0
            self._pos += 1
        return char

    def argument(self) -> Term:
        """The argument of the option just returned."""
        if self._argument is None:
            raise RuntimeError("no option argument is pending")
        argument, self._argument = self._argument, None
        return argument

    def remaining(self) -> list[Term]:
        """The arguments after the options; the parser is then finished."""
        result = self._args[self._pos :]
        self._args = []
        self._pos = 0
        self._nextchar = 0
        self._usage = None
        return result