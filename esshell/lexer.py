"""The lexical analyser: turns shell input into tokens."""

from __future__ import annotations

import enum
import string
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Union

from esshell.syntax import mkclose, mkdup, mkredircmd
from esshell.tree import NodeKind, mk

_CLOSED = -1
_DEFAULT = -2

_NONWORD = frozenset("\0\t\n !#$&'();<=>\\^`{|}")
_VARWORD = frozenset("%*-_" + string.ascii_letters + string.digits)

_KEYWORDS_BY_NAME = {
    "fn": "FN",
    "for": "FOR",
    "local": "LOCAL",
    "let": "LET",
    "~~": "EXTRACT",
    "%closure": "CLOSURE",
    "match": "MATCH",
}

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "e": "\033",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class TokenKind(enum.Enum):
    """The kinds of token."""

    WORD = enum.auto()
    QWORD = enum.auto()
    CHAR = enum.auto()
    NL = enum.auto()
    ENDFILE = enum.auto()
    ERROR = enum.auto()
    FN = enum.auto()
    FOR = enum.auto()
    LOCAL = enum.auto()
    LET = enum.auto()
    EXTRACT = enum.auto()
    CLOSURE = enum.auto()
    MATCH = enum.auto()
    BACKBACK = enum.auto()
    BBFLAT = enum.auto()
    BFLAT = enum.auto()
    COUNT = enum.auto()
    FLAT = enum.auto()
    PRIM = enum.auto()
    SUB = enum.auto()
    ANDAND = enum.auto()
    OROR = enum.auto()
    PIPE = enum.auto()
    DUP = enum.auto()
    REDIR = enum.auto()
    CALL = enum.auto()


@dataclass(frozen=True)
class Token:
    """A token; ``value`` holds its text, character, tree or error message."""

    kind: TokenKind
    value: Any = None


class _State(enum.Enum):
    NONWORD = enum.auto()
    REALWORD = enum.auto()
    KEYWORD = enum.auto()


def _plain_meta(char: str) -> bool:
    return char in _NONWORD


def _variable_meta(char: str) -> bool:
    return char not in _VARWORD


def _isdigit(char: Optional[str]) -> bool:
    return char is not None and "0" <= char <= "9"


class Lexer:
    """Splits shell source into tokens.

    ``on_continuation`` is called whenever a continuation line starts, where
    an interactive shell would print its secondary prompt.
    """

    def __init__(
        self, text: str, on_continuation: Optional[Callable[[], None]] = None
    ) -> None:
        self._text = text
        self._pos = 0
        self._pushback: list[Optional[str]] = []
        self._state = _State.NONWORD
        self._newline = False
        self._goterror = False
        self._dollar = False
        self._on_continuation = on_continuation
        self.lineno = 1
        self.errors: list[str] = []

    def _getc(self) -> Optional[str]:
        if self._pushback:
            return self._pushback.pop()
        if self._pos < len(self._text):
            char = self._text[self._pos]
            self._pos += 1
            return char
        return None

    def _ungetc(self, char: Optional[str]) -> None:
        self._pushback.append(char)

    def _continuation(self) -> None:
        self.lineno += 1
        if self._on_continuation is not None:
            self._on_continuation()

    def _scan_error(self, char: Optional[str], message: str) -> Token:
        while char not in ("\n", None):
            char = self._getc()
        self._goterror = True
        self.errors.append(message)
        return Token(TokenKind.ERROR, message)

    def _free_caret(self, char: Optional[str]) -> Optional[Token]:
        if self._state is not _State.NONWORD:
            self._state = _State.NONWORD
            self._ungetc(char)
            return Token(TokenKind.CHAR, "^")
        return None

    def next_token(self) -> Token:
        """Read and return the next token."""
        if self._goterror:
            self._goterror = False
            return Token(TokenKind.NL)
        meta = _variable_meta if self._dollar else _plain_meta
        self._dollar = False
        if self._newline:
            self.lineno -= 1
            self._continuation()
            self._newline = False
        while True:
            char = self._getc()
            while char in (" ", "\t"):
                self._state = _State.NONWORD
                char = self._getc()
            if char is None:
                return Token(TokenKind.ENDFILE)
            if not meta(char):
                return self._word(char, meta)
            if char == "\\":
                following = self._getc()
                if following == "\n":
                    self._continuation()
                    self._ungetc(" ")
                    continue
                return self._escape(following)
            return self._special(char)

    def _word(self, char: str, meta: Callable[[str], bool]) -> Token:
        caret = self._free_caret(char)
        if caret is not None:
            return caret
        self._state = _State.REALWORD
        chars = [char]
        while True:
            char = self._getc()
            if char is None or meta(char):
                break
            chars.append(char)
        self._ungetc(char)
        word = "".join(chars)
        self._state = _State.KEYWORD
        if len(word) == 1:
            if word in ("@", "~"):
                return Token(TokenKind.CHAR, word)
        elif word in _KEYWORDS_BY_NAME:
            return Token(TokenKind[_KEYWORDS_BY_NAME[word]])
        self._state = _State.REALWORD
        return Token(TokenKind.WORD, word)

    def _escape(self, char: Optional[str]) -> Token:
        if char is None:
            self._ungetc(None)
            return self._scan_error(None, "bad backslash escape")
        self._ungetc(char)
        caret = self._free_caret("\\")
        if caret is not None:
            return caret
        self._state = _State.REALWORD
        char = self._getc()
        if char in _ESCAPES:
            value = _ESCAPES[char]
        elif char in ("x", "X"):
            number = 0
            while True:
                char = self._getc()
                if char is None or char not in string.hexdigits:
                    break
                number = (number << 4) | int(char, 16)
            if number == 0:
                return self._scan_error(char, "bad backslash escape")
            self._ungetc(char)
            value = chr(number & 0xFF)
        elif char in "01234567":
            number = 0
            while char is not None and char in "01234567":
                number = (number << 3) | int(char)
                char = self._getc()
            if number == 0:
                return self._scan_error(char, "bad backslash escape")
            self._ungetc(char)
            value = chr(number & 0xFF)
        elif char.isascii() and char.isalnum():
            return self._scan_error(char, "bad backslash escape")
        else:
            value = char
        return Token(TokenKind.QWORD, value)

    def _quoted(self) -> Token:
        self._state = _State.REALWORD
        chars = []
        while True:
            char = self._getc()
            if char == "'":
                char = self._getc()
                if char != "'":
                    break
            if char is None:
                self._state = _State.NONWORD
                return self._scan_error(None, "eof in quoted string")
            chars.append(char)
            if char == "\n":
                self._continuation()
        self._ungetc(char)
        return Token(TokenKind.QWORD, "".join(chars))

    def _number(self, first: str) -> tuple[int, Optional[str]]:
        digits = [first]
        char = self._getc()
        while _isdigit(char):
            digits.append(char)
            char = self._getc()
        return int("".join(digits)), char

    def _getfds(
        self, char: Optional[str], default0: int, default1: int
    ) -> Union[tuple[int, int], Token]:
        if char != "[":
            self._ungetc(char)
            return default0, default1
        char = self._getc()
        if not _isdigit(char):
            return self._scan_error(char, "expected digit after '['")
        fd0, char = self._number(char)
        if char == "=":
            char = self._getc()
            if not _isdigit(char):
                if char != "]":
                    return self._scan_error(char, "expected digit or ']' after '='")
                return fd0, _CLOSED
            fd1, char = self._number(char)
            if char != "]":
                return self._scan_error(char, "expected ']' after digit")
            return fd0, fd1
        if char == "]":
            return fd0, default1
        return self._scan_error(char, "expected '=' or ']' after digit")

    def _special(self, char: str) -> Token:
        if char in "`!$'=":
            caret = self._free_caret(char)
            if caret is not None:
                return caret
            if char in "!=":
                self._state = _State.KEYWORD
        if char in "!=":
            return Token(TokenKind.CHAR, char)
        if char == "`":
            char = self._getc()
            if char == "`":
                char = self._getc()
                if char == "^":
                    return Token(TokenKind.BBFLAT)
                self._ungetc(char)
                return Token(TokenKind.BACKBACK)
            if char == "^":
                return Token(TokenKind.BFLAT)
            self._ungetc(char)
            return Token(TokenKind.CHAR, "`")
        if char == "$":
            self._dollar = True
            char = self._getc()
            kinds = {"#": TokenKind.COUNT, "^": TokenKind.FLAT, "&": TokenKind.PRIM}
            if char in kinds:
                return Token(kinds[char])
            self._ungetc(char)
            return Token(TokenKind.CHAR, "$")
        if char == "'":
            return self._quoted()
        if char == "#":
            while char != "\n":
                char = self._getc()
                if char is None:
                    return Token(TokenKind.ENDFILE)
        if char == "\n":
            self.lineno += 1
            self._newline = True
            self._state = _State.NONWORD
            return Token(TokenKind.NL)
        if char == "(":
            kind = TokenKind.SUB if self._state is _State.REALWORD else TokenKind.CHAR
            self._state = _State.NONWORD
            return Token(kind, "(")
        if char in ";^){}":
            self._state = _State.NONWORD
            return Token(TokenKind.CHAR, char)
        if char == "&":
            self._state = _State.NONWORD
            char = self._getc()
            if char == "&":
                return Token(TokenKind.ANDAND)
            self._ungetc(char)
            return Token(TokenKind.CHAR, "&")
        if char == "|":
            return self._pipe()
        if char in "<>":
            return self._redirection(char)
        self._state = _State.NONWORD
        return Token(TokenKind.CHAR, char)

    def _pipe(self) -> Token:
        self._state = _State.NONWORD
        char = self._getc()
        if char == "|":
            return Token(TokenKind.OROR)
        fds = self._getfds(char, 1, 0)
        if isinstance(fds, Token):
            return fds
        if fds[1] == _CLOSED:
            return self._scan_error(char, "expected digit after '='")
        return Token(TokenKind.PIPE, mk(NodeKind.PIPE, fds[0], fds[1]))

    def _redirection(self, char: str) -> Token:
        if char == "<":
            fd = 0
            char = self._getc()
            if char == ">":
                char = self._getc()
                if char == ">":
                    char = self._getc()
                    cmd = "%open-append"
                else:
                    cmd = "%open-write"
            elif char == "<":
                char = self._getc()
                if char == "<":
                    char = self._getc()
                    cmd = "%here"
                else:
                    cmd = "%heredoc"
            elif char == "=":
                return Token(TokenKind.CALL)
            else:
                cmd = "%open"
        else:
            fd = 1
            char = self._getc()
            if char == ">":
                char = self._getc()
                if char == "<":
                    char = self._getc()
                    cmd = "%open-append"
                else:
                    cmd = "%append"
            elif char == "<":
                char = self._getc()
                cmd = "%open-create"
            else:
                cmd = "%create"
        self._state = _State.NONWORD
        fds = self._getfds(char, fd, _DEFAULT)
        if isinstance(fds, Token):
            return fds
        fd0, fd1 = fds
        if fd1 != _DEFAULT:
            tree = mkclose(fd0) if fd1 == _CLOSED else mkdup(fd0, fd1)
            return Token(TokenKind.DUP, tree)
        return Token(TokenKind.REDIR, mkredircmd(cmd, fd0))

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.ENDFILE:
                return


def tokenize(text: str) -> list[Token]:
    """All the tokens of ``text``, ending with ``ENDFILE``."""
    return list(Lexer(text))