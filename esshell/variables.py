"""Shell variables: global definitions, lexical bindings and the exported environment."""

from __future__ import annotations

import contextlib
import enum
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Mapping, Optional, Union

from esshell.errors import fail
from esshell.term import Term, mkstr

ENV_SEPARATOR = "\x0f"
"""Separates the words of a list in an exported environment string."""

ENV_ESCAPE = "\x0e"
"""Escapes a literal separator or escape character in an environment string."""

Evaluator = Callable[[list[Term]], Iterable[Term]]
Word = Union[Term, str]


class _Flags(enum.IntFlag):
    NONE = 0
    HAS_BINDINGS = 1
    INTERNAL = 2


@dataclass
class _Var:
    defn: list[Term]
    flags: _Flags = _Flags.NONE
    env: Optional[str] = None


@dataclass
class Binding:
    """A lexical binding of a name, chained to the bindings around it."""

    name: str
    defn: list[Term] = field(default_factory=list)
    next: Optional["Binding"] = None

    def __iter__(self) -> Iterator["Binding"]:
        node: Optional[Binding] = self
        while node is not None:
            yield node
            node = node.next


def _is_special(name: str) -> bool:
    return name in ("*", "0")


def _is_counting(name: str) -> bool:
    digits = name.lstrip("0")
    return bool(digits) and all(char in "0123456789" for char in digits)


def _has_bindings(defn: Iterable[Term]) -> bool:
    return any(
        term.is_closure() and term.closure.binding is not None for term in defn
    )


def _flags_for(defn: list[Term]) -> _Flags:
    return _Flags.HAS_BINDINGS if _has_bindings(defn) else _Flags.NONE


def _text(word: Word) -> str:
    return word if isinstance(word, str) else word.as_string()


def _encode_env(defn: Iterable[Term]) -> str:
    return ENV_SEPARATOR.join(
        term.as_string()
        .replace(ENV_ESCAPE, ENV_ESCAPE + ENV_ESCAPE)
        .replace(ENV_SEPARATOR, ENV_ESCAPE + ENV_SEPARATOR)
        for term in defn
    )


def _decode_env(value: str) -> list[str]:
    words: list[str] = []
    current: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if (
            char == ENV_ESCAPE
            and index + 1 < len(value)
            and value[index + 1] in (ENV_SEPARATOR, ENV_ESCAPE)
        ):
            current.append(value[index + 1])
            index += 2
            continue
        if char == ENV_SEPARATOR:
            words.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    words.append("".join(current))
    return words


def validate_var(name: str) -> None:
    """Raise an error if ``name`` cannot be a variable name."""
    if not name:
        fail("es:var", "zero-length variable name")
    if _is_counting(name):
        fail("es:var", f"illegal variable name: {name}")
    if "=" in name:
        fail("es:var", f"'=' in variable name: {name}")


class Variables:
    """The table of global variables.

    ``evaluate`` runs a command given as a list of terms; it is used to call
    settor functions (``set-name``) whenever a variable is assigned.  Without
    it, settors are not run.
    """

    def __init__(self, evaluate: Optional[Evaluator] = None) -> None:
        self._vars: dict[str, _Var] = {}
        self._noexport: Optional[frozenset[str]] = None
        self._evaluate = evaluate
        self._base_env: list[str] = []
        self._env_cache: Optional[list[str]] = None

    def _is_exported(self, name: str) -> bool:
        if _is_special(name):
            return False
        return self._noexport is None or name not in self._noexport

    def lookup(self, name: str, binding: Optional[Binding] = None) -> list[Term]:
        """The definition of ``name``; numeric names index ``$*``."""
        if _is_counting(name):
            args = self.lookup("*", binding)
            index = int(name, 10)
            return [args[index - 1]] if index <= len(args) else []
        validate_var(name)
        for bound in binding or ():
            if bound.name == name:
                return list(bound.defn)
        var = self._vars.get(name)
        return list(var.defn) if var is not None else []

    def lookup2(
        self, first: str, second: str, binding: Optional[Binding] = None
    ) -> list[Term]:
        """The definition of the name made by joining ``first`` and ``second``."""
        name = first + second
        for bound in binding or ():
            if bound.name == name:
                return list(bound.defn)
        var = self._vars.get(name)
        return list(var.defn) if var is not None else []

    def _call_settor(self, name: str, defn: list[Term]) -> list[Term]:
        if _is_special(name) or self._evaluate is None:
            return defn
        settor = self.lookup2("set-", name)
        if not settor:
            return defn
        with self.push("0", [mkstr(name)]):
            return list(self._evaluate(settor + list(defn)))

    def _define(
        self,
        name: str,
        defn: list[Term],
        binding: Optional[Binding],
        startup: bool,
    ) -> None:
        validate_var(name)
        for bound in binding or ():
            if bound.name == name:
                bound.defn = list(defn)
                self._env_cache = None
                return
        if not startup:
            defn = self._call_settor(name, defn)
        self._env_cache = None
        var = self._vars.get(name)
        if defn:
            if var is None:
                self._vars[name] = _Var(list(defn), _flags_for(defn))
            else:
                var.defn = list(defn)
                var.env = None
                var.flags = _flags_for(defn)
        elif var is not None:
            del self._vars[name]

    def define(
        self, name: str, defn: Iterable[Term], binding: Optional[Binding] = None
    ) -> None:
        """Assign to ``name``; an empty definition removes a global variable."""
        self._define(name, list(defn), binding, startup=False)

    @contextlib.contextmanager
    def push(self, name: str, defn: Iterable[Term]) -> Iterator[None]:
        """Give ``name`` a new value for the duration of the block."""
        validate_var(name)
        self._env_cache = None
        new_defn = self._call_settor(name, list(defn))
        var = self._vars.get(name)
        if var is None:
            saved_defn: list[Term] = []
            saved_flags = _Flags.NONE
            self._vars[name] = _Var(new_defn, _flags_for(new_defn))
        else:
            saved_defn, saved_flags = var.defn, var.flags
            var.defn = new_defn
            var.env = None
            var.flags = _flags_for(new_defn)
        try:
            yield
        finally:
            self._env_cache = None
            error: Optional[Exception] = None
            try:
                saved_defn = self._call_settor(name, saved_defn)
            except Exception as caught:  # restore first, then report
                error = caught
            var = self._vars.get(name)
            if var is not None:
                if saved_defn:
                    var.defn = saved_defn
                    var.flags = saved_flags
                    var.env = None
                else:
                    del self._vars[name]
            elif saved_defn:
                self._vars[name] = _Var(saved_defn, saved_flags)
            if error is not None:
                raise error

    def set_noexport(self, names: Iterable[Word]) -> None:
        """Mark the named variables as not exported; an empty list exports all."""
        self._env_cache = None
        chosen = frozenset(_text(name) for name in names)
        self._noexport = chosen or None

    def environment(self) -> list[str]:
        """The sorted ``name=value`` strings of every exported variable."""
        if self._env_cache is None:
            entries = list(self._base_env)
            for name, var in self._vars.items():
                if (
                    not var.defn
                    or var.flags & _Flags.INTERNAL
                    or not self._is_exported(name)
                ):
                    continue
                if var.env is None or var.flags & _Flags.HAS_BINDINGS:
                    var.env = f"{name}={_encode_env(var.defn)}"
                entries.append(var.env)
            self._env_cache = sorted(entries)
        return list(self._env_cache)

    def list_vars(self, internal: bool = False) -> list[Term]:
        """The sorted names of the internal or of the ordinary variables."""
        if internal:
            names = (
                name for name, var in self._vars.items() if var.flags & _Flags.INTERNAL
            )
        else:
            names = (
                name
                for name, var in self._vars.items()
                if not var.flags & _Flags.INTERNAL and not _is_special(name)
            )
        return [mkstr(name) for name in sorted(names)]

    def with_prefix(self, prefix: str) -> list[Term]:
        """The sorted names of the variables that start with ``prefix``."""
        return [mkstr(name) for name in sorted(self._vars) if name.startswith(prefix)]

    def hide(self) -> None:
        """Mark every variable defined so far as internal."""
        for var in self._vars.values():
            var.flags |= _Flags.INTERNAL

    def import_environment(
        self,
        environ: Union[Mapping[str, str], Iterable[str]],
        protected: bool = False,
    ) -> None:
        """Define variables from environment strings.

        With ``protected``, functions and settors (``fn-`` and ``set-``) are
        not imported.  Strings without ``=`` are passed on unchanged.
        """
        if isinstance(environ, Mapping):
            entries = [f"{key}={value}" for key, value in environ.items()]
        else:
            entries = list(environ)
        imported: list[str] = []
        for entry in entries:
            name, equals, value = entry.partition("=")
            if not equals:
                self._base_env.append(entry)
                continue
            if not protected or not name.startswith(("fn-", "set-")):
                words = [mkstr(word) for word in _decode_env(value)]
                self._define(name, words, None, startup=True)
                imported.append(name)
        self._env_cache = None
        for name in sorted(imported):
            if _is_special(name) or not self.lookup2("set-", name):
                continue
            var = self._vars.get(name)
            if var is not None:
                var.defn = self._call_settor(name, var.defn)
                var.env = None