"""Terms: the words of the shell, either strings or closures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass
class Closure:
    """A code fragment together with the bindings it captured."""

    tree: Any
    binding: Any = None
    text: str = ""

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Term:
    """A single word: exactly one of a string or a closure."""

    text: Optional[str] = None
    closure: Optional[Closure] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.closure is None):
            raise ValueError("a term holds exactly one of a string or a closure")

    def as_string(self) -> str:
        """The term's string form; closures are printed."""
        if self.text is not None:
            return self.text
        return str(self.closure)

    def is_closure(self) -> bool:
        return self.closure is not None

    def matches(self, text: str) -> bool:
        """True if the term is a string equal to ``text``."""
        return self.text is not None and self.text == text

    def __str__(self) -> str:
        return self.as_string()


def mkstr(text: str) -> Term:
    """Make a string term."""
    return Term(text=text)


def term_cat(first: Optional[Term], second: Optional[Term]) -> Optional[Term]:
    """Concatenate two terms; a missing term leaves the other unchanged."""
    if first is None:
        return second
    if second is None:
        return first
    return Term(text=first.as_string() + second.as_string())


def make_list(*args: Union[str, Term, Closure]) -> list[Term]:
    """Build a list of terms from strings, closures or terms."""
    result = []
    for item in args:
        if isinstance(item, Term):
            result.append(item)
        elif isinstance(item, str):
            result.append(Term(text=item))
        elif isinstance(item, Closure):
            result.append(Term(closure=item))
        else:
            raise TypeError(f"cannot make a term from {type(item).__name__}")
    return result