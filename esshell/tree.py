"""Parse-tree nodes."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional


class NodeKind(enum.Enum):
    """The kinds of parse-tree node."""

    ASSIGN = enum.auto()
    CALL = enum.auto()
    CLOSURE = enum.auto()
    CONCAT = enum.auto()
    FOR = enum.auto()
    LAMBDA = enum.auto()
    LET = enum.auto()
    LIST = enum.auto()
    LOCAL = enum.auto()
    MATCH = enum.auto()
    EXTRACT = enum.auto()
    PRIM = enum.auto()
    QWORD = enum.auto()
    THUNK = enum.auto()
    VAR = enum.auto()
    VARSUB = enum.auto()
    WORD = enum.auto()
    REDIR = enum.auto()  # only during construction
    PIPE = enum.auto()  # only during construction


_STRING_KINDS = frozenset({NodeKind.WORD, NodeKind.QWORD, NodeKind.PRIM})
_ONE_TREE_KINDS = frozenset({NodeKind.CALL, NodeKind.THUNK, NodeKind.VAR})
_TWO_TREE_KINDS = frozenset(
    {
        NodeKind.ASSIGN,
        NodeKind.CONCAT,
        NodeKind.CLOSURE,
        NodeKind.FOR,
        NodeKind.LAMBDA,
        NodeKind.LET,
        NodeKind.LIST,
        NodeKind.LOCAL,
        NodeKind.VARSUB,
        NodeKind.MATCH,
        NodeKind.EXTRACT,
        NodeKind.REDIR,
    }
)


@dataclass
class Tree:
    """A node: ``car`` holds the string of word nodes, a subtree, or an fd;
    ``cdr`` holds the second subtree or fd of two-slot nodes."""

    kind: NodeKind
    car: Any = None
    cdr: Any = None


def _check_tree(value: Any) -> Optional[Tree]:
    if value is not None and not isinstance(value, Tree):
        raise TypeError(f"expected a tree, not {type(value).__name__}")
    return value


def mk(kind: NodeKind, *args: Any) -> Tree:
    """Make a node of ``kind`` from the arguments that kind takes."""
    if not isinstance(kind, NodeKind):
        raise ValueError(f"mk: bad node kind {kind!r}")
    expected = 1 if kind in _STRING_KINDS or kind in _ONE_TREE_KINDS else 2
    if len(args) != expected:
        raise TypeError(
            f"mk: {kind.name.lower()} takes {expected} argument(s), got {len(args)}"
        )
    if kind in _STRING_KINDS:
        (text,) = args
        if not isinstance(text, str):
            raise TypeError(f"mk: {kind.name.lower()} needs a string")
        return Tree(kind, text)
    if kind in _ONE_TREE_KINDS:
        return Tree(kind, _check_tree(args[0]))
    if kind is NodeKind.PIPE:
        outfd, infd = args
        if not isinstance(outfd, int) or not isinstance(infd, int):
            raise TypeError("mk: pipe needs two file descriptors")
        return Tree(kind, outfd, infd)
    return Tree(kind, _check_tree(args[0]), _check_tree(args[1]))