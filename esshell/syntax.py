"""Rewriting rules that build the abstract syntax tree."""

from __future__ import annotations

import itertools
from typing import Callable, Optional

from esshell.tree import NodeKind, Tree, mk

ERROR_NODE = Tree(NodeKind.LIST)
"""Returned in place of a tree when a redirection cannot be completed."""

PLACEHOLDER = Tree(NodeKind.REDIR)
"""Marks where a redirection's command is put once it is known."""

_devfd_ids = itertools.count()


class ParseError(Exception):
    """A syntax error found while building a tree."""


def treecons(car: Optional[Tree], cdr: Optional[Tree]) -> Optional[Tree]:
    """Make a list cell; a missing car yields the cdr, a lone list yields itself."""
    if cdr is not None and cdr.kind is not NodeKind.LIST:
        raise ValueError("the tail of a tree list must be a list")
    if car is None:
        return cdr
    if cdr is None and car.kind is NodeKind.LIST:
        return car
    return mk(NodeKind.LIST, car, cdr)


def treeappend(head: Optional[Tree], tail: Optional[Tree]) -> Optional[Tree]:
    """Destructively append ``tail`` to the end of the list ``head``."""
    if head is None:
        return tail
    node = head
    while True:
        if node.kind not in (NodeKind.LIST, NodeKind.REDIR):
            raise ValueError("can only append to a tree list")
        if node.cdr is None:
            node.cdr = tail
            return head
        node = node.cdr


def treeconsend(head: Optional[Tree], tail: Optional[Tree]) -> Optional[Tree]:
    """Destructively add a node at the end of a list."""
    if tail is None:
        if head is not None and head.kind not in (NodeKind.LIST, NodeKind.REDIR):
            raise ValueError("can only append to a tree list")
        return head
    return treeappend(head, treecons(tail, None))


def thunkify(tree: Optional[Tree]) -> Tree:
    """Wrap a tree in thunk braces unless it already is a thunk."""
    node = tree
    while node is not None and node.kind is NodeKind.LIST and node.cdr is None:
        node = node.car
    if node is not None and node.kind is NodeKind.THUNK:
        return tree
    return mk(NodeKind.THUNK, tree)


def _firstis(tree: Optional[Tree], text: str) -> bool:
    if tree is None or tree.kind is not NodeKind.LIST:
        return False
    first = tree.car
    if first is None or first.kind is not NodeKind.WORD:
        return False
    return first.car == text


def prefix(word: str, tree: Optional[Tree]) -> Tree:
    """Put a word in front of a tree list."""
    return treecons(mk(NodeKind.WORD, word), tree)


def flatten(tree: Optional[Tree], sep: str) -> Tree:
    """A call that flattens the result of ``tree`` into one word."""
    return mk(
        NodeKind.CALL,
        prefix("%flatten", treecons(mk(NodeKind.QWORD, sep), treecons(tree, None))),
    )


def backquote(ifs: Optional[Tree], body: Optional[Tree]) -> Tree:
    """A backquote command splitting the output of ``body`` at ``ifs``."""
    return mk(
        NodeKind.CALL,
        prefix("%backquote", treecons(flatten(ifs, ""), treecons(body, None))),
    )


def fnassign(name: Optional[Tree], defn: Optional[Tree]) -> Tree:
    """Turn a function definition into an assignment to ``fn-name``."""
    return mk(NodeKind.ASSIGN, mk(NodeKind.CONCAT, mk(NodeKind.WORD, "fn-"), name), defn)


def mklambda(params: Optional[Tree], body: Optional[Tree]) -> Tree:
    """Make a lambda."""
    return mk(NodeKind.LAMBDA, params, body)


def mkseq(op: str, first: Optional[Tree], second: Optional[Tree]) -> Optional[Tree]:
    """Join two commands with ``op``, flattening nested uses of the same op."""
    if op == "%seq":
        if first is None:
            return second
        if second is None:
            return first
    sametail = _firstis(second, op)
    tail = second.cdr if sametail else treecons(thunkify(second), None)
    if _firstis(first, op):
        return treeappend(first, tail)
    first = thunkify(first)
    if sametail:
        second.cdr = treecons(first, tail)
        return second
    return prefix(op, treecons(first, tail))


def mkpipe(
    first: Optional[Tree], outfd: int, infd: int, second: Optional[Tree]
) -> Tree:
    """Assemble a pipeline from the commands that make it up."""
    pipetail = _firstis(second, "%pipe")
    tail = prefix(
        str(outfd),
        prefix(str(infd), second.cdr if pipetail else treecons(thunkify(second), None)),
    )
    if _firstis(first, "%pipe"):
        return treeappend(first, tail)
    first = thunkify(first)
    if pipetail:
        second.cdr = treecons(first, tail)
        return second
    return prefix("%pipe", treecons(first, tail))


def redirect(
    tree: Optional[Tree],
    queue_heredoc: Optional[Callable[[Tree], bool]] = None,
) -> Optional[Tree]:
    """Rewrite queued redirections so each wraps the command it applies to.

    ``queue_heredoc`` receives every here-document redirection and returns
    False if it cannot be queued, in which case ``ERROR_NODE`` is returned.
    """
    if tree is None:
        return None
    if tree.kind is not NodeKind.REDIR:
        return tree
    redir = tree.car
    rest = tree.cdr
    while redir.kind is NodeKind.REDIR:
        rest = treeappend(rest, redir.car)
        redir = redir.cdr
    slot = redir
    while slot.car is not PLACEHOLDER:
        slot = slot.cdr
        if slot is None or slot.kind is not NodeKind.LIST:
            raise ValueError("redirection has no placeholder")
    if _firstis(redir, "%heredoc"):
        if queue_heredoc is None:
            raise ParseError("here document without a queue")
        if not queue_heredoc(redir):
            return ERROR_NODE
    slot.car = thunkify(redirect(rest, queue_heredoc))
    return redir


def mkredircmd(cmd: str, fd: int) -> Tree:
    """The start of a redirection: its command and file descriptor."""
    return prefix(cmd, prefix(str(fd), None))


def mkredir(cmd: Tree, file: Optional[Tree]) -> Tree:
    """Complete a redirection with its file, leaving a placeholder for the command."""
    word = None
    if file is not None and file.kind is NodeKind.THUNK:
        if _firstis(cmd, "%open"):
            op = "%readfrom"
        elif _firstis(cmd, "%create"):
            op = "%writeto"
        else:
            raise ParseError("bad /dev/fd redirection")
        var = mk(NodeKind.WORD, f"_devfd{next(_devfd_ids)}")
        cmd = treecons(mk(NodeKind.WORD, op), treecons(var, None))
        word = treecons(mk(NodeKind.VAR, var), None)
    elif not _firstis(cmd, "%heredoc") and not _firstis(cmd, "%here"):
        file = mk(NodeKind.CALL, prefix("%one", treecons(file, None)))
    cmd = treeappend(cmd, treecons(file, treecons(PLACEHOLDER, None)))
    if word is not None:
        cmd = mk(NodeKind.REDIR, word, cmd)
    return cmd


def mkclose(fd: int) -> Tree:
    """A ``%close`` redirection with a placeholder."""
    return prefix("%close", prefix(str(fd), treecons(PLACEHOLDER, None)))


def mkdup(fd0: int, fd1: int) -> Tree:
    """A ``%dup`` redirection with a placeholder."""
    return prefix(
        "%dup", prefix(str(fd0), prefix(str(fd1), treecons(PLACEHOLDER, None)))
    )


def _skip_redirs(tree: Optional[Tree]) -> tuple[Optional[Tree], Optional[Tree]]:
    """The last redirection node heading ``tree`` and what follows it."""
    last = None
    node = tree
    while node is not None and node.kind is NodeKind.REDIR:
        last = node
        node = node.cdr
    if node is not None and node.kind is not NodeKind.LIST:
        raise ValueError("expected a tree list after redirections")
    return last, node


def redirappend(tree: Optional[Tree], redir: Tree) -> Tree:
    """Add a redirection after any others but before the command's words."""
    while redir.kind is NodeKind.REDIR:
        tree = treeappend(tree, redir.car)
        redir = redir.cdr
    if redir.kind is not NodeKind.LIST:
        raise ValueError("a redirection must be a tree list")
    last, rest = _skip_redirs(tree)
    node = mk(NodeKind.REDIR, redir, rest)
    if last is None:
        return node
    last.cdr = node
    return tree


def mkmatch(subject: Optional[Tree], cases: Optional[Tree]) -> Tree:
    """Rewrite a match into assignments and ``~`` tests inside an ``if``."""
    varname = "matchexpr"
    if cases is None:
        return thunkify(None)
    sass = treecons(mk(NodeKind.ASSIGN, mk(NodeKind.WORD, varname), subject), None)
    svar = mk(NodeKind.VAR, mk(NodeKind.WORD, varname))
    matches = None
    while cases is not None:
        pattlist = cases.car.car
        cmd = cases.car.cdr
        if pattlist is not None and pattlist.kind is not NodeKind.LIST:
            pattlist = treecons(pattlist, None)
        entry = treecons(
            thunkify(mk(NodeKind.MATCH, svar, pattlist)), treecons(cmd, None)
        )
        matches = treeappend(matches, entry)
        cases = cases.cdr
    matches = thunkify(prefix("if", matches))
    return mk(NodeKind.LOCAL, sass, matches)


def firstprepend(first: Optional[Tree], args: Optional[Tree]) -> Optional[Tree]:
    """Put a command word before its arguments but after any redirections."""
    if first is None:
        return args
    last, rest = _skip_redirs(args)
    cell = treecons(first, rest)
    if last is None:
        return cell
    last.cdr = cell
    return args