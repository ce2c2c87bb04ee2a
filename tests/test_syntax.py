import pytest

from esshell.syntax import (
    ERROR_NODE,
    PLACEHOLDER,
    ParseError,
    backquote,
    firstprepend,
    flatten,
    fnassign,
    mkclose,
    mkdup,
    mklambda,
    mkmatch,
    mkpipe,
    mkredir,
    mkredircmd,
    mkseq,
    prefix,
    redirappend,
    redirect,
    treeappend,
    treecons,
    treeconsend,
    thunkify,
)
from esshell.tree import NodeKind, mk


def word(text):
    return mk(NodeKind.WORD, text)


def command(*words):
    tree = None
    for text in reversed(words):
        tree = prefix(text, tree)
    return tree


def elements(tree):
    result = []
    while tree is not None:
        assert tree.kind is NodeKind.LIST
        result.append(tree.car)
        tree = tree.cdr
    return result


def texts(tree):
    return [node.car for node in elements(tree)]


def test_treecons_without_car_returns_cdr():
    rest = command("a")
    assert treecons(None, rest) is rest


def test_treecons_of_lone_list_is_the_list():
    lst = command("a", "b")
    assert treecons(lst, None) is lst


def test_treecons_makes_cell():
    node = treecons(word("x"), None)
    assert node.kind is NodeKind.LIST
    assert node.car == word("x")
    assert node.cdr is None


def test_treecons_rejects_non_list_tail():
    with pytest.raises(ValueError):
        treecons(word("a"), word("b"))


def test_treeappend():
    head = command("a", "b")
    result = treeappend(head, command("c"))
    assert result is head
    assert texts(result) == ["a", "b", "c"]
    tail = command("z")
    assert treeappend(None, tail) is tail


def test_treeconsend():
    head = command("a")
    assert treeconsend(head, None) is head
    assert texts(treeconsend(command("a"), word("b"))) == ["a", "b"]


def test_thunkify_wraps_once():
    cmd = command("a")
    thunk = thunkify(cmd)
    assert thunk.kind is NodeKind.THUNK
    assert thunk.car is cmd
    assert thunkify(thunk) is thunk
    wrapped = treecons(thunk, None)
    assert thunkify(wrapped) is wrapped


def test_thunkify_none():
    thunk = thunkify(None)
    assert thunk.kind is NodeKind.THUNK
    assert thunk.car is None


def test_flatten():
    tree = flatten(word("x"), " ")
    assert tree.kind is NodeKind.CALL
    parts = elements(tree.car)
    assert parts[0] == word("%flatten")
    assert parts[1] == mk(NodeKind.QWORD, " ")
    assert parts[2] == word("x")


def test_backquote():
    body = mk(NodeKind.THUNK, command("ls"))
    tree = backquote(word("ifs"), body)
    assert tree.kind is NodeKind.CALL
    parts = elements(tree.car)
    assert parts[0] == word("%backquote")
    assert parts[1] == flatten(word("ifs"), "")
    assert parts[2] is body


def test_fnassign():
    defn = mk(NodeKind.THUNK, command("echo"))
    tree = fnassign(word("greet"), defn)
    assert tree.kind is NodeKind.ASSIGN
    assert tree.car == mk(NodeKind.CONCAT, word("fn-"), word("greet"))
    assert tree.cdr is defn


def test_mklambda():
    params = command("x")
    body = command("echo")
    tree = mklambda(params, body)
    assert tree.kind is NodeKind.LAMBDA
    assert tree.car is params and tree.cdr is body


def test_mkseq_drops_missing_side():
    cmd = command("a")
    assert mkseq("%seq", None, cmd) is cmd
    assert mkseq("%seq", cmd, None) is cmd


def test_mkseq_flattens():
    a, b, c = command("a"), command("b"), command("c")
    tree = mkseq("%seq", mkseq("%seq", a, b), c)
    parts = elements(tree)
    assert parts[0] == word("%seq")
    assert [part.car for part in parts[1:]] == [a, b, c]
    assert all(part.kind is NodeKind.THUNK for part in parts[1:])


def test_mkseq_right_nested_flattens():
    a, b, c = command("a"), command("b"), command("c")
    tree = mkseq("%seq", a, mkseq("%seq", b, c))
    assert [part.car for part in elements(tree)[1:]] == [a, b, c]


def test_mkseq_other_op_keeps_empty_side():
    tree = mkseq("%and", None, command("b"))
    parts = elements(tree)
    assert parts[0] == word("%and")
    assert parts[1] == thunkify(None)
    assert len(parts) == 3


def test_mkpipe():
    a, b, c = command("a"), command("b"), command("c")
    tree = mkpipe(mkpipe(a, 1, 0, b), 2, 0, c)
    parts = elements(tree)
    assert parts[0] == word("%pipe")
    assert parts[1].car is a
    assert parts[2:4] == [word("1"), word("0")]
    assert parts[4].car is b
    assert parts[5:7] == [word("2"), word("0")]
    assert parts[7].car is c


def test_mkclose_and_mkdup():
    close = elements(mkclose(2))
    assert close[:2] == [word("%close"), word("2")]
    assert close[2] is PLACEHOLDER
    dup = elements(mkdup(2, 1))
    assert dup[:3] == [word("%dup"), word("2"), word("1")]
    assert dup[3] is PLACEHOLDER


def test_mkredircmd():
    assert texts(mkredircmd("%create", 1)) == ["%create", "1"]


def test_redirect_fills_placeholder():
    echo = command("echo", "hi")
    redir = mkredir(mkredircmd("%create", 1), word("out"))
    tree = redirappend(echo, redir)
    assert tree.kind is NodeKind.REDIR
    result = redirect(tree)
    parts = elements(result)
    assert parts[:2] == [word("%create"), word("1")]
    assert parts[2] == mk(NodeKind.CALL, prefix("%one", treecons(word("out"), None)))
    assert parts[3].kind is NodeKind.THUNK
    assert parts[3].car is echo
    assert all(part is not PLACEHOLDER for part in parts)


def test_redirect_nested():
    echo = command("echo")
    first = mkredir(mkredircmd("%create", 1), word("out"))
    second = mkredir(mkredircmd("%open", 0), word("in"))
    tree = redirappend(redirappend(echo, first), second)
    result = redirect(tree)
    assert elements(result)[0] == word("%create")
    inner = elements(result)[-1].car
    inner_parts = elements(inner)
    assert inner_parts[0] == word("%open")
    assert inner_parts[-1].car is echo


def test_redirect_passes_plain_trees():
    assert redirect(None) is None
    cmd = command("ls")
    assert redirect(cmd) is cmd


def test_redirect_heredoc_queue():
    doc = mkredir(mkredircmd("%heredoc", 0), mk(NodeKind.QWORD, "EOF"))
    seen = []
    tree = redirappend(command("cat"), doc)
    result = redirect(tree, lambda r: seen.append(r) or False)
    assert result is ERROR_NODE
    assert seen == [doc]


def test_redirect_heredoc_accepted():
    doc = mkredir(mkredircmd("%heredoc", 0), mk(NodeKind.QWORD, "EOF"))
    cat = command("cat")
    result = redirect(redirappend(cat, doc), lambda r: True)
    parts = elements(result)
    assert parts[2] == mk(NodeKind.QWORD, "EOF")
    assert parts[3].car is cat


def test_mkredir_devfd():
    body = mk(NodeKind.THUNK, command("ls"))
    tree = mkredir(mkredircmd("%open", 0), body)
    assert tree.kind is NodeKind.REDIR
    (var,) = elements(tree.car)
    assert var.kind is NodeKind.VAR
    assert var.car.car.startswith("_devfd")
    parts = elements(tree.cdr)
    assert parts[0] == word("%readfrom")
    assert parts[1] is var.car
    assert parts[2] is body
    assert parts[3] is PLACEHOLDER


def test_mkredir_devfd_full_rewrite():
    body = mk(NodeKind.THUNK, command("ls"))
    devfd = mkredir(mkredircmd("%create", 1), body)
    result = redirect(redirappend(command("cat"), devfd))
    parts = elements(result)
    assert parts[0] == word("%writeto")
    wrapped = elements(parts[-1].car)
    assert wrapped[0] == word("cat")
    assert wrapped[1].kind is NodeKind.VAR


def test_mkredir_bad_devfd():
    with pytest.raises(ParseError):
        mkredir(mkredircmd("%append", 1), mk(NodeKind.THUNK, command("ls")))


def test_mkmatch_empty():
    tree = mkmatch(word("x"), None)
    assert tree.kind is NodeKind.THUNK
    assert tree.car is None


def test_mkmatch():
    pattern = word("a*")
    body = mk(NodeKind.THUNK, command("echo"))
    cases = mk(NodeKind.LIST, mk(NodeKind.LIST, pattern, body), None)
    tree = mkmatch(word("subject"), cases)
    assert tree.kind is NodeKind.LOCAL
    assign = tree.car.car
    assert assign.kind is NodeKind.ASSIGN
    assert assign.car == word("matchexpr")
    assert assign.cdr == word("subject")
    assert tree.cdr.kind is NodeKind.THUNK
    parts = elements(tree.cdr.car)
    assert parts[0] == word("if")
    test = parts[1].car
    assert test.kind is NodeKind.MATCH
    assert test.car == mk(NodeKind.VAR, word("matchexpr"))
    assert elements(test.cdr) == [pattern]
    assert parts[2] is body


def test_firstprepend():
    args = command("x")
    assert firstprepend(None, args) is args
    assert elements(firstprepend(word("f"), None)) == [word("f")]
    assert texts(firstprepend(word("f"), command("x", "y"))) == ["f", "x", "y"]


def test_firstprepend_after_redirections():
    redir = mkredir(mkredircmd("%create", 1), word("out"))
    args = redirappend(command("x"), redir)
    result = firstprepend(word("f"), args)
    assert result is args
    assert texts(result.cdr) == ["f", "x"]