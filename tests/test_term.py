import pytest

from esshell.term import Closure, Term, make_list, mkstr, term_cat


def test_string_term():
    term = mkstr("echo")
    assert term.as_string() == "echo"
    assert not term.is_closure()
    assert term.matches("echo")
    assert not term.matches("ech")


def test_closure_term():
    closure = Closure(tree=None, text="{echo hi}")
    term = Term(closure=closure)
    assert term.is_closure()
    assert term.as_string() == "{echo hi}"
    assert not term.matches("{echo hi}")


def test_term_needs_exactly_one_form():
    with pytest.raises(ValueError):
        Term()
    with pytest.raises(ValueError):
        Term(text="a", closure=Closure(tree=None))


def test_term_cat():
    a, b = mkstr("foo"), mkstr("bar")
    assert term_cat(a, b).as_string() == "foobar"
    assert term_cat(None, b) is b
    assert term_cat(a, None) is a
    assert term_cat(None, None) is None


def test_make_list_mixed():
    closure = Closure(tree=None, text="@ x {}")
    existing = mkstr("z")
    terms = make_list("a", closure, existing)
    assert [t.as_string() for t in terms] == ["a", "@ x {}", "z"]
    assert terms[1].is_closure()
    assert terms[2] is existing


def test_make_list_rejects_other_types():
    with pytest.raises(TypeError):
        make_list(3)