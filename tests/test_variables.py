import pytest

from esshell.errors import EsError
from esshell.term import make_list, mkstr
from esshell.variables import (
    ENV_ESCAPE,
    ENV_SEPARATOR,
    Binding,
    Variables,
    validate_var,
)


def words(terms):
    return [term.as_string() for term in terms]


def test_define_and_lookup():
    vs = Variables()
    vs.define("x", make_list("a", "b"))
    assert words(vs.lookup("x")) == ["a", "b"]


def test_empty_definition_removes_variable():
    vs = Variables()
    vs.define("x", make_list("a"))
    vs.define("x", [])
    assert vs.lookup("x") == []
    assert words(vs.list_vars()) == []


def test_counting_names_index_star():
    vs = Variables()
    vs.define("*", make_list("first", "second"))
    assert words(vs.lookup("2")) == ["second"]
    assert words(vs.lookup("02")) == ["second"]
    assert vs.lookup("3") == []


@pytest.mark.parametrize("name", ["", "12", "007", "a=b"])
def test_invalid_names(name):
    with pytest.raises(EsError) as info:
        validate_var(name)
    assert info.value.kind == "error"
    assert info.value.arguments[0] == "es:var"


def test_zero_length_message():
    with pytest.raises(EsError) as info:
        validate_var("")
    assert info.value.arguments[1] == "zero-length variable name"


def test_binding_shadows_and_is_assigned():
    vs = Variables()
    vs.define("x", make_list("global"))
    inner = Binding("x", make_list("local"))
    assert words(vs.lookup("x", inner)) == ["local"]
    vs.define("x", make_list("changed"), inner)
    assert words(inner.defn) == ["changed"]
    assert words(vs.lookup("x")) == ["global"]


def test_lookup2_joins_names():
    vs = Variables()
    vs.define("fn-ls", make_list("body"))
    assert words(vs.lookup2("fn-", "ls")) == ["body"]
    outer = Binding("fn-cd", make_list("bound"))
    assert words(vs.lookup2("fn-", "cd", outer)) == ["bound"]


def test_push_restores_value():
    vs = Variables()
    vs.define("x", make_list("old"))
    with vs.push("x", make_list("new")):
        assert words(vs.lookup("x")) == ["new"]
    assert words(vs.lookup("x")) == ["old"]


def test_push_restores_after_exception_and_removes_new_variable():
    vs = Variables()
    with pytest.raises(RuntimeError):
        with vs.push("y", make_list("temp")):
            raise RuntimeError("boom")
    assert vs.lookup("y") == []
    assert "y" not in words(vs.list_vars())


def test_settor_sees_name_in_zero():
    seen = []
    vs = Variables()

    def evaluate(command):
        seen.append(words(vs.lookup("0")))
        return [mkstr(term.as_string().upper()) for term in command[1:]]

    vs = Variables(evaluate=evaluate)
    vs.define("set-path", make_list("settor"))
    vs.define("path", make_list("a", "b"))
    assert words(vs.lookup("path")) == ["A", "B"]
    assert seen == [["path"]]
    assert vs.lookup("0") == []


def test_settor_runs_on_push_and_pop():
    calls = []

    def evaluate(command):
        calls.append(words(command[1:]))
        return command[1:]

    vs = Variables(evaluate=evaluate)
    vs.define("set-v", make_list("settor"))
    vs.define("v", make_list("one"))
    with vs.push("v", make_list("two")):
        pass
    assert calls == [["one"], ["two"], ["one"]]
    assert words(vs.lookup("v")) == ["one"]


def test_environment_encodes_lists():
    vs = Variables()
    vs.define("x", make_list("a", "b"))
    assert vs.environment() == ["x=a" + ENV_SEPARATOR + "b"]


def test_environment_round_trip_with_special_characters():
    value = ["p" + ENV_SEPARATOR + "q", "r" + ENV_ESCAPE + "s", ""]
    vs = Variables()
    vs.define("v", make_list(*value))
    other = Variables()
    other.import_environment(vs.environment())
    assert words(other.lookup("v")) == value


def test_environment_is_sorted_and_skips_special_vars():
    vs = Variables()
    vs.define("b", make_list("1"))
    vs.define("a", make_list("2"))
    vs.define("*", make_list("3"))
    env = vs.environment()
    assert env == sorted(env)
    assert [entry.split("=")[0] for entry in env] == ["a", "b"]


def test_noexport():
    vs = Variables()
    vs.define("a", make_list("1"))
    vs.define("b", make_list("2"))
    vs.set_noexport(["b"])
    assert vs.environment() == ["a=1"]
    vs.set_noexport([])
    assert vs.environment() == ["a=1", "b=2"]


def test_import_mapping_and_plain_entries():
    vs = Variables()
    vs.import_environment(["weird", "a=1"])
    assert words(vs.lookup("a")) == ["1"]
    assert vs.environment() == ["a=1", "weird"]


def test_protected_import_skips_functions_and_settors():
    vs = Variables()
    vs.import_environment({"fn-x": "y", "set-z": "w", "ok": "1"}, protected=True)
    assert vs.lookup("fn-x") == []
    assert vs.lookup("set-z") == []
    assert words(vs.lookup("ok")) == ["1"]


def test_import_runs_settors_afterwards():
    def evaluate(command):
        return [mkstr(term.as_string().upper()) for term in command[1:]]

    vs = Variables(evaluate=evaluate)
    vs.import_environment({"foo": "abc", "set-foo": "settor"})
    assert words(vs.lookup("foo")) == ["ABC"]


def test_hide_marks_internal():
    vs = Variables()
    vs.define("a", make_list("1"))
    vs.hide()
    vs.define("b", make_list("2"))
    assert words(vs.list_vars(False)) == ["b"]
    assert words(vs.list_vars(True)) == ["a"]
    assert vs.environment() == ["b=2"]


def test_redefinition_clears_internal_flag():
    vs = Variables()
    vs.define("a", make_list("1"))
    vs.hide()
    vs.define("a", make_list("2"))
    assert words(vs.list_vars(True)) == []
    assert words(vs.list_vars(False)) == ["a"]


def test_with_prefix():
    vs = Variables()
    for name in ("fn-b", "x", "fn-a"):
        vs.define(name, make_list("v"))
    assert words(vs.with_prefix("fn-")) == ["fn-a", "fn-b"]


def test_binding_iterates_chain():
    chain = Binding("a", make_list("1"), Binding("b", make_list("2")))
    assert [bound.name for bound in chain] == ["a", "b"]