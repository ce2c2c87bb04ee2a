import os

import pytest

from esshell.errors import EsError
from esshell.printfmt import FMT_LEFTSIDE, Formatter, fprint, sprint


@pytest.mark.parametrize(
    "fmt", ["%d", "%5d", "%-5d", "%05d", "%.3d", "%8.3d", "%x", "%#x", "%o"]
)
@pytest.mark.parametrize("value", [0, 7, 42, -42, 255])
def test_integers_agree_with_percent_operator(fmt, value):
    assert sprint(fmt, value) == fmt % value


@pytest.mark.parametrize("fmt", ["%s", "%10s", "%-10s"])
@pytest.mark.parametrize("text", ["abc", "", "longer than ten"])
def test_strings_agree_with_percent_operator(fmt, text):
    assert sprint(fmt, text) == fmt % text


def test_mixed_text():
    assert sprint("pid %d: %s", 12, "done") == "pid %d: %s" % (12, "done")


def test_percent_sign():
    assert sprint("100%%") == "100%"


def test_octal_altform_prefix_is_zero():
    assert sprint("%#o", 8) == "0" + "%o" % 8


def test_left_side_zero_padding_pads_right_with_zeroes():
    assert sprint("%-05d", 42) == "42000"


def test_char_from_int_and_str():
    assert sprint("%c%c", ord("a"), "z") == "az"


def test_long_keeps_wide_values():
    assert sprint("%ld", 2**40) == str(2**40)


def test_int_without_long_is_truncated():
    assert sprint("%d", 2**32 + 5) == "5"


def test_unsigned_negative_is_positive_number():
    result = sprint("%ud", -1)
    assert result.isdigit()
    assert int(result) > 0


def test_string_width_invariant():
    out = sprint("%12s", "word")
    assert len(out) == 12
    assert out.endswith("word")


def test_bad_conversion_raises():
    with pytest.raises(ValueError):
        sprint("%q", 1)


def test_trailing_percent_raises():
    with pytest.raises(ValueError):
        sprint("abc%")


def test_too_few_arguments():
    with pytest.raises(ValueError):
        sprint("%d %d", 1)


def test_nul_ends_format():
    assert sprint("ab\0cd") == "ab"


def test_install_custom_conversion():
    formatter = Formatter()

    def upper(state):
        state.put(str(state.next_arg()).upper())
        return False

    old = formatter.install("q", upper)
    assert formatter.format("<%q>", "abc") == "<ABC>"
    assert formatter.install("q", None) is upper
    with pytest.raises(ValueError):
        old(None.__class__) if False else sprint("%q", "abc")
    with pytest.raises(ValueError):
        Formatter().format("%q", "abc")


def test_install_flag_conversion():
    formatter = Formatter()

    def left(state):
        state.flags |= FMT_LEFTSIDE
        return True

    formatter.install("!", left)
    assert formatter.format("%!5d|", 3) == "%-5d|" % 3


def test_install_rejects_long_name():
    with pytest.raises(TypeError):
        Formatter().install("ab", None)


def test_fprint_writes_to_pipe():
    read_fd, write_fd = os.pipe()
    try:
        count = fprint(write_fd, "%s=%d\n", "x", 3)
        os.close(write_fd)
        data = os.read(read_fd, 100)
    finally:
        os.close(read_fd)
    assert data == b"x=3\n"
    assert count == len(data)


def test_fprint_to_closed_fd_fails():
    read_fd, write_fd = os.pipe()
    os.close(read_fd)
    os.close(write_fd)
    with pytest.raises(EsError) as info:
        fprint(write_fd, "hello")
    assert info.value.kind == "error"
    assert info.value.arguments[0] == "es:fprint"