import math

import pytest

from vela.vela_ast import StatementsNode
from vela.vela_printer import Printer
from vela.vela_datatypes import Int, Float, Str, Boolean, Null, List, Func, Pointer
from vela.vela_scope import ScopeManager


@pytest.fixture
def scopes():
    return ScopeManager()


@pytest.fixture
def printer(scopes):
    return Printer(scopes)


# Test cases: (id, object, expected_string)
FORMAT_TEST_CASES = [
    ("int", Int(123), "123"),
    ("negative_int", Int(-5), "-5"),
    ("float", Float(-1.5), "-1.5"),
    ("whole_float", Float(2.0), "2.0"),
    ("large_float", Float(1e16), "10000000000000000.0"),
    ("large_float_with_digits", Float(1.5e16), "15000000000000000.0"),
    ("small_float", Float(1e-07), "0.0000001"),
    ("infinite_float", Float(math.inf), "inf"),
    ("str_verbatim", Str("hello world"), "hello world"),
    ("str_with_newline", Str("a\nb"), "a\nb"),
    ("bool_true", Boolean(True), "true"),
    ("bool_false", Boolean(False), "false"),
    ("null", Null(), "null"),
    ("empty_list", List([]), "[]"),
    ("list", List([Int(1), Float(2.5), Str("x")]), "[1, 2.5, x]"),
    ("nested_list", List([List([Int(1)]), List([])]), "[[1], []]"),
    ("func", Func("add", ("a", "b"), StatementsNode(()), 0), "add(a, b)"),
    ("func_no_params", Func("f", (), StatementsNode(()), 0), "f()"),
]


@pytest.mark.parametrize("test_id, obj, expected", FORMAT_TEST_CASES, ids=[c[0] for c in FORMAT_TEST_CASES])
def test_pformat(printer, test_id, obj, expected):
    assert printer.pformat(obj) == expected


def test_pointer_is_resolved(scopes, printer):
    root = scopes.create_scope()
    scopes.set_binding(root, "xs", List([Int(1), Str("two")]))
    assert printer.pformat(Pointer(root, "xs")) == "[1, two]"


def test_list_elements_that_are_pointers(scopes, printer):
    root = scopes.create_scope()
    scopes.set_binding(root, "n", Int(4))
    assert printer.pformat(List([Pointer(root, "n")])) == "[4]"


def test_dangling_pointer_prints_null(scopes, printer):
    root = scopes.create_scope()
    assert printer.pformat(Pointer(root, "missing")) == "null"
    assert Printer().pformat(Pointer(root, "missing")) == "null"


def test_value_printable_uses_printer(scopes):
    assert Float(0.1).printable(scopes) == "0.1"
    assert List([Boolean(True), Null()]).printable() == "[true, null]"


def test_unknown_objects_fall_back_to_repr(printer):
    assert printer.pformat(("a", 1)) == "('a', 1)"
