import pytest

from vela import ScriptRunner
from vela.vela_ast import StatementsNode
from vela.vela_datatypes import Int, Float, Str, Boolean, Null, List
from vela.vela_runtime import ExecutionResult, load_bindings, MAX_TRACE_FRAMES
from vela.vela_tokens import TokenType


def assert_ok(res, expected=None):
    assert res.status == "success", f"expected success, got {res}"
    if expected is not None:
        assert res.value == expected, f"expected {expected!r}, got {res.value!r}"


def assert_error(res, stage, contains):
    assert res.status == "error", f"expected error, got {res}"
    assert res.error_stage == stage
    assert contains in (res.error_message or ""), res.error_message


def test_simple_script():
    res = ScriptRunner().handle_script("1 + 1")
    assert_ok(res, Int(2))
    assert res.printable == "2"


@pytest.mark.parametrize("source, expected, printable", [
    ("let x = 1; x", Int(1), "1"),
    ("let x = 1;", Null(), "null"),
    ('let s = "text"; s', Str("text"), "text"),
    ("2.5 * 1", Float(2.5), "2.5"),
    ("[1, [true], null]", List([Int(1), List([Boolean(True)]), Null()]), "[1, [true], null]"),
    ("function f(a, b) { a }", None, "f(a, b)"),
    ("", Null(), "null"),
])
def test_result_value_is_resolved_and_printable(source, expected, printable):
    res = ScriptRunner().handle_script(source)
    assert_ok(res, expected)
    assert res.printable == printable


def test_tokens_and_ast_are_kept_on_the_result():
    res = ScriptRunner().handle_script("1 + 2")
    assert [t.type for t in res.tokens] == [TokenType.INT, TokenType.PLUS, TokenType.INT, TokenType.EOF]
    assert isinstance(res.ast, StatementsNode)


def test_root_scope_persists_across_scripts():
    runner = ScriptRunner()
    assert_ok(runner.handle_script("let x = 2;"), Null())
    assert_ok(runner.handle_script("function triple(n) { n * 3 }"))
    assert_ok(runner.handle_script("triple(x)"), Int(6))


def test_root_bindings_are_seeded():
    runner = ScriptRunner()
    assert_ok(runner.handle_script("true"), Boolean(True))
    assert_ok(runner.handle_script("false"), Boolean(False))
    assert_ok(runner.handle_script("null"), Null())
    assert ScriptRunner._load_root_bindings() == {"true": True, "false": False, "null": None}


def test_without_core_root_bindings():
    res = ScriptRunner(load_core=False).handle_script("true")
    assert_error(res, "runtime", "'true' is not defined")


def test_host_bindings():
    runner = ScriptRunner(bindings={"limit": 10, "name": "vela", "xs": [1, 2.5], "none": None})
    assert_ok(runner.handle_script("limit + 1"), Int(11))
    assert runner.handle_script('name + "!"').printable == "vela!"
    assert_ok(runner.handle_script("xs"), List([Int(1), Float(2.5)]))
    assert_ok(runner.handle_script("none"), Null())


def test_host_bindings_override_root_bindings():
    runner = ScriptRunner(bindings={"null": 0})
    assert_ok(runner.handle_script("null"), Int(0))


def test_bind_after_start():
    runner = ScriptRunner()
    runner.bind("y", 2.5)
    assert_ok(runner.handle_script("y * 2"), Float(5.0))
    runner.bind("y", Str("now a string"))
    assert runner.handle_script("y").printable == "now a string"


def test_unsupported_host_binding_is_rejected():
    runner = ScriptRunner(bindings={"cfg": {"a": 1}})
    with pytest.raises(TypeError):
        runner.handle_script("1")


# --- Errors ---

@pytest.mark.parametrize("source, stage, message", [
    ('"abc', "lex", "LexError: Unterminated string"),
    ("1 $ 2", "lex", "LexError: Unknown character '$'"),
    ("1 =", "lex", "LexError: Unexpected end of input after '='"),
    ("let = 1", "parse", "ParseError: Expected 'identifier', found '='"),
    ("1 2", "parse", "ParseError: Unexpected token '2'"),
    ("x", "runtime", "RuntimeError: 'x' is not defined"),
    ("5(1)", "runtime", "RuntimeError: '5' is not a function"),
    ('1 & "a"', "runtime", "RuntimeError: Illegal operation '&' for '1' and 'a'"),
    ("1 / 0", "runtime", "RuntimeError: Division by zero in '1 / 0'"),
])
def test_error_stages(source, stage, message):
    res = ScriptRunner().handle_script(source)
    assert_error(res, stage, message)
    assert res.value is None
    assert res.printable is None


def test_lex_errors_have_no_tokens_or_ast():
    res = ScriptRunner().handle_script('"abc')
    assert res.tokens == []
    assert res.ast is None


def test_parse_errors_keep_tokens():
    res = ScriptRunner().handle_script("let = 1")
    assert res.tokens
    assert res.ast is None


def test_stacktrace_shows_function_chain():
    script = """
    function boom(x) { x / 0 };
    function middle(y) { boom(7) };
    function outer(z) { middle("m") };
    outer(5)
    """
    res = ScriptRunner().handle_script(script)
    assert_error(res, "runtime", "Division by zero in '7 / 0'")
    assert res.stacktrace == "Vela stacktrace: (outer 5) (middle m) (boom 7)"
    formatted = res.format_error()
    assert formatted.startswith("RuntimeError: Division by zero")
    assert formatted.endswith(res.stacktrace)


def test_no_stacktrace_outside_calls():
    res = ScriptRunner().handle_script("nope")
    assert res.stacktrace is None
    assert res.format_error() == "RuntimeError: 'nope' is not defined"


def test_stacktrace_frame_without_arguments():
    res = ScriptRunner().handle_script("function f() { nope }; f()")
    assert res.stacktrace == "Vela stacktrace: (f)"


def test_call_stack_is_reset_between_scripts():
    runner = ScriptRunner()
    assert_error(runner.handle_script("function f(a) { nope }; f(1)"), "runtime", "'nope'")
    res = runner.handle_script("missing")
    assert res.stacktrace is None


def test_state_before_an_error_is_kept():
    runner = ScriptRunner()
    assert_error(runner.handle_script("let kept = 1; nope; let lost = 2"), "runtime", "'nope'")
    assert_ok(runner.handle_script("kept"), Int(1))
    assert_error(runner.handle_script("lost"), "runtime", "'lost' is not defined")


def test_deep_nesting_is_reported_at_parse_stage():
    res = ScriptRunner().handle_script("(" * 5000 + "1" + ")" * 5000)
    assert_error(res, "parse", "ParseError: Nesting too deep")
    assert res.ast is None
    assert res.stacktrace is None


def test_float_overflow_is_reported():
    res = ScriptRunner().handle_script("let x = 10.0 ^ 300; x * x")
    assert_error(res, "runtime", "RuntimeError: Illegal operation '*'")
    assert "float result out of range" in res.error_message


def test_runaway_recursion_is_reported():
    res = ScriptRunner().handle_script("function f() { f() }; f()")
    assert_error(res, "runtime", "RuntimeError: Maximum recursion depth exceeded")
    assert res.stacktrace.startswith("Vela stacktrace: ... ")
    assert res.stacktrace.count("(f)") == MAX_TRACE_FRAMES


def test_format_error_is_empty_on_success():
    assert ExecutionResult(status="success").format_error() == ""


# --- Binding files ---

def test_load_bindings_under_bindings_key(tmp_path):
    path = tmp_path / "b.yaml"
    path.write_text("bindings:\n  limit: 3\n  label: hi\n", encoding="utf-8")
    assert load_bindings(path) == {"limit": 3, "label": "hi"}


def test_load_bindings_bare_mapping(tmp_path):
    path = tmp_path / "b.yaml"
    path.write_text("ratio: 0.5\nflags: [true, false]\n", encoding="utf-8")
    assert load_bindings(path) == {"ratio": 0.5, "flags": [True, False]}


def test_load_bindings_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_bindings(path) == {}


def test_load_bindings_rejects_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_bindings(path)
