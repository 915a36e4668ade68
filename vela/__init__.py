"""
Vela: a small dynamically-typed scripting language.

    from vela import ScriptRunner
    ScriptRunner().handle_script("let x = 1; x + 1").printable  # '2'
"""
from vela.vela_lexer import tokenize
from vela.vela_parser import parse
from vela.vela_interpreter import interpret, Evaluator
from vela.vela_scope import ScopeManager
from vela.vela_errors import VelaError, LexError, ParseError, VelaRuntimeError
from vela.vela_runtime import ScriptRunner, ExecutionResult

__all__ = [
    "tokenize", "parse", "interpret", "Evaluator", "ScopeManager",
    "VelaError", "LexError", "ParseError", "VelaRuntimeError",
    "ScriptRunner", "ExecutionResult",
]
