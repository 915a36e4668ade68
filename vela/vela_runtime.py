"""
The host side of Vela: owns the scopes for a session and runs scripts.

ScriptRunner is the one place where stage errors are caught; everything
below it raises and aborts on the first problem.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional

import yaml

from vela.vela_ast import Node
from vela.vela_datatypes import Value, to_value
from vela.vela_errors import VelaError, LexError, ParseError, VelaRuntimeError
from vela.vela_interpreter import Evaluator
from vela.vela_lexer import tokenize
from vela.vela_parser import parse
from vela.vela_printer import Printer
from vela.vela_scope import ScopeManager
from vela.vela_tokens import Token
from vela.vela_debug import dbg

ROOT_BINDINGS_PATH = Path(__file__).parent / "root.yaml"
MAX_TRACE_FRAMES = 20


def load_bindings(path) -> Dict[str, Any]:
    """Reads a YAML file holding a mapping of names to plain values.

    Both a top-level `bindings:` mapping and a bare mapping are accepted.
    """
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of bindings, got {type(data).__name__}")
    if "bindings" in data and isinstance(data["bindings"], dict):
        data = data["bindings"]
    return {str(k): v for k, v in data.items()}


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Optional[Value] = None
    printable: Optional[str] = None
    error_message: Optional[str] = None
    error_stage: Optional[Literal['lex', 'parse', 'runtime']] = None
    stacktrace: Optional[str] = None
    tokens: List[Token] = field(default_factory=list)
    ast: Optional[Node] = None

    def format_error(self) -> str:
        """Formats the error message, followed by the call trace if there is one."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.stacktrace:
            msg = f"{msg}\n{self.stacktrace}"
        return msg


class ScriptRunner:
    """Tokenizes, parses and evaluates Vela code against one root scope."""

    _root_bindings: Optional[Dict[str, Any]] = None

    def __init__(self, bindings: Optional[Mapping[str, Any]] = None, load_core: bool = True):
        self.scopes = ScopeManager()
        self.root_scope = self.scopes.create_scope()
        self.evaluator = Evaluator(self.scopes)
        self.printer = Printer(self.scopes)
        self._load_core = load_core
        self._host_bindings = dict(bindings or {})
        self._initialized = False

    @classmethod
    def _load_root_bindings(cls) -> Dict[str, Any]:
        # Parsed once and cached on the class.
        if cls._root_bindings is None:
            cls._root_bindings = load_bindings(ROOT_BINDINGS_PATH)
        return cls._root_bindings

    def _initialize(self):
        """Seeds the root scope: root.yaml first, then host bindings."""
        if self._initialized:
            return
        if self._load_core:
            for name, value in self._load_root_bindings().items():
                self.bind(name, value)
        for name, value in self._host_bindings.items():
            self.bind(name, value)
        self._initialized = True

    def bind(self, name: str, value: Any):
        """Binds a plain Python value (or a Vela value) in the root scope."""
        self.scopes.set_binding(self.root_scope, name, to_value(value))

    def pformat(self, value: Value) -> str:
        return self.printer.pformat(value)

    def _format_stacktrace(self) -> Optional[str]:
        stack = self.evaluator.call_stack
        if not stack:
            return None
        frames = []
        if len(stack) > MAX_TRACE_FRAMES:
            frames.append(f"... {len(stack) - MAX_TRACE_FRAMES} more")
            stack = stack[-MAX_TRACE_FRAMES:]
        for frame in stack:
            args = " ".join(self.pformat(a) for a in frame.get('args') or [])
            frames.append(f"({frame['name']} {args})" if args else f"({frame['name']})")
        return "Vela stacktrace: " + " ".join(frames)

    def _error_result(self, e: Exception, result: ExecutionResult) -> ExecutionResult:
        match e:
            case LexError():
                stage = 'lex'
            case ParseError():
                stage = 'parse'
            case RecursionError():
                stage = 'runtime'
                e = VelaRuntimeError("Maximum recursion depth exceeded")
            case _:
                stage = 'runtime'
        result.status = 'error'
        result.error_stage = stage
        result.error_message = f"{e.kind}: {e.message}"
        if stage == 'runtime':
            result.stacktrace = self._format_stacktrace()
        dbg("ERROR", result.error_message)
        return result

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        self._initialize()
        self.evaluator.call_stack.clear()
        result = ExecutionResult(status='success')
        try:
            result.tokens = tokenize(source_code)
            result.ast = parse(result.tokens)
            value = self.evaluator.visit(result.ast, self.root_scope)
            result.value = value.resolve(self.scopes)
        except (VelaError, RecursionError) as e:
            return self._error_result(e, result)
        result.printable = self.pformat(result.value)
        return result
