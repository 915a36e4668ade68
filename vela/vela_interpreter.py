"""
The Vela tree-walking interpreter.

The current scope is always passed explicitly as a handle into the
ScopeManager; the evaluator itself keeps no notion of an ambient scope.
"""
from typing import Any, Dict, List

from vela.vela_ast import (
    Node, IntNode, FloatNode, StringNode, UnaryOpNode, BinaryOpNode, VarDefNode, VarAccessNode,
    ListNode, FuncDefNode, FuncCallNode, StatementsNode, IfNode, WhileNode, EmptyNode, EOFNode,
)
from vela.vela_datatypes import Value, Int, Float, Str, Null, List as VelaList, Func, Pointer
from vela.vela_errors import VelaRuntimeError
from vela.vela_scope import ScopeManager
from vela.vela_tokens import TokenType
from vela.vela_debug import dbg

# Operator token -> Value method implementing it.
BINARY_OPERATIONS = {
    TokenType.PLUS: "add",
    TokenType.MINUS: "subtract",
    TokenType.MUL: "multiply",
    TokenType.DIV: "divide",
    TokenType.POW: "raise_to",
    TokenType.EE: "equals",
    TokenType.NE: "not_equals",
    TokenType.GT: "greater_than",
    TokenType.GTE: "greater_equal",
    TokenType.LT: "less_than",
    TokenType.LTE: "less_equal",
    TokenType.AND: "logical_and",
    TokenType.OR: "logical_or",
    TokenType.BITWISE_AND: "bitwise_and",
    TokenType.BITWISE_OR: "bitwise_or",
    TokenType.BITWISE_XOR: "bitwise_xor",
    TokenType.LEFT_SHIFT: "shift_left",
    TokenType.RIGHT_SHIFT: "shift_right",
}

# Reading one of these yields a Pointer to the binding; anything else is copied.
REFERENCE_TYPES = (Str, VelaList, Func)


class Evaluator:
    """The Vela execution engine."""

    def __init__(self, scopes: ScopeManager):
        self.scopes = scopes
        # Script-level call frames; left in place when an error unwinds so
        # the host can report where it happened.
        self.call_stack: List[Dict[str, Any]] = []
        self._handlers = {
            IntNode: self.visit_int,
            FloatNode: self.visit_float,
            StringNode: self.visit_string,
            StatementsNode: self.visit_statements,
            UnaryOpNode: self.visit_unary_op,
            BinaryOpNode: self.visit_binary_op,
            VarDefNode: self.visit_var_def,
            VarAccessNode: self.visit_var_access,
            ListNode: self.visit_list,
            FuncDefNode: self.visit_func_def,
            FuncCallNode: self.visit_func_call,
            IfNode: self.visit_if,
            WhileNode: self.visit_while,
            EmptyNode: self.visit_empty,
            EOFNode: self.visit_empty,
        }

    def visit(self, node: Node, scope: int) -> Value:
        """Evaluates `node` in the scope `scope` and returns its value."""
        handler = self._handlers.get(type(node))
        if handler is None:
            raise VelaRuntimeError(f"Cannot evaluate node {type(node).__name__}")
        return handler(node, scope)

    def _store(self, value: Value) -> Value:
        # Stored values never hold Pointers, so resolution cannot cycle.
        return value.resolve(self.scopes)

    # --- literals ---

    def visit_int(self, node: IntNode, scope: int) -> Value:
        return Int(node.value)

    def visit_float(self, node: FloatNode, scope: int) -> Value:
        return Float(node.value)

    def visit_string(self, node: StringNode, scope: int) -> Value:
        return Str(node.value)

    def visit_empty(self, node: Node, scope: int) -> Value:
        return Null()

    # --- sequencing ---

    def visit_statements(self, node: StatementsNode, scope: int) -> Value:
        result: Value = Null()
        for statement in node.statements:
            result = self.visit(statement, scope)
        if not node.yields_last:
            return Null()
        return result

    # --- operators ---

    def visit_unary_op(self, node: UnaryOpNode, scope: int) -> Value:
        operand = self.visit(node.operand, scope)
        match node.op:
            case TokenType.PLUS:
                return operand.multiply(Int(1), self.scopes)
            case TokenType.MINUS:
                return operand.multiply(Int(-1), self.scopes)
            case TokenType.BITWISE_NOT:
                return operand.bitwise_not(self.scopes)
            case TokenType.NOT:
                return operand.logical_not(self.scopes)
        return operand

    def visit_binary_op(self, node: BinaryOpNode, scope: int) -> Value:
        # Both sides always run, even for && and ||.
        left = self.visit(node.left, scope)
        right = self.visit(node.right, scope)
        method = BINARY_OPERATIONS.get(node.op)
        if method is None:
            raise VelaRuntimeError(f"Illegal operator '{node.op}'")
        return getattr(left, method)(right, self.scopes)

    # --- variables ---

    def visit_var_def(self, node: VarDefNode, scope: int) -> Value:
        value = self._store(self.visit(node.value, scope))
        self.scopes.set_binding(scope, node.name, value)
        return Pointer(scope, node.name)

    def visit_var_access(self, node: VarAccessNode, scope: int) -> Value:
        value = self.scopes.lookup(scope, node.name)
        if value is None:
            raise VelaRuntimeError(f"'{node.name}' is not defined")
        if not isinstance(value, REFERENCE_TYPES):
            return value
        # The pointer keeps the queried scope, not the defining one.
        return Pointer(scope, node.name)

    def visit_list(self, node: ListNode, scope: int) -> Value:
        return VelaList([self._store(self.visit(e, scope)) for e in node.elements])

    # --- functions ---

    def visit_func_def(self, node: FuncDefNode, scope: int) -> Value:
        closure = self.scopes.create_scope(scope)
        func = Func(node.name, node.params, node.body, closure)
        self.scopes.set_binding(scope, node.name, func)
        return func

    def visit_func_call(self, node: FuncCallNode, scope: int) -> Value:
        callee = self.visit(node.callee, scope).resolve(self.scopes)
        if not isinstance(callee, Func):
            raise VelaRuntimeError(f"'{callee.printable(self.scopes)}' is not a function")

        # Both scopes hang off the closure: arguments cannot see this call's parameters.
        arg_scope = self.scopes.create_scope(callee.closure)
        call_scope = self.scopes.create_scope(callee.closure)
        bound = []
        for i, param in enumerate(callee.params):
            if i < len(node.args):
                value = self._store(self.visit(node.args[i], arg_scope))
            else:
                value = Null()
            self.scopes.set_binding(call_scope, param, value)
            bound.append(value)

        dbg("CALL", callee.name, "args", [v.printable(self.scopes) for v in bound])
        self.call_stack.append({'name': callee.name, 'args': bound})
        result = self.visit(callee.body, call_scope)
        self.call_stack.pop()
        return result

    # --- control flow ---

    def visit_if(self, node: IfNode, scope: int) -> Value:
        if self.visit(node.condition, scope).is_true(self.scopes):
            return self.visit(node.then_branch, self.scopes.create_scope(scope))
        if node.else_branch is not None:
            return self.visit(node.else_branch, self.scopes.create_scope(scope))
        return Null()

    def visit_while(self, node: WhileNode, scope: int) -> Value:
        # One scope for the whole loop, shared by every iteration.
        loop_scope = self.scopes.create_scope(scope)
        result: Value = Null()
        while self.visit(node.condition, scope).is_true(self.scopes):
            result = self.visit(node.body, loop_scope)
        return result


def interpret(node: Node, scope: int, scopes: ScopeManager) -> Value:
    """Evaluates an AST root in `scope`, raising VelaRuntimeError on failure."""
    return Evaluator(scopes).visit(node, scope)
