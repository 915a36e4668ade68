"""
The Vela parser: recursive descent over a precedence ladder.

From lowest to highest binding:

    statements        expr ; expr ; ...
    expression        let / function / if / while, else fall through
    combination       &  |  ^^  &&  ||          (left-assoc, one level)
    comparison        ==  !=  >  >=  <  <=      (left-assoc)
    shift             <<  >>                    (left-assoc)
    logical_not       prefix !  ~               (right-recursive)
    arithmetic        +  -
    term              *  /
    power             ^                         (right-assoc)
    unary             prefix +  -
    call              primary(args...)
    list              [a, b, ...]
    group             ( expr )
    atom              literal, identifier, end of input
"""
from typing import Callable, List, Optional, Sequence

from vela.vela_ast import (
    Node, IntNode, FloatNode, StringNode, UnaryOpNode, BinaryOpNode, VarDefNode, VarAccessNode,
    ListNode, FuncDefNode, FuncCallNode, StatementsNode, IfNode, WhileNode, EmptyNode, EOFNode,
)
from vela.vela_errors import ParseError
from vela.vela_tokens import Token, TokenType
from vela.vela_debug import dbg

COMBINATION_OPS = frozenset({
    TokenType.BITWISE_AND, TokenType.BITWISE_OR, TokenType.BITWISE_XOR,
    TokenType.AND, TokenType.OR,
})
COMPARISON_OPS = frozenset({
    TokenType.EE, TokenType.NE, TokenType.GT, TokenType.GTE, TokenType.LT, TokenType.LTE,
})
SHIFT_OPS = frozenset({TokenType.LEFT_SHIFT, TokenType.RIGHT_SHIFT})
NOT_OPS = frozenset({TokenType.NOT, TokenType.BITWISE_NOT})
ARITH_OPS = frozenset({TokenType.PLUS, TokenType.MINUS})
TERM_OPS = frozenset({TokenType.MUL, TokenType.DIV})
POWER_OPS = frozenset({TokenType.POW})
SIGN_OPS = ARITH_OPS


class Parser:
    """Builds one AST from a token list that ends with an EOF token."""

    def __init__(self, tokens: Sequence[Token]):
        if not tokens or tokens[-1].type is not TokenType.EOF:
            tokens = list(tokens) + [Token(TokenType.EOF)]
        self.tokens = list(tokens)
        self.index = 0

    # --- token cursor ---

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.current
        # EOF is sticky: never step past the last token.
        if self.index < len(self.tokens) - 1:
            self.index += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self.current.type is token_type

    def _expect(self, token_type: TokenType, what: Optional[str] = None) -> Token:
        if not self._check(token_type):
            raise ParseError(f"Expected '{what or token_type}', found '{self.current}'")
        return self._advance()

    # --- entry point ---

    def parse(self) -> Node:
        try:
            root = self.statements(TokenType.EOF)
        except RecursionError:
            raise ParseError("Nesting too deep") from None
        if not self._check(TokenType.EOF):
            raise ParseError(f"Unexpected token '{self.current}'")
        dbg("PARSE", root)
        return root

    def statements(self, terminator: TokenType) -> StatementsNode:
        """Parses expressions separated by one or more semicolons, up to `terminator`."""
        statements: List[Node] = []
        trailing_semicolon = False
        self._skip_semicolons()
        while not self._check(terminator) and not self._check(TokenType.EOF):
            statements.append(self.expression())
            trailing_semicolon = self._check(TokenType.SEMICOLON)
            if trailing_semicolon:
                self._skip_semicolons()
            elif not self._after_block():
                break
        return StatementsNode(tuple(statements), yields_last=not trailing_semicolon)

    def _skip_semicolons(self):
        while self._check(TokenType.SEMICOLON):
            self._advance()

    def _after_block(self) -> bool:
        # A statement closed by '}' may be followed directly by the next one.
        return self.index > 0 and self.tokens[self.index - 1].type is TokenType.RBRACE

    # --- expression dispatch ---

    def expression(self) -> Node:
        token = self.current
        if token.is_keyword("let"):
            return self.let_expression()
        if token.is_keyword("function"):
            return self.function_definition()
        if token.is_keyword("if"):
            return self.if_expression()
        if token.is_keyword("while"):
            return self.while_expression()
        return self.combination()

    def let_expression(self) -> VarDefNode:
        self._advance()
        name = self._expect(TokenType.IDENTIFIER, "identifier").value
        self._expect(TokenType.EQ)
        return VarDefNode(name, self.expression())

    def function_definition(self) -> FuncDefNode:
        self._advance()
        name = self._expect(TokenType.IDENTIFIER, "identifier").value
        self._expect(TokenType.LPAREN)
        params: List[str] = []
        if not self._check(TokenType.RPAREN):
            while True:
                params.append(self._expect(TokenType.IDENTIFIER, "parameter name").value)
                if self._check(TokenType.COMMA):
                    self._advance()
                    continue
                break
        self._expect(TokenType.RPAREN)
        self._expect(TokenType.LBRACE)
        body = self.statements(TokenType.RBRACE)
        self._expect(TokenType.RBRACE)
        return FuncDefNode(name, tuple(params), body)

    def if_expression(self) -> IfNode:
        self._advance()
        condition = self._parenthesized_condition()
        then_branch = self._body()
        else_branch = None
        if self.current.is_keyword("else"):
            self._advance()
            else_branch = self._body()
        return IfNode(condition, then_branch, else_branch)

    def while_expression(self) -> WhileNode:
        self._advance()
        condition = self._parenthesized_condition()
        return WhileNode(condition, self._body())

    def _parenthesized_condition(self) -> Node:
        self._expect(TokenType.LPAREN)
        condition = self.expression()
        self._expect(TokenType.RPAREN)
        return condition

    def _body(self) -> Node:
        """A brace block or a single expression."""
        if self._check(TokenType.EOF):
            raise ParseError("Unexpected end of input, expected a body")
        if self._check(TokenType.LBRACE):
            self._advance()
            block = self.statements(TokenType.RBRACE)
            self._expect(TokenType.RBRACE)
            return block
        return self.expression()

    # --- binary operator levels ---

    def binary_operation(self, operand: Callable[[], Node], operators: frozenset,
                         right: Optional[Callable[[], Node]] = None) -> Node:
        """Parses one precedence level.

        Left-folds `operand (op operand)*` into BinaryOpNodes. When `right`
        is given the right-hand side is parsed with it instead, which lets a
        level recurse into itself for right associativity.
        """
        left = operand()
        while self.current.type in operators:
            op = self._advance().type
            rhs = (right or operand)()
            left = BinaryOpNode(left, op, rhs)
        return left

    def combination(self) -> Node:
        return self.binary_operation(self.comparison, COMBINATION_OPS)

    def comparison(self) -> Node:
        return self.binary_operation(self.shift, COMPARISON_OPS)

    def shift(self) -> Node:
        return self.binary_operation(self.logical_not, SHIFT_OPS)

    def logical_not(self) -> Node:
        if self.current.type in NOT_OPS:
            op = self._advance().type
            return UnaryOpNode(self.logical_not(), op)
        return self.arithmetic()

    def arithmetic(self) -> Node:
        return self.binary_operation(self.term, ARITH_OPS)

    def term(self) -> Node:
        return self.binary_operation(self.power, TERM_OPS)

    def power(self) -> Node:
        return self.binary_operation(self.unary, POWER_OPS, right=self.power)

    def unary(self) -> Node:
        if self.current.type in SIGN_OPS:
            op = self._advance().type
            return UnaryOpNode(self.unary(), op)
        return self.call()

    # --- postfix and primaries ---

    def call(self) -> Node:
        node = self.list_literal()
        while self._check(TokenType.LPAREN):
            self._advance()
            args = self._comma_separated(TokenType.RPAREN)
            node = FuncCallNode(node, tuple(args))
        return node

    def list_literal(self) -> Node:
        if self._check(TokenType.LBRACKET):
            self._advance()
            return ListNode(tuple(self._comma_separated(TokenType.RBRACKET)))
        return self.group()

    def _comma_separated(self, closing: TokenType) -> List[Node]:
        """Parses `expr, expr, ...` and consumes the closing token. No trailing comma."""
        items: List[Node] = []
        if self._check(closing):
            self._advance()
            return items
        while True:
            items.append(self.expression())
            if self._check(TokenType.COMMA):
                self._advance()
                continue
            self._expect(closing)
            return items

    def group(self) -> Node:
        if self._check(TokenType.LPAREN):
            self._advance()
            if self._check(TokenType.RPAREN):
                self._advance()
                return EmptyNode()
            node = self.expression()
            self._expect(TokenType.RPAREN)
            return node
        return self.atom()

    def atom(self) -> Node:
        token = self.current
        match token.type:
            case TokenType.INT:
                self._advance()
                return IntNode(token.value)
            case TokenType.FLOAT:
                self._advance()
                return FloatNode(token.value)
            case TokenType.STR:
                self._advance()
                return StringNode(token.value)
            case TokenType.IDENTIFIER:
                self._advance()
                return VarAccessNode(token.value)
            case TokenType.EOF:
                return EOFNode()
        raise ParseError(f"Unexpected token '{token}'")


def parse(tokens: Sequence[Token]) -> Node:
    """Parses a token list into a single AST root, raising ParseError on failure."""
    return Parser(tokens).parse()
