"""
The token model produced by the lexer and consumed by the parser.
"""
import enum
from dataclasses import dataclass
from typing import Any


class TokenType(enum.Enum):
    # Literals and names (carry a payload)
    INT = "int"
    FLOAT = "float"
    STR = "string"
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    # Arithmetic
    PLUS = "+"
    MINUS = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    # Assignment and comparison
    EQ = "="
    EE = "=="
    NE = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    # Logical and bitwise
    NOT = "!"
    AND = "&&"
    OR = "||"
    BITWISE_NOT = "~"
    BITWISE_AND = "&"
    BITWISE_OR = "|"
    BITWISE_XOR = "^^"
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"
    # Delimiters
    SEMICOLON = ";"
    COMMA = ","
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    EOF = "eof"

    def __str__(self):
        return self.value


PAYLOAD_TYPES = frozenset({
    TokenType.INT, TokenType.FLOAT, TokenType.STR,
    TokenType.KEYWORD, TokenType.IDENTIFIER,
})


@dataclass(frozen=True)
class Token:
    """A lexical unit: a type tag plus an optional literal payload."""
    type: TokenType
    value: Any = None

    def matches(self, type_: TokenType, value: Any = None) -> bool:
        if self.type is not type_:
            return False
        return value is None or self.value == value

    def is_keyword(self, word: str) -> bool:
        return self.matches(TokenType.KEYWORD, word)

    def __str__(self):
        if self.type is TokenType.EOF:
            return "end of input"
        if self.type in PAYLOAD_TYPES:
            return str(self.value)
        return self.type.value

    def __repr__(self):
        if self.type in PAYLOAD_TYPES:
            return f"{self.type.name}:{self.value!r}"
        return self.type.name
