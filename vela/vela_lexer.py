"""
The Vela lexer: turns source text into a flat list of tokens.

The scan is a single left-to-right pass with one character of lookahead.
The first error aborts the whole scan.
"""
from typing import List, Optional

from vela.vela_characters import (
    DIGITS, LETTERS, LETTERS_AND_DIGITS, KEYWORDS, ESCAPE_CHARACTERS, WHITESPACE, QUOTES,
)
from vela.vela_errors import LexError
from vela.vela_tokens import Token, TokenType
from vela.vela_debug import dbg

SINGLE_CHARACTER_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MUL,
    "/": TokenType.DIV,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "~": TokenType.BITWISE_NOT,
}

# first char -> (token when alone, {second char: combined token})
COMPOUND_TOKENS = {
    "=": (TokenType.EQ, {"=": TokenType.EE}),
    "!": (TokenType.NOT, {"=": TokenType.NE}),
    ">": (TokenType.GT, {"=": TokenType.GTE, ">": TokenType.RIGHT_SHIFT}),
    "<": (TokenType.LT, {"=": TokenType.LTE, "<": TokenType.LEFT_SHIFT}),
    "|": (TokenType.BITWISE_OR, {"|": TokenType.OR}),
    "&": (TokenType.BITWISE_AND, {"&": TokenType.AND}),
}


class Lexer:
    """Converts a source string into tokens, ending with exactly one EOF token."""

    def __init__(self, source: str):
        self.source = source
        self.position = -1
        self.current_char: Optional[str] = None
        self._advance()

    def _advance(self):
        self.position += 1
        if self.position < len(self.source):
            self.current_char = self.source[self.position]
        else:
            self.current_char = None

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while self.current_char is not None:
            ch = self.current_char
            if ch in WHITESPACE:
                self._advance()
            elif ch in DIGITS:
                tokens.append(self._make_number())
            elif ch in LETTERS:
                tokens.append(self._make_identifier())
            elif ch in QUOTES:
                tokens.append(self._make_string())
            elif ch in COMPOUND_TOKENS:
                tokens.append(self._make_compound())
            elif ch == "^":
                tokens.append(self._make_caret())
            elif ch in SINGLE_CHARACTER_TOKENS:
                tokens.append(Token(SINGLE_CHARACTER_TOKENS[ch]))
                self._advance()
            else:
                raise LexError(f"Unknown character '{ch}'")
        tokens.append(Token(TokenType.EOF))
        dbg("LEX", len(tokens), "tokens")
        return tokens

    def _make_number(self) -> Token:
        text = ""
        has_point = False
        while self.current_char is not None and (self.current_char in DIGITS or self.current_char == "."):
            if self.current_char == ".":
                if has_point:
                    break
                has_point = True
            text += self.current_char
            self._advance()
        try:
            if has_point:
                return Token(TokenType.FLOAT, float(text))
            return Token(TokenType.INT, int(text))
        except ValueError:
            raise LexError(f"Malformed number '{text}'") from None

    def _make_identifier(self) -> Token:
        text = ""
        while self.current_char is not None and self.current_char in LETTERS_AND_DIGITS:
            text += self.current_char
            self._advance()
        if text in KEYWORDS:
            return Token(TokenType.KEYWORD, text)
        return Token(TokenType.IDENTIFIER, text)

    def _make_string(self) -> Token:
        quote = self.current_char
        self._advance()
        chars = []
        escaped = False
        while True:
            ch = self.current_char
            if ch is None:
                raise LexError(f"Unterminated string, expected '{quote}'")
            if escaped:
                chars.append(ESCAPE_CHARACTERS.get(ch, ch))
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                self._advance()
                break
            else:
                chars.append(ch)
            self._advance()
        return Token(TokenType.STR, "".join(chars))

    def _make_compound(self) -> Token:
        first = self.current_char
        alone, combined = COMPOUND_TOKENS[first]
        self._advance()
        if self.current_char is None:
            raise LexError(f"Unexpected end of input after '{first}'")
        token_type = combined.get(self.current_char)
        if token_type is None:
            return Token(alone)
        self._advance()
        return Token(token_type)

    def _make_caret(self) -> Token:
        self._advance()
        if self.current_char == "^":
            self._advance()
            return Token(TokenType.BITWISE_XOR)
        return Token(TokenType.POW)


def tokenize(source: str) -> List[Token]:
    """Tokenizes `source`, raising LexError on the first problem."""
    return Lexer(source).tokenize()
