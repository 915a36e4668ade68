"""
Character classes and fixed tables used by the Vela lexer.
"""

DIGITS = "0123456789"
LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"
LETTERS_AND_DIGITS = LETTERS + DIGITS

WHITESPACE = " \t\r\n"
QUOTES = "\"'"

KEYWORDS = frozenset({"let", "function", "if", "else", "while"})

# Single-level escapes inside string literals; unmapped escapes pass through.
ESCAPE_CHARACTERS = {"n": "\n"}
