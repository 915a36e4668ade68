"""
Exception types raised by the three stages of the Vela pipeline.

Each stage aborts on its first error. The error carries a human-readable
message only; there is no source position.
"""


class VelaError(Exception):
    """Base class for every error a Vela stage can raise."""
    kind = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class LexError(VelaError):
    """Raised by the lexer (unknown character, unterminated string, ...)."""
    kind = "LexError"


class ParseError(VelaError):
    """Raised by the parser (unexpected token, unexpected end of input, ...)."""
    kind = "ParseError"


class VelaRuntimeError(VelaError):
    """Raised while evaluating an AST (undefined name, illegal operation, ...)."""
    kind = "RuntimeError"
