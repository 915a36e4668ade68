"""
AST node types built by the Vela parser.

Nodes are immutable and form a strict tree: every composite node owns its
children and nothing is shared between nodes.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from vela.vela_tokens import TokenType


class Node:
    """Abstract base class for all AST nodes."""
    __slots__ = ()


@dataclass(frozen=True)
class IntNode(Node):
    value: int


@dataclass(frozen=True)
class FloatNode(Node):
    value: float


@dataclass(frozen=True)
class StringNode(Node):
    value: str


@dataclass(frozen=True)
class UnaryOpNode(Node):
    operand: Node
    op: TokenType


@dataclass(frozen=True)
class BinaryOpNode(Node):
    left: Node
    op: TokenType
    right: Node


@dataclass(frozen=True)
class VarDefNode(Node):
    """`let name = value`"""
    name: str
    value: Node


@dataclass(frozen=True)
class VarAccessNode(Node):
    name: str


@dataclass(frozen=True)
class ListNode(Node):
    elements: Tuple[Node, ...]


@dataclass(frozen=True)
class FuncDefNode(Node):
    """`function name(params...) { body }`"""
    name: str
    params: Tuple[str, ...]
    body: 'StatementsNode'


@dataclass(frozen=True)
class FuncCallNode(Node):
    callee: Node
    args: Tuple[Node, ...]


@dataclass(frozen=True)
class StatementsNode(Node):
    """A `;`-separated statement sequence.

    `yields_last` is False when the final statement was followed by a
    semicolon; the block then evaluates to null.
    """
    statements: Tuple[Node, ...]
    yields_last: bool = True


@dataclass(frozen=True)
class IfNode(Node):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node] = None


@dataclass(frozen=True)
class WhileNode(Node):
    condition: Node
    body: Node


@dataclass(frozen=True)
class EmptyNode(Node):
    pass


@dataclass(frozen=True)
class EOFNode(Node):
    """End of input reached where an atom was expected."""
    pass
