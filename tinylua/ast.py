"""Abstract Syntax Tree (AST) definitions for TinyLua.

Nodes are built once by the parser and never mutated afterwards; the
interpreter walks them directly. Blocks are plain statement lists wrapped
in :class:`Block`. Literal values are already in their runtime form
(``None``, ``bool``, ``float`` or ``str``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Block(Node):
    statements: List[Node]


@dataclass(frozen=True)
class Program(Node):
    body: Block


# Expressions

@dataclass(frozen=True)
class Literal(Node):
    value: Any


@dataclass(frozen=True)
class Ident(Node):
    name: str


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str  # 'not', '-' or '#'
    operand: Node


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: List[Node]


@dataclass(frozen=True)
class Index(Node):
    target: Node
    key: Node


@dataclass(frozen=True)
class TableField:
    key: Optional[Node]  # None for positional fields
    value: Node


@dataclass(frozen=True)
class TableConstructor(Node):
    fields: List[TableField]


# Statements

@dataclass(frozen=True)
class ExprStmt(Node):
    expr: Node


@dataclass(frozen=True)
class Assign(Node):
    targets: List[Node]  # Ident or Index
    values: List[Node]


@dataclass(frozen=True)
class LocalAssign(Node):
    names: List[str]
    values: List[Node]


@dataclass(frozen=True)
class IfStmt(Node):
    condition: Node
    then_block: Block
    elseif_blocks: List[Tuple[Node, Block]]
    else_block: Optional[Block]


@dataclass(frozen=True)
class WhileStmt(Node):
    condition: Node
    body: Block


@dataclass(frozen=True)
class RepeatStmt(Node):
    body: Block
    condition: Node


@dataclass(frozen=True)
class ForStmt(Node):
    var: str
    start: Node
    end: Node
    step: Optional[Node]
    body: Block


@dataclass(frozen=True)
class FunctionDecl(Node):
    name: str
    params: List[str]
    body: Block
    is_local: bool = False


@dataclass(frozen=True)
class ReturnStmt(Node):
    values: List[Node]


@dataclass(frozen=True)
class BreakStmt(Node):
    pass
