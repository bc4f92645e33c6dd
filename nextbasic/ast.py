"""Abstract Syntax Tree (AST) definitions for NextBasic expressions.

Expressions (PRINT arguments, assignment right-hand sides, FOR bounds)
and IF conditions are parsed into these nodes and then walked by the
evaluator. Statements themselves are not parsed into an AST; the
executor dispatches on their leading keyword.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Any


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Literal(Node):
    value: Any  # number or str


@dataclass
class Ident(Node):
    name: str  # upper-cased


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class Call(Node):
    func: str  # upper-cased builtin name
    args: List[Node]
