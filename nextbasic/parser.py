"""Parser for NextBasic expressions and conditions.

A single Lark grammar serves both entry points:

* ``expression``: arithmetic over numbers, strings and variables with the
  usual precedence (``* /`` before ``+ -``), unary signs, parentheses and
  the ``RND`` / ``INT(...)`` intrinsics.
* ``condition``: everything above plus comparisons and the logical
  operators ``&&``, ``||`` and ``!``. IF conditions are rewritten from
  BASIC spelling (``AND``, ``OR``, ``NOT``, bare ``=``) into this form by
  the evaluator before parsing.

The resulting parse tree is transformed into the AST defined in
`nextbasic.ast`. Parsed trees are cached by source text since loops
evaluate the same expressions over and over.
"""

from __future__ import annotations

from functools import lru_cache

from lark import Lark, Transformer

from .ast import Node, Literal, Ident, BinaryOp, UnaryOp, Call
from .types import parse_number


BASIC_GRAMMAR = r"""
    ?expression: sum
    ?condition: or_test

    ?or_test: and_test ("||" and_test)*
    ?and_test: not_test ("&&" not_test)*
    ?not_test: "!" not_test -> not_op
             | comparison
    ?comparison: sum (COMP_OP sum)*
    ?sum: product (ADD_OP product)*
    ?product: unary (MUL_OP unary)*
    ?unary: ADD_OP unary -> signed
          | atom
    ?atom: NUMBER -> number
         | STRING -> string
         | NAME "(" [sum] ")" -> call
         | NAME -> var
         | "(" or_test ")"

    COMP_OP: "==" | "!=" | "<>" | "<=" | ">=" | "<" | ">"
    ADD_OP: "+" | "-"
    MUL_OP: "*" | "/"
    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    NUMBER: /(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?/
    STRING: /"[^"]*"/

    %import common.WS
    %ignore WS
"""


BASIC_PARSER = Lark(
    BASIC_GRAMMAR,
    start=['expression', 'condition'],
    parser='lalr',
    maybe_placeholders=False,
)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def number(self, items):
        return Literal(parse_number(str(items[0])))

    def string(self, items):
        return Literal(str(items[0])[1:-1])

    def var(self, items):
        return Ident(str(items[0]).upper())

    def call(self, items):
        return Call(func=str(items[0]).upper(), args=list(items[1:]))

    def signed(self, items):
        return UnaryOp(op=str(items[0]), operand=items[1])

    def not_op(self, items):
        return UnaryOp(op='!', operand=items[0])

    def binary_expr(self, items):
        # items pattern: expr (op expr)*
        left = items[0]
        i = 1
        while i < len(items):
            left = BinaryOp(op=str(items[i]), left=left, right=items[i + 1])
            i += 2
        return left

    comparison = binary_expr
    sum = binary_expr
    product = binary_expr

    def or_test(self, items):
        # anonymous "||" tokens are filtered out by Lark
        left = items[0]
        for right in items[1:]:
            left = BinaryOp(op='||', left=left, right=right)
        return left

    def and_test(self, items):
        left = items[0]
        for right in items[1:]:
            left = BinaryOp(op='&&', left=left, right=right)
        return left


@lru_cache(maxsize=1024)
def parse_expression(source: str) -> Node:
    """Parse an arithmetic/string expression into an AST.

    Syntax errors are raised as `lark.exceptions.LarkError` subclasses.
    """
    tree = BASIC_PARSER.parse(source, start='expression')
    return ASTTransformer().transform(tree)


@lru_cache(maxsize=1024)
def parse_condition(source: str) -> Node:
    """Parse a rewritten IF condition (``==``, ``&&``, ``||``, ``!``) into an AST."""
    tree = BASIC_PARSER.parse(source, start='condition')
    return ASTTransformer().transform(tree)
