"""Expression and condition evaluation for NextBasic.

Expressions are parsed with the Lark grammar in `nextbasic.parser` and
walked against the current variable bindings. IF conditions take a
separate path: bound variables are substituted into the text, BASIC
spellings (``AND``, ``OR``, ``NOT``, bare ``=``) are rewritten into the
grammar's operators, and the result is parsed and evaluated. Identifiers
left unresolved by substitution make the condition fail as a whole.
"""

from __future__ import annotations

import math
import random
import re
from typing import Any, Callable, Optional

from lark.exceptions import LarkError

from .ast import Node, Literal, Ident, BinaryOp, UnaryOp, Call
from .builtin_function import lookup_builtin
from .environment import Environment
from .errors import BasicError
from .parser import parse_expression, parse_condition
from .types import ErrorVal, is_number, parse_number, to_string, type_name

STRING_LITERAL_RE = re.compile(r'"[^"]*"')
IDENT_RE = re.compile(r'[A-Za-z]\w*')
TOKEN_RE = re.compile(r'"[^"]*"|\b[A-Za-z_]\w*\b')
LOGICAL_KEYWORDS = {'AND': '&&', 'OR': '||', 'NOT': '!'}
TRUE = 1.0
FALSE = 0.0


def strip_enclosing_parens(text: str) -> str:
    """Remove one pair of parentheses if it wraps the whole of `text`."""
    if not (text.startswith('(') and text.endswith(')')):
        return text
    depth = 0
    in_string = False
    for i, c in enumerate(text):
        if c == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
            if depth == 0 and i != len(text) - 1:
                return text
    return text[1:-1].strip()


def rewrite_equals(text: str) -> str:
    """Turn each bare comparison ``=`` into ``==``.

    An ``=`` is left alone inside string literals and when it is part of
    ``<=``, ``>=``, ``!=`` or ``==``.
    """
    out = []
    in_string = False
    for i, c in enumerate(text):
        if c == '"':
            in_string = not in_string
        elif c == '=' and not in_string:
            prev = text[i - 1] if i > 0 else ''
            nxt = text[i + 1] if i + 1 < len(text) else ''
            if not (prev and prev in '<>!=') and nxt != '=':
                out.append('==')
                continue
        out.append(c)
    return ''.join(out)


def literal_text(value: Any) -> str:
    """Render a bound value as source text for substitution."""
    if isinstance(value, str):
        return f'"{value}"'
    if math.isinf(value):
        # 1e999 parses back as an infinite double
        return '1e999' if value > 0 else '-1e999'
    return to_string(value)


class Evaluator:
    """Evaluates expressions, IF conditions and PRINT segments."""
    def __init__(self, rng: Optional[random.Random] = None,
                 debug: Optional[Callable[[str], None]] = None, debug_level: int = 0):
        self.rng = rng if rng is not None else random.Random()
        self.debug = debug if debug is not None else (lambda msg: None)
        self.debug_level = debug_level

    # Expressions
    def evaluate(self, expr: str, env: Environment) -> Any:
        text = expr.strip()
        if STRING_LITERAL_RE.fullmatch(text):
            return text[1:-1]
        number = parse_number(text)
        if number is not None:
            return number
        try:
            tree = parse_expression(text)
        except LarkError:
            raise BasicError(ErrorVal('CannotEvaluateExpression', f'Cannot evaluate expression: {text}'))
        try:
            return self.eval_node(tree, env)
        except (TypeError, ValueError, OverflowError) as e:
            raise BasicError(ErrorVal('CannotEvaluateExpression', f'Cannot evaluate expression: {text} ({e})'))

    def eval_node(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Ident):
            if node.name == 'RND':
                return lookup_builtin('RND').call([], self.rng)
            return env.get(node.name)
        if isinstance(node, Call):
            func = lookup_builtin(node.func)
            if func is None:
                raise BasicError(ErrorVal('CannotEvaluateExpression', f'Unknown function: {node.func}'))
            args = [self.eval_node(arg, env) for arg in node.args]
            return func.call(args, self.rng)
        if isinstance(node, UnaryOp):
            operand = self.eval_node(node.operand, env)
            if node.op == '!':
                return FALSE if self.is_truthy(operand) else TRUE
            if not is_number(operand):
                raise TypeError(f'unary {node.op} expects a number, got {type_name(operand)}')
            return -operand if node.op == '-' else operand
        if isinstance(node, BinaryOp):
            left = self.eval_node(node.left, env)
            # Short-circuit for && and ||
            if node.op == '&&':
                if not self.is_truthy(left):
                    return FALSE
                return TRUE if self.is_truthy(self.eval_node(node.right, env)) else FALSE
            if node.op == '||':
                if self.is_truthy(left):
                    return TRUE
                return TRUE if self.is_truthy(self.eval_node(node.right, env)) else FALSE
            right = self.eval_node(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        raise TypeError(f'unexpected node {type(node).__name__}')

    def is_truthy(self, value: Any) -> bool:
        if is_number(value):
            return value != 0
        if isinstance(value, str):
            return len(value) > 0
        return bool(value)

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op == '+':
            # If either operand is a string, concatenate
            if isinstance(a, str) or isinstance(b, str):
                return to_string(a) + to_string(b)
            return a + b
        if op in ('-', '*', '/'):
            if not (is_number(a) and is_number(b)):
                raise TypeError(f'unsupported {op} for {type_name(a)} and {type_name(b)}')
            if op == '-':
                return a - b
            if op == '*':
                return a * b
            if b == 0:
                raise BasicError(ErrorVal('DivisionByZero', 'Division by zero'))
            return a / b
        if op in ('==', '!=', '<>'):
            eq = self.equal_values(a, b)
            return TRUE if (eq if op == '==' else not eq) else FALSE
        if op in ('<', '>', '<=', '>='):
            if not ((is_number(a) and is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
                raise TypeError(f'comparison not supported for {type_name(a)} and {type_name(b)}')
            if op == '<': return TRUE if a < b else FALSE
            if op == '>': return TRUE if a > b else FALSE
            if op == '<=': return TRUE if a <= b else FALSE
            return TRUE if a >= b else FALSE
        raise TypeError(f'unknown operator {op}')

    def equal_values(self, a: Any, b: Any) -> bool:
        if is_number(a) and is_number(b):
            return a == b
        if isinstance(a, str) and isinstance(b, str):
            return a == b
        return False

    # Conditions
    def substitute(self, text: str, env: Environment) -> str:
        """Replace bound variables with their values and BASIC logical keywords
        with operators. Unbound identifiers are left as they are."""
        def replace(match):
            token = match.group(0)
            if token.startswith('"'):
                return token
            name = token.upper()
            if name in env:
                return literal_text(env.get(name))
            if name in LOGICAL_KEYWORDS:
                return LOGICAL_KEYWORDS[name]
            return token
        return TOKEN_RE.sub(replace, text)

    def evaluate_condition(self, cond: str, env: Environment) -> bool:
        original = cond.strip()
        rewritten = rewrite_equals(self.substitute(strip_enclosing_parens(original), env))
        if self.debug_level >= 3:
            self.debug(f"condition {original!r} -> {rewritten!r}")
        try:
            tree = parse_condition(rewritten)
            # every bound variable is already substituted
            result = self.is_truthy(self.eval_node(tree, Environment()))
        except (LarkError, BasicError, TypeError, ValueError, OverflowError):
            raise BasicError(ErrorVal(
                'CannotEvaluateCondition',
                f'Cannot evaluate condition: {original} (rewritten as {rewritten})',
            ))
        if self.debug_level >= 3:
            self.debug(f"condition result {result}")
        return result

    # PRINT
    def evaluate_print_part(self, part: str, env: Environment) -> Any:
        """Evaluate one PRINT segment.

        String literals print verbatim and bare variables must be bound.
        Anything the expression grammar cannot handle (for example a string
        followed by a variable) falls back to its literal text with quotes
        removed, bound variables filled in and unbound names left blank.
        """
        text = part.strip()
        if STRING_LITERAL_RE.fullmatch(text):
            return text[1:-1]
        if IDENT_RE.fullmatch(text):
            if text.upper() == 'RND':
                return lookup_builtin('RND').call([], self.rng)
            return env.get(text)
        try:
            return self.evaluate(text, env)
        except BasicError as ex:
            if ex.name != 'CannotEvaluateExpression':
                raise
            return self.render_literal(text, env)

    def render_literal(self, text: str, env: Environment) -> str:
        def replace(match):
            token = match.group(0)
            if token.startswith('"'):
                return token[1:-1]
            return to_string(env.lookup(token, ''))
        return TOKEN_RE.sub(replace, text)
