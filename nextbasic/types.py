"""Runtime value helpers for NextBasic.

BASIC values are either numbers or strings. Every number is a double
(Python ``float``), so arithmetic rounds and overflows to infinity the way
the terminal's did. This module holds the error value carried by interpreter faults and the
helpers that parse and format numbers the way the terminal shows them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
import math
import re


NUMBER_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')


@dataclass(frozen=True)
class ErrorVal:
    """Describes a load-time or runtime fault.

    `name` is the fault kind (for example ``UndefinedVariable`` or
    ``ZeroStep``) and `message` is the text shown to the user after
    ``Error at line <n>: ``.
    """
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a BASIC number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_number(text: str) -> Optional[float]:
    """Return the numeric value of `text`, or None if it is not a number.

    The whole string must be a number; ``"12abc"`` is not one. Integers
    beyond 2**53 round to the nearest double.
    """
    text = text.strip()
    if not NUMBER_RE.fullmatch(text):
        return None
    return float(text)


def format_number(value: Any) -> str:
    value = float(value)
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def to_string(value: Any) -> str:
    """Render a value for PRINT output."""
    if isinstance(value, bool):
        return '1' if value else '0'
    if is_number(value):
        return format_number(value)
    if value is None:
        return ''
    return str(value)


def type_name(value: Any) -> str:
    if is_number(value):
        return 'Number'
    if isinstance(value, str):
        return 'String'
    return type(value).__name__
