import re
from typing import Any, Dict
from nextbasic.errors import BasicError
from nextbasic.types import ErrorVal, is_number

NAME_RE = re.compile(r'[A-Za-z]\w*')


def check_name(name: str) -> str:
    """Validate a variable name and return its normalized (upper-case) form."""
    if not NAME_RE.fullmatch(name):
        raise BasicError(ErrorVal('InvalidVariableName', f'Invalid variable name: {name}'))
    return name.upper()


class Environment:
    """Variable bindings for one run. Names are matched case-insensitively."""
    def __init__(self):
        self.values: Dict[str, Any] = {}

    def __contains__(self, name: str) -> bool:
        return name.upper() in self.values

    def get(self, name: str) -> Any:
        key = name.upper()
        if key in self.values:
            return self.values[key]
        raise BasicError(ErrorVal('UndefinedVariable', f'Undefined variable: {key}'))

    def lookup(self, name: str, default: Any = None) -> Any:
        return self.values.get(name.upper(), default)

    def set(self, name: str, value: Any):
        if not (is_number(value) or isinstance(value, str)):
            raise BasicError(ErrorVal('CannotEvaluateExpression', f'cannot assign {value!r} to {name}'))
        if is_number(value):
            try:
                value = float(value)
            except OverflowError:
                raise BasicError(ErrorVal('CannotEvaluateExpression', f'number too large for {name}'))
        self.values[check_name(name)] = value

    def clear(self):
        self.values.clear()
