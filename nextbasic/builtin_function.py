import math
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from nextbasic.errors import BasicError
from nextbasic.types import ErrorVal, is_number


@dataclass
class BuiltinFunction:
    name: str
    min_args: int
    max_args: int
    fn: Callable[[List[Any], random.Random], Any]

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"

    def call(self, args: List[Any], rng: random.Random) -> Any:
        if not self.min_args <= len(args) <= self.max_args:
            if self.min_args == self.max_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args} to {self.max_args}"
            raise BasicError(ErrorVal('CannotEvaluateExpression', f"{self.name} expects {expected} argument(s)"))
        return self.fn(args, rng)


def basic_rnd(args: List[Any], rng: random.Random) -> float:
    # The argument of RND(x) is accepted for compatibility and ignored
    return rng.random()


def basic_int(args: List[Any], rng: random.Random) -> float:
    value = args[0]
    if not is_number(value):
        raise BasicError(ErrorVal('CannotEvaluateExpression', 'INT argument must be a number'))
    if not math.isfinite(value):
        return float(value)
    return float(math.floor(value))


BUILTINS: Dict[str, BuiltinFunction] = {
    'RND': BuiltinFunction('RND', 0, 1, basic_rnd),
    'INT': BuiltinFunction('INT', 1, 1, basic_int),
}


def lookup_builtin(name: str) -> Optional[BuiltinFunction]:
    return BUILTINS.get(name.upper())
