from pathlib import Path

import pytest

from nextbasic.interpreter import Interpreter

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / 'examples'


@pytest.fixture
def example_path():
    def resolve(name: str) -> str:
        return str(EXAMPLES_DIR / name)
    return resolve


@pytest.fixture
def run_basic():
    """Run program lines, feeding `inputs` to INPUT statements.

    Returns ``(output_lines, interpreter)``.
    """
    def run(lines, inputs=(), seed=None):
        interp = Interpreter(seed=seed)
        program = interp.load(lines)
        out = []
        pending = list(inputs)
        interp.run(program, out.append, lambda prompt: pending.pop(0))
        return out, interp
    return run
