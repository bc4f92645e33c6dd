# NextBasic package
# This package provides a line-numbered BASIC interpreter for the NextOS terminal.
from .errors import BasicError, LoadError
from .interpreter import Interpreter, RunState, run_program
from .program import Program, Statement, load_program

__all__ = [
    'BasicError',
    'LoadError',
    'Interpreter',
    'RunState',
    'run_program',
    'Program',
    'Statement',
    'load_program',
]
