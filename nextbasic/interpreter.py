"""Interpreter for NextBasic programs.

This module holds the statement executor and the run loop. A loaded
`Program` is executed one statement at a time against a fresh
`MachineState`; each statement yields a control result (continue, jump to
a line, resume at a program-counter position, halt, or wait for input)
that the loop turns into the next program counter.

Input is cooperative: an INPUT statement parks the loop in the
``WAITING_FOR_INPUT`` state until the host calls `Interpreter.resume`.
The `run` and `run_async` drivers do that automatically with a host
supplied ``input`` callback. A host may also call `request_break` at any
time; the flag is honoured at the top of the next step.
"""

from __future__ import annotations

import asyncio
import builtins
import enum
import inspect
import random
import re
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from .environment import Environment, check_name
from .errors import BasicError
from .evaluator import Evaluator
from .program import Program, Statement, load_program
from .types import ErrorVal, is_number, parse_number, to_string

OutputFn = Callable[[str], None]
InputFn = Callable[[str], Union[str, Awaitable[str]]]

DEFAULT_THROTTLE = 0.2

COMMANDS = ('PRINT', 'LET', 'INPUT', 'GOTO', 'GOSUB', 'RETURN', 'IF', 'FOR', 'NEXT', 'END', 'REM')

_FLAGS = re.IGNORECASE | re.DOTALL
COMMAND_RE = re.compile(r'([A-Za-z]+)(?!\w)')
LET_ARGS_RE = re.compile(r'\s+(\S+?)\s*=\s*(.+)', _FLAGS)
INPUT_ARGS_RE = re.compile(r'\s*(?:"([^"]*)"\s*;\s*)?([^\s";]+)\s*', _FLAGS)
LINE_ARG_RE = re.compile(r'\s*(\d+)\s*')
IF_ARGS_RE = re.compile(r'\s+(.+?)\s+THEN\s+(.+)', _FLAGS)
FOR_ARGS_RE = re.compile(r'\s+(\S+?)\s*=\s*(.+?)\s+TO\s+(.+?)(?:\s+STEP\s+(.+))?', _FLAGS)
NEXT_ARGS_RE = re.compile(r'\s+(\S+)\s*', _FLAGS)
IMPLICIT_LET_RE = re.compile(r'(\S+?)\s*=\s*(.+)', _FLAGS)
LINE_NUMBER_RE = re.compile(r'\d+')


###############################################################################
# Machine state and control results
###############################################################################


class RunState(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    WAITING_FOR_INPUT = 'waiting_for_input'
    HALTED = 'halted'


@dataclass
class ForLoop:
    end: Any
    step: Any
    return_index: int  # program counter of the FOR statement


@dataclass
class MachineState:
    variables: Environment = field(default_factory=Environment)
    return_stack: List[int] = field(default_factory=list)
    for_loops: Dict[str, ForLoop] = field(default_factory=dict)
    program_counter: int = 0
    running: bool = False
    break_requested: bool = False


@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class JumpTo:
    line_number: int


@dataclass(frozen=True)
class Resume:
    index: int  # program counter, not a line number


@dataclass(frozen=True)
class Halt:
    pass


@dataclass(frozen=True)
class AwaitInput:
    name: str
    prompt: str


Next = Union[Continue, JumpTo, Resume, Halt, AwaitInput]

CONTINUE = Continue()
HALT = Halt()


def split_print_args(text: str) -> List[tuple]:
    """Split PRINT arguments on top-level ``,`` and ``;``.

    Returns ``(segment, separator)`` pairs; the separator is None for a
    trailing segment. Separators inside string literals do not split.
    """
    parts = []
    current = ''
    in_string = False
    for c in text:
        if c == '"':
            in_string = not in_string
        if not in_string and c in ',;':
            parts.append((current.strip(), c))
            current = ''
        else:
            current += c
    if current.strip():
        parts.append((current.strip(), None))
    return parts


def fault(name: str, message: str) -> BasicError:
    return BasicError(ErrorVal(name, message))


###############################################################################
# Interpreter implementation
###############################################################################


class Interpreter:
    """Runs loaded NextBasic programs.

    One interpreter runs one program at a time; construct several to run
    programs in isolation.
    """
    def __init__(self, throttle: float = 0.0, debug_level: int = 0,
                 debug_file: str = 'debug.txt', seed: Optional[int] = None):
        self.throttle = throttle
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.evaluator = Evaluator(random.Random(seed), self.debug, debug_level)
        self.program = Program()
        self.machine = MachineState()
        self.status = RunState.IDLE
        self.error: Optional[ErrorVal] = None
        self.pending: Optional[AwaitInput] = None
        self.output: OutputFn = lambda line: None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def variables(self) -> Environment:
        return self.machine.variables

    @property
    def pending_prompt(self) -> Optional[str]:
        return self.pending.prompt if self.pending is not None else None

    # Public API
    def load(self, lines: Iterable[str]) -> Program:
        self.program = load_program(lines)
        return self.program

    def start(self, program: Optional[Program] = None, output: Optional[OutputFn] = None):
        if program is not None:
            self.program = program
        if output is not None:
            self.output = output
        self.machine = MachineState(running=True)
        self.error = None
        self.pending = None
        self.status = RunState.RUNNING
        if self.debug_level >= 1:
            self.debug(f"run: {len(self.program)} statements")

    def step(self) -> RunState:
        """Execute at most one statement and return the resulting state."""
        if self.status is not RunState.RUNNING:
            return self.status
        machine = self.machine
        if not machine.running:
            return self._halt('stopped')
        if machine.break_requested:
            self.output('[BREAK]')
            return self._halt('break')
        if machine.program_counter >= len(self.program):
            return self._halt('end of program')
        stmt = self.program[machine.program_counter]
        try:
            result = self.execute(stmt, machine)
            self.transfer(stmt, result)
        except BasicError as ex:
            self._fail(stmt, ex.err)
        return self.status

    def resume(self, value: str) -> RunState:
        """Complete a waiting INPUT statement with the text the user typed."""
        if self.status is not RunState.WAITING_FOR_INPUT or self.pending is None:
            raise RuntimeError('interpreter is not waiting for input')
        pending = self.pending
        self.pending = None
        text = str(value).strip()
        number = parse_number(text)
        self.machine.variables.set(pending.name, number if number is not None else text)
        if self.debug_level >= 2:
            self.debug(f"input {pending.name} = {text!r}")
        self.status = RunState.RUNNING
        self.machine.program_counter += 1
        if self.machine.program_counter >= len(self.program):
            self._halt('end of program')
        return self.status

    def request_break(self):
        self.machine.break_requested = True

    def stop(self):
        self.machine.running = False
        if self.status in (RunState.RUNNING, RunState.WAITING_FOR_INPUT):
            self._halt('stopped')

    def run(self, program: Program, output: OutputFn, input: Callable[[str], str]) -> Optional[ErrorVal]:
        """Run `program` to completion, blocking on `input` for INPUT statements.

        Returns the error that halted the run, or None.
        """
        self.start(program, output)
        while self.status is not RunState.HALTED:
            status = self.step()
            if status is RunState.WAITING_FOR_INPUT:
                value = input(self.pending.prompt)
                # the host may have stopped the run while we waited
                if self.status is RunState.WAITING_FOR_INPUT:
                    self.resume(value)
            elif status is RunState.RUNNING and self.throttle > 0:
                time.sleep(self.throttle)
        return self.error

    async def run_async(self, program: Program, output: OutputFn, input: InputFn) -> Optional[ErrorVal]:
        """Asyncio variant of `run`; `input` may return an awaitable."""
        self.start(program, output)
        while self.status is not RunState.HALTED:
            status = self.step()
            if status is RunState.WAITING_FOR_INPUT:
                value = input(self.pending.prompt)
                if inspect.isawaitable(value):
                    value = await value
                if self.status is RunState.WAITING_FOR_INPUT:
                    self.resume(value)
            elif status is RunState.RUNNING:
                await asyncio.sleep(self.throttle)
        return self.error

    # Run loop internals
    def transfer(self, stmt: Statement, result: Next):
        machine = self.machine
        if isinstance(result, Continue):
            machine.program_counter += 1
        elif isinstance(result, JumpTo):
            index = self.program.index_of(result.line_number)
            if index is None:
                raise fault('GotoTargetMissing', f'Line {result.line_number} does not exist')
            if self.debug_level >= 3:
                self.debug(f"jump {stmt.line_number} -> {result.line_number}")
            machine.program_counter = index
        elif isinstance(result, Resume):
            machine.program_counter = result.index
        elif isinstance(result, Halt):
            self._halt('END')
            return
        elif isinstance(result, AwaitInput):
            self.pending = result
            self.status = RunState.WAITING_FOR_INPUT
            return
        if machine.program_counter >= len(self.program):
            self._halt('end of program')

    def _halt(self, reason: str) -> RunState:
        self.machine.running = False
        self.pending = None
        self.status = RunState.HALTED
        if self.debug_level >= 1:
            self.debug(f"halt: {reason}")
        return self.status

    def _fail(self, stmt: Statement, err: ErrorVal):
        self.error = err
        if self.debug_level >= 1:
            self.debug(f"error at line {stmt.line_number}: {err.name}: {err.message}")
        self.output(f"Error at line {stmt.line_number}: {err.message}")
        self._halt('error')

    # Statement executor
    def execute(self, stmt: Statement, machine: MachineState) -> Next:
        code = stmt.source.strip()
        env = machine.variables
        if self.debug_level >= 2:
            self.debug(f"{stmt.line_number} {code}")
        match = COMMAND_RE.match(code)
        command = match.group(1).upper() if match else ''
        if command not in COMMANDS:
            return self.exec_assignment(code, env)
        rest = code[match.end():]
        if command == 'PRINT':
            self.exec_print(rest, env)
            return CONTINUE
        if command == 'LET':
            m = LET_ARGS_RE.fullmatch(rest)
            if m is None:
                raise fault('InvalidLetSyntax', f'Invalid LET syntax: {code}')
            name = check_name(m.group(1))
            env.set(name, self.evaluator.evaluate(m.group(2), env))
            return CONTINUE
        if command == 'INPUT':
            m = INPUT_ARGS_RE.fullmatch(rest)
            if m is None:
                raise fault('InvalidInputSyntax', f'Invalid INPUT syntax: {code}')
            return AwaitInput(check_name(m.group(2)), m.group(1) or '')
        if command in ('GOTO', 'GOSUB'):
            m = LINE_ARG_RE.fullmatch(rest)
            if m is None:
                raise fault(f'Invalid{command.capitalize()}Syntax', f'Invalid {command} syntax: {code}')
            if command == 'GOSUB':
                machine.return_stack.append(machine.program_counter + 1)
            return JumpTo(int(m.group(1)))
        if command == 'RETURN':
            if not machine.return_stack:
                raise fault('ReturnWithoutGosub', 'RETURN without GOSUB')
            return Resume(machine.return_stack.pop())
        if command == 'IF':
            return self.exec_if(stmt, rest, machine)
        if command == 'FOR':
            return self.exec_for(rest, machine)
        if command == 'NEXT':
            return self.exec_next(rest, machine)
        if command == 'END':
            return HALT
        # REM
        return CONTINUE

    def exec_print(self, args: str, env: Environment):
        out = ''
        last_sep = None
        for i, (part, sep) in enumerate(split_print_args(args.strip())):
            value = self.evaluator.evaluate_print_part(part, env)
            # a space only follows a ',' separator
            if i > 0 and last_sep == ',':
                out += ' '
            out += to_string(value)
            last_sep = sep
        self.output(out)

    def exec_if(self, stmt: Statement, rest: str, machine: MachineState) -> Next:
        m = IF_ARGS_RE.fullmatch(rest)
        if m is None:
            raise fault('InvalidIfSyntax', f'Invalid IF syntax: {stmt.source}')
        if not self.evaluator.evaluate_condition(m.group(1), machine.variables):
            return CONTINUE
        then_part = m.group(2).strip()
        if LINE_NUMBER_RE.fullmatch(then_part):
            return JumpTo(int(then_part))
        # THEN clause runs as if it were the statement on this line
        return self.execute(Statement(stmt.line_number, then_part), machine)

    def exec_for(self, rest: str, machine: MachineState) -> Next:
        m = FOR_ARGS_RE.fullmatch(rest)
        if m is None:
            raise fault('InvalidForSyntax', f'Invalid FOR syntax: FOR{rest}')
        name = check_name(m.group(1))
        env = machine.variables
        start = self.evaluator.evaluate(m.group(2), env)
        end = self.evaluator.evaluate(m.group(3), env)
        step = self.evaluator.evaluate(m.group(4), env) if m.group(4) else 1.0
        if not (is_number(start) and is_number(end) and is_number(step)):
            raise fault('NonNumericForBounds', f'FOR bounds must be numbers: FOR{rest}')
        if step == 0:
            raise fault('ZeroStep', 'FOR STEP cannot be zero')
        env.set(name, start)
        machine.for_loops[name] = ForLoop(end, step, machine.program_counter)
        return CONTINUE

    def exec_next(self, rest: str, machine: MachineState) -> Next:
        m = NEXT_ARGS_RE.fullmatch(rest)
        if m is None:
            raise fault('InvalidNextSyntax', f'Invalid NEXT syntax: NEXT{rest}')
        name = check_name(m.group(1))
        loop = machine.for_loops.get(name)
        if loop is None:
            raise fault('NextWithoutFor', f'NEXT without FOR: {name}')
        env = machine.variables
        value = env.get(name)
        if not is_number(value):
            raise fault('NonNumericForBounds', f'FOR variable {name} is not a number')
        value += loop.step
        env.set(name, value)
        if (loop.step > 0 and value <= loop.end) or (loop.step < 0 and value >= loop.end):
            return Resume(loop.return_index + 1)
        del machine.for_loops[name]
        return CONTINUE

    def exec_assignment(self, code: str, env: Environment) -> Next:
        m = IMPLICIT_LET_RE.fullmatch(code) if '=' in code else None
        if m is None:
            word = code.split()[0] if code.split() else code
            raise fault('UnknownCommand', f"Unknown command: {word} (valid commands: {', '.join(COMMANDS)})")
        name = check_name(m.group(1))
        env.set(name, self.evaluator.evaluate(m.group(2), env))
        return CONTINUE


def run_program(source: str, output: OutputFn = print, input: Optional[Callable[[str], str]] = None,
                throttle: float = 0.0, seed: Optional[int] = None) -> Optional[ErrorVal]:
    """Convenience function to load and run a NextBasic program from source text."""
    if input is None:
        input = builtins.input
    interpreter = Interpreter(throttle=throttle, seed=seed)
    program = interpreter.load(source.splitlines())
    return interpreter.run(program, output, input)
