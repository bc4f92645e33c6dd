"""Interactive line-entry session.

Typing a numbered line stores it (or deletes it when only the number is
given); ``RUN``, ``LIST``, ``NEW`` and ``EXIT`` act on the stored program.
"""

import re
from typing import Callable, Dict, Optional

from .errors import LoadError
from .interpreter import Interpreter
from .std.io import ConsoleIO

BANNER = ['NEXTOS BASIC v0.1', '================', '']
STORE_RE = re.compile(r'(\d+)\s*(.*)', re.DOTALL)


class Session:
    def __init__(self, interpreter: Optional[Interpreter] = None, io: Optional[ConsoleIO] = None,
                 output: Optional[Callable[[str], None]] = None, input: Optional[Callable[[str], str]] = None,
                 read_line: Optional[Callable[[str], str]] = None):
        self.interpreter = interpreter if interpreter is not None else Interpreter()
        self.io = io if io is not None else ConsoleIO()
        self.output = output if output is not None else self.io.output
        self.input = input if input is not None else self.io.input
        self.read_line = read_line if read_line is not None else self.io.read_line
        self.lines: Dict[int, str] = {}
        self.active = True

    def store_line(self, number: int, code: str):
        if code:
            self.lines[number] = code
        else:
            self.lines.pop(number, None)

    def source_lines(self):
        return [f"{n} {code}" for n, code in sorted(self.lines.items())]

    def handle_line(self, line: str) -> bool:
        """Process one typed line; returns False once the session has ended."""
        line = line.strip()
        if not line:
            return self.active
        m = STORE_RE.fullmatch(line)
        if m:
            self.store_line(int(m.group(1)), m.group(2).strip())
            return self.active
        command = line.split()[0].upper()
        if command == 'RUN':
            self.run()
        elif command == 'LIST':
            for n, code in sorted(self.lines.items()):
                self.output(f"{n:>4} {code}")
        elif command == 'NEW':
            self.lines.clear()
            self.interpreter.variables.clear()
        elif command == 'EXIT':
            self.active = False
        else:
            self.output('SYNTAX ERROR')
        return self.active

    def run(self):
        try:
            program = self.interpreter.load(self.source_lines())
        except LoadError as ex:
            self.output(f"Error: {ex.message}")
        else:
            with self.io.break_on_interrupt(self.interpreter):
                self.interpreter.run(program, self.output, self.input)
        self.output('READY')

    def stop(self):
        """Host-forced termination of the running program."""
        self.interpreter.stop()
        self.output('')
        self.output('[Program stopped]')
        self.output('')

    def loop(self, prompt: str = '> '):
        for line in BANNER:
            self.output(line)
        while self.active:
            try:
                line = self.read_line(prompt)
            except EOFError:
                break
            self.handle_line(line)
