import builtins
import signal
import threading
from contextlib import contextmanager
from typing import Iterator


class ConsoleIO:
    """Output/input adapter that talks to the process console."""
    def output(self, line: str):
        print(line)

    def input(self, prompt: str) -> str:
        if prompt:
            print(prompt)
        try:
            return builtins.input()
        except EOFError:
            return ''

    def read_line(self, prompt: str) -> str:
        """Read one command line; EOFError ends the session."""
        return builtins.input(prompt)

    @contextmanager
    def break_on_interrupt(self, interpreter) -> Iterator[None]:
        """Route Ctrl+C to `interpreter.request_break()` while the block runs."""
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        previous = signal.signal(signal.SIGINT, lambda signum, frame: interpreter.request_break())
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)
