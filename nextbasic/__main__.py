"""CLI entry point for the NextBasic interpreter.

Usage:
    python -m nextbasic [-v|-vv|-vvv] [--throttle S] [--seed N] <program_file>
    python -m nextbasic [-v...] --fs FS_JSON [--cwd DIR] <path>
    python -m nextbasic [-v...]

Options:
  -v            Increase debug verbosity (can be repeated)
  --throttle    Seconds to pause after each statement (default 0.2)
  --seed        Seed for the RND generator
  --fs          Resolve the program path inside a JSON-seeded virtual filesystem
  --cwd         Current directory inside the virtual filesystem

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Without a program the interactive session
starts: numbered lines are stored, RUN/LIST/NEW/EXIT act on them.
"""

import argparse
import sys
from pathlib import Path
from .errors import FileSystemError, LoadError
from .interpreter import Interpreter, DEFAULT_THROTTLE
from .session import Session
from .std.io import ConsoleIO, VirtualFS


def read_program_lines(args) -> list:
    if args.fs:
        fs = VirtualFS.from_file(args.fs, cwd=args.cwd)
        return fs.read_lines(args.program)
    program_file = Path(args.program)
    if not program_file.exists():
        raise FileSystemError(args.program, 'No such file')
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read().splitlines()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="NextBasic interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--throttle', type=float, default=DEFAULT_THROTTLE, help='seconds to pause after each statement')
    parser.add_argument('--seed', type=int, default=None, help='seed for RND')
    parser.add_argument('--fs', metavar='FS_JSON', help='JSON-seeded virtual filesystem holding the program')
    parser.add_argument('--cwd', default='/', help='current directory inside the virtual filesystem')
    parser.add_argument('program', nargs='?', help='BASIC program file (.bas) to run')
    args = parser.parse_args(argv)

    io = ConsoleIO()
    with Interpreter(throttle=args.throttle, debug_level=args.v, seed=args.seed) as interpreter:
        if not args.program:
            Session(interpreter, io).loop()
            return 0
        try:
            lines = read_program_lines(args)
        except FileSystemError as e:
            print(str(e), file=sys.stderr)
            return 1
        try:
            program = interpreter.load(lines)
        except LoadError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        with io.break_on_interrupt(interpreter):
            error = interpreter.run(program, io.output, io.input)
    return 1 if error is not None else 0


if __name__ == '__main__':
    sys.exit(main())
