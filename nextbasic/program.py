"""Program store: turns raw source lines into an ordered, immutable program.

Each non-empty source line must look like ``<digits> <statement>``. The
resulting `Program` is sorted by line number and never changes while it
runs; the run loop only moves a program counter over it.
"""

from __future__ import annotations

import bisect
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import LoadError
from .types import ErrorVal

LINE_RE = re.compile(r'(\d+)\s+(.+)', re.DOTALL)
LINE_NUMBER_ONLY_RE = re.compile(r'\d+')


@dataclass(frozen=True)
class Statement:
    line_number: int
    source: str

    def __str__(self) -> str:
        return f"{self.line_number} {self.source}"


@dataclass(frozen=True)
class Program:
    statements: Tuple[Statement, ...] = ()
    line_numbers: List[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'line_numbers', [stmt.line_number for stmt in self.statements])

    def __len__(self) -> int:
        return len(self.statements)

    def __getitem__(self, index: int) -> Statement:
        return self.statements[index]

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    def index_of(self, line_number: int) -> Optional[int]:
        """Return the program-counter index of `line_number`, or None."""
        numbers = self.line_numbers
        i = bisect.bisect_left(numbers, line_number)
        if i < len(numbers) and numbers[i] == line_number:
            return i
        return None


def load_program(lines: Iterable[str]) -> Program:
    """Parse raw source lines into a `Program`.

    Blank lines and lines holding only a line number are skipped. Raises
    `LoadError` with ``InvalidLineFormat`` for any other line that lacks a
    leading line number, and ``DuplicateLineNumber`` when a number repeats.
    """
    entries: List[Statement] = []
    for raw in lines:
        line = raw.strip()
        if not line or LINE_NUMBER_ONLY_RE.fullmatch(line):
            continue
        match = LINE_RE.fullmatch(line)
        if match is None or int(match.group(1)) <= 0:
            raise LoadError(ErrorVal('InvalidLineFormat', f'Invalid line format: {line!r}'))
        entries.append(Statement(int(match.group(1)), match.group(2).strip()))

    counts = Counter(stmt.line_number for stmt in entries)
    duplicates = sorted(n for n, count in counts.items() if count > 1)
    if duplicates:
        listed = ', '.join(str(n) for n in duplicates)
        raise LoadError(ErrorVal('DuplicateLineNumber', f'Duplicate line numbers: {listed}'))

    entries.sort(key=lambda stmt: stmt.line_number)
    return Program(tuple(entries))


def load_source(source: str) -> Program:
    """Convenience wrapper that splits a source string into lines."""
    return load_program(source.splitlines())
