"""JSON-seeded virtual filesystem used to locate BASIC programs.

The tree is a nest of directory nodes ``{"type": "dir", "children": {...}}``
whose leaves are text files ``{"type": "txt", "content": "..."}``. Paths
are resolved against a current directory and may be absolute, relative,
and contain ``.`` and ``..`` segments.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from nextbasic.errors import FileSystemError


def normalize_path(cwd: List[str], path: str) -> List[str]:
    parts = [] if path.startswith('/') else list(cwd)
    for segment in path.split('/'):
        if segment in ('', '.'):
            continue
        if segment == '..':
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return parts


class VirtualFS:
    def __init__(self, root: Dict[str, Any], cwd: str = '/'):
        self.root = root
        self.cwd = normalize_path([], cwd)

    @classmethod
    def from_json(cls, text: str, cwd: str = '/') -> 'VirtualFS':
        return cls(json.loads(text), cwd)

    @classmethod
    def from_file(cls, path: Union[str, Path], cwd: str = '/') -> 'VirtualFS':
        with open(path, 'r', encoding='utf-8') as f:
            return cls(json.load(f), cwd)

    def get_node(self, parts: List[str]) -> Optional[Dict[str, Any]]:
        node = self.root
        for part in parts:
            children = node.get('children')
            if not children or part not in children:
                return None
            node = children[part]
        return node

    def read_text(self, path: str) -> str:
        node = self.get_node(normalize_path(self.cwd, path))
        if node is None:
            raise FileSystemError(path, 'No such file')
        if node.get('type') != 'txt':
            raise FileSystemError(path, 'Not a text file')
        return node.get('content', '')

    def read_lines(self, path: str) -> List[str]:
        return self.read_text(path).split('\n')
