from .basic_io import ConsoleIO
from .virtual_fs import VirtualFS, normalize_path

__all__ = [
    'ConsoleIO',
    'VirtualFS',
    'normalize_path',
]
