from nextbasic.types import ErrorVal


class BasicError(Exception):
    """Exception type used to propagate NextBasic runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err

    @property
    def name(self) -> str:
        return self.err.name

    @property
    def message(self) -> str:
        return self.err.message


class LoadError(BasicError):
    """Raised when program text cannot be loaded; the run never starts."""


class FileSystemError(Exception):
    """Raised by the virtual filesystem when a path cannot be read as a program."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"run: '{path}': {reason}")
        self.path = path
        self.reason = reason
