from pathlib import Path
from typing import List, Optional, Union


class LatheError(Exception):
    pass


class InvalidRequest(LatheError):
    pass


class NoSourceRootFound(LatheError):
    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        super().__init__(f"Can't find a source root containing path {self.path}")


class MalformedDeclaration(LatheError):
    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = str(path) if path is not None else None
        if self.path:
            message = f"{message} ({self.path})"
        super().__init__(message)


class ReaderError(MalformedDeclaration):
    def __init__(self, message: str, offset: int):
        self.offset = offset
        super().__init__(f"{message} at offset {offset}")


class AnalyzerError(LatheError):
    pass


class PartialCommitError(LatheError):
    """
    Raised when a staged change set fails half-way through being applied.

    Nothing is rolled back: `applied` lists the operations that already
    reached the file system, `failed` the one that raised.
    """

    def __init__(self, applied: List[str], failed: str, cause: BaseException):
        self.applied = applied
        self.failed = failed
        self.cause = cause
        super().__init__(
            f"Commit failed at {failed} after {len(applied)} applied operation(s): {cause}"
        )
