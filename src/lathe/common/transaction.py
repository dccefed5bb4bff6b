import logging
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Union

from lathe.errors import PartialCommitError

log = logging.getLogger(__name__)


class FileSystemAdapter(Protocol):
    def write_text(self, path: Path, content: str) -> None: ...
    def read_text(self, path: Path) -> str: ...
    def move(self, src: Path, dest: Path) -> None: ...
    def exists(self, path: Path) -> bool: ...
    def is_empty_dir(self, path: Path) -> bool: ...
    def rmdir(self, path: Path) -> None: ...


class RealFileSystem:
    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def move(self, src: Path, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dest))

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_empty_dir(self, path: Path) -> bool:
        return path.is_dir() and not any(path.iterdir())

    def rmdir(self, path: Path) -> None:
        path.rmdir()


@dataclass
class FileOp(ABC):
    path: Path

    @abstractmethod
    def execute(self, fs: FileSystemAdapter, root: Path) -> None: ...

    @abstractmethod
    def describe(self) -> str: ...


@dataclass
class WriteFileOp(FileOp):
    content: str

    def execute(self, fs: FileSystemAdapter, root: Path) -> None:
        fs.write_text(root / self.path, self.content)

    def describe(self) -> str:
        return f"[WRITE] {self.path}"


@dataclass
class MoveFileOp(FileOp):
    dest: Path

    def execute(self, fs: FileSystemAdapter, root: Path) -> None:
        fs.move(root / self.path, root / self.dest)

    def describe(self) -> str:
        return f"[MOVE] {self.path} -> {self.dest}"


@dataclass
class PruneEmptyDirsOp(FileOp):
    """Removes `path` and its ancestors while they are empty, never touching `root`."""

    def execute(self, fs: FileSystemAdapter, root: Path) -> None:
        current = root / self.path
        while (
            current != root
            and current.is_relative_to(root)
            and fs.is_empty_dir(current)
        ):
            fs.rmdir(current)
            current = current.parent

    def describe(self) -> str:
        return f"[PRUNE] {self.path}"


class TransactionManager:
    """
    Stages file operations and applies them in order on `commit()`.

    Staging never touches the file system, so everything that can fail while
    computing new content fails before the first mutation. There is no
    rollback: a failure during `commit()` raises `PartialCommitError` naming
    the operations already applied.
    """

    def __init__(self, root_path: Path, fs: Optional[FileSystemAdapter] = None):
        self.root_path = root_path
        self.fs = fs or RealFileSystem()
        self._ops: List[FileOp] = []

    def _relative(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if path.is_absolute() and path.is_relative_to(self.root_path):
            return path.relative_to(self.root_path)
        return path

    def add_write(self, path: Union[str, Path], content: str) -> None:
        self._ops.append(WriteFileOp(self._relative(path), content))

    def add_move(self, src: Union[str, Path], dest: Union[str, Path]) -> None:
        self._ops.append(MoveFileOp(self._relative(src), self._relative(dest)))

    def add_prune(self, path: Union[str, Path]) -> None:
        self._ops.append(PruneEmptyDirsOp(self._relative(path)))

    def preview(self) -> List[str]:
        return [op.describe() for op in self._ops]

    def commit(self) -> List[str]:
        """Applies the staged operations in order and returns their descriptions."""
        applied: List[str] = []
        for op in self._ops:
            try:
                op.execute(self.fs, self.root_path)
            except OSError as e:
                log.error(
                    f"{op.describe()} failed after {len(applied)} applied operation(s); "
                    f"already applied: {applied}"
                )
                raise PartialCommitError(applied, op.describe(), e) from e
            applied.append(op.describe())
        self._ops.clear()
        return applied

    @property
    def pending_count(self) -> int:
        return len(self._ops)
