import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from lathe.common.transaction import (
    FileSystemAdapter,
    RealFileSystem,
    TransactionManager,
)
from lathe.errors import InvalidRequest, PartialCommitError
from lathe.lang.clojure.declaration import read_declaration
from lathe.lang.clojure.paths import normalize_path, path_to_namespace, to_unix_path
from lathe.lang.clojure.rewrite import update_dependent, update_own_namespace
from lathe.workspace import SourceRootProvider, Workspace
from .tracker import NamespaceTracker, TrackerFactory

log = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class RenamePlan:
    """
    Everything one source-file rename will do, computed before any write.

    `affected` holds the dependents' current paths and the moved file's new path.
    """

    old_path: Path
    new_path: Path
    old_ns: str
    new_ns: str
    transaction: TransactionManager
    dependents: List[Path] = field(default_factory=list)

    @property
    def affected(self) -> List[Path]:
        return self.dependents + [self.new_path]

    def preview(self) -> List[str]:
        return self.transaction.preview()


class RenameEngine:
    def __init__(
        self,
        workspace: Workspace,
        tracker_factory: Optional[TrackerFactory] = None,
        fs: Optional[FileSystemAdapter] = None,
        source_root_provider: Optional[SourceRootProvider] = None,
    ):
        self.workspace = workspace
        self.source_root_provider = source_root_provider or workspace
        self.tracker_factory = tracker_factory or NamespaceTracker.build
        self.fs = fs or RealFileSystem()
        # Operations committed so far by the rename in progress.
        self._applied: List[str] = []

    # --- Public API ---

    def rename(self, old_path: PathLike, new_path: PathLike) -> List[str]:
        """
        Renames a file or directory, updating every file that depends on the
        namespaces it moves. Returns the affected files as absolute posix paths.
        """
        old, new = self._validate(old_path, new_path)
        self._applied = []
        affected = self._rename(old, new)
        result = self._assemble(affected)
        if not new.is_dir():
            new_str = new.as_posix()
            if new_str not in result:
                result.append(new_str)
        return result

    def preview(self, old_path: PathLike, new_path: PathLike) -> List[str]:
        """Describes the operations a rename would stage, without applying them."""
        old, new = self._validate(old_path, new_path)
        descriptions: List[str] = []
        for src, dest in self._file_pairs(old, new):
            if self.workspace.is_source_file(src):
                descriptions.extend(self.plan_source_rename(src, dest).preview())
            else:
                tm = self._plain_move_transaction(src, dest)
                descriptions.extend(tm.preview())
        return descriptions

    def plan_source_rename(self, old_path: Path, new_path: Path) -> RenamePlan:
        old_text = self.fs.read_text(old_path)
        old_ns = read_declaration(old_text, old_path).name
        new_ns = path_to_namespace(new_path, self.source_root_provider.source_roots())

        tracker = self.tracker_factory(self.workspace)
        dependents = sorted(
            {normalize_path(p) for p in tracker.dependents(old_ns)} - {old_path}
        )
        log.debug(f"{old_ns} -> {new_ns}: {len(dependents)} dependent(s)")

        # Compute all new content first; a malformed dependent aborts here.
        new_contents: Dict[Path, str] = {}
        for dependent in dependents:
            new_contents[dependent] = update_dependent(
                self.fs.read_text(dependent), old_ns, new_ns, dependent
            )

        tm = TransactionManager(self.workspace.root_path, self.fs)
        tm.add_move(old_path, new_path)
        tm.add_prune(old_path.parent)
        tm.add_write(new_path, update_own_namespace(old_text, old_ns, new_ns))
        for dependent, content in new_contents.items():
            tm.add_write(dependent, content)

        return RenamePlan(
            old_path=old_path,
            new_path=new_path,
            old_ns=old_ns,
            new_ns=new_ns,
            transaction=tm,
            dependents=dependents,
        )

    # --- Internals ---

    def _validate(self, old_path: PathLike, new_path: PathLike):
        if old_path is None or not str(old_path).strip():
            raise InvalidRequest("old path must not be blank")
        if new_path is None or not str(new_path).strip():
            raise InvalidRequest("new path must not be blank")

        old = normalize_path(old_path)
        new = normalize_path(new_path)
        if not (old.is_file() or old.is_dir()):
            raise InvalidRequest(f"{old.as_posix()} is neither a file nor a directory")
        if old == new:
            raise InvalidRequest(f"{old.as_posix()} is already at the requested path")
        if old.is_dir() and new.is_relative_to(old):
            raise InvalidRequest(f"Cannot move {old.as_posix()} into itself")

        for _, dest in self._file_pairs(old, new):
            if dest.exists():
                raise InvalidRequest(f"{dest.as_posix()} already exists")
        return old, new

    def _file_pairs(self, old: Path, new: Path) -> List[tuple]:
        if not old.is_dir():
            return [(old, new)]
        return [
            (path, new / path.relative_to(old))
            for path in sorted(old.rglob("*"))
            if not path.is_dir()
        ]

    def _rename(self, old: Path, new: Path) -> List[Path]:
        if old.is_dir():
            return self._rename_dir(old, new)
        if self.workspace.is_source_file(old):
            return self._rename_source_file(old, new)
        return self._move_file(old, new)

    def _check_sources(self, pairs: List[tuple]) -> None:
        """
        Reads every declaration a directory rename will need, so that a bad
        file or a destination outside the source roots fails before any move.
        """
        roots = self.source_root_provider.source_roots()
        moving = {src for src, _ in pairs}
        old_names: List[str] = []
        for src, dest in pairs:
            if not self.workspace.is_source_file(src):
                continue
            old_names.append(read_declaration(self.fs.read_text(src), src).name)
            path_to_namespace(dest, roots)

        if not old_names:
            return
        tracker = self.tracker_factory(self.workspace)
        dependents = {
            normalize_path(p) for name in old_names for p in tracker.dependents(name)
        }
        for dependent in sorted(dependents - moving):
            read_declaration(self.fs.read_text(dependent), dependent)

    def _rename_dir(self, old: Path, new: Path) -> List[Path]:
        affected: List[Path] = []
        # Collect first: every rename below mutates the tree being walked.
        pairs = self._file_pairs(old, new)
        self._check_sources(pairs)
        for src, dest in pairs:
            affected.extend(self._rename(src, dest))
        return affected

    def _rename_source_file(self, old: Path, new: Path) -> List[Path]:
        plan = self.plan_source_rename(old, new)
        self._commit(plan.transaction)
        log.info(
            f"Moved {plan.old_ns} to {plan.new_ns}; rewrote {len(plan.dependents)} dependent(s)"
        )
        return plan.affected

    def _plain_move_transaction(self, old: Path, new: Path) -> TransactionManager:
        tm = TransactionManager(self.workspace.root_path, self.fs)
        tm.add_move(old, new)
        tm.add_prune(old.parent)
        return tm

    def _commit(self, tm: TransactionManager) -> None:
        try:
            self._applied.extend(tm.commit())
        except PartialCommitError as e:
            raise PartialCommitError(self._applied + e.applied, e.failed, e.cause) from e

    def _move_file(self, old: Path, new: Path) -> List[Path]:
        self._commit(self._plain_move_transaction(old, new))
        return [new]

    def _assemble(self, affected: Iterable[Path]) -> List[str]:
        result: List[str] = []
        seen = set()
        for path in affected:
            unix_path = to_unix_path(path)
            if unix_path in seen:
                continue
            seen.add(unix_path)
            candidate = Path(unix_path)
            if candidate.exists() and not candidate.is_dir():
                result.append(unix_path)
        return result
