import logging
import os
from pathlib import Path
from typing import List, Optional, Protocol, Union

from lathe.config import LatheConfig, load_config_from_path
from lathe.errors import LatheError
from lathe.lang.clojure.paths import is_source_file, normalize_path
from lathe.lang.clojure.reader import (
    Keyword,
    ListForm,
    MapForm,
    StringLit,
    Symbol,
    VectorForm,
    read_first_form,
)

log = logging.getLogger(__name__)

ROOT_MARKERS = ("pyproject.toml", "deps.edn", "project.clj", ".git")
DEFAULT_SOURCE_DIRS = ("src", "test")


class WorkspaceNotFoundError(LatheError):
    def __init__(self, start_path: Union[str, Path]):
        self.start_path = str(start_path)
        super().__init__(
            f"Could not locate a project root above '{start_path}'. "
            "Expected one of: " + ", ".join(ROOT_MARKERS)
        )


def find_workspace_root(start_path: Path) -> Path:
    current = normalize_path(start_path)
    if current.is_file():
        current = current.parent
    while True:
        if any((current / marker).exists() for marker in ROOT_MARKERS):
            return current
        if current.parent == current:
            raise WorkspaceNotFoundError(start_path)
        current = current.parent


class SourceRootProvider(Protocol):
    def source_roots(self) -> List[Path]: ...


def _string_paths(form) -> List[str]:
    if isinstance(form, VectorForm):
        return [item.value for item in form.items if isinstance(item, StringLit)]
    return []


class Workspace:
    def __init__(self, root_path: Path, config: Optional[LatheConfig] = None):
        self.root_path = normalize_path(root_path)
        self.config = config or load_config_from_path(self.root_path)

    @classmethod
    def discover(cls, start_path: Optional[Path] = None) -> "Workspace":
        return cls(find_workspace_root(start_path or Path.cwd()))

    # --- Source roots ---

    def _paths_from_deps_edn(self) -> List[str]:
        deps_file = self.root_path / "deps.edn"
        if not deps_file.is_file():
            return []
        try:
            form = read_first_form(deps_file.read_text(encoding="utf-8"))
        except LatheError as e:
            log.warning(f"Could not read {deps_file}: {e}")
            return []
        if not isinstance(form, MapForm):
            return []
        return _string_paths(form.get(Keyword("paths")))

    def _paths_from_project_clj(self) -> List[str]:
        project_file = self.root_path / "project.clj"
        if not project_file.is_file():
            return []
        try:
            form = read_first_form(project_file.read_text(encoding="utf-8"))
        except LatheError as e:
            log.warning(f"Could not read {project_file}: {e}")
            return []
        if not (
            isinstance(form, ListForm)
            and form.items
            and form.items[0] == Symbol("defproject")
        ):
            return []
        # (defproject name "version" :key value ...)
        options = form.items[3:]
        paths: List[str] = []
        for key, value in zip(options[::2], options[1::2]):
            if key in (Keyword("source-paths"), Keyword("test-paths")):
                paths.extend(_string_paths(value))
        return paths

    def source_roots(self) -> List[Path]:
        configured = (
            self.config.source_roots
            or self._paths_from_deps_edn()
            or self._paths_from_project_clj()
        )
        if configured:
            return [normalize_path(self.root_path / p) for p in configured]

        defaults = [
            self.root_path / d
            for d in DEFAULT_SOURCE_DIRS
            if (self.root_path / d).is_dir()
        ]
        return defaults or [self.root_path]

    # --- Files ---

    def is_source_file(self, path: Union[str, Path]) -> bool:
        return is_source_file(path, self.config.extensions)

    def discover_files(self, directory: Optional[Path] = None) -> List[Path]:
        """All source files below `directory` (default: every source root), sorted."""
        search_dirs = (
            [normalize_path(directory)] if directory is not None else self.source_roots()
        )
        found = set()
        for search_dir in search_dirs:
            if not search_dir.is_dir():
                continue
            for root, dirs, files in os.walk(search_dir):
                dirs[:] = [d for d in dirs if not d.startswith(".")]
                for name in files:
                    path = Path(root) / name
                    if self.is_source_file(path):
                        found.add(path)
        return sorted(found)
