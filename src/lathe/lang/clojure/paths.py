import os
from pathlib import Path, PurePosixPath
from typing import Iterable, Sequence, Union

from lathe.errors import NoSourceRootFound

PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> Path:
    """Absolute, `..`-free form of `path`; the file does not need to exist."""
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(path)))))


def to_unix_path(path: PathLike) -> str:
    return normalize_path(path).as_posix()


def chop_source_root(path: PathLike, source_roots: Iterable[PathLike]) -> str:
    """
    Returns `path` relative to the source root that contains it.

    When several roots contain the path the most specific one, i.e. the one
    leaving the shortest relative path, wins. The first root wins a tie.
    """
    target = normalize_path(path)
    relative_paths = []
    for root in source_roots:
        root = normalize_path(root)
        if target != root and target.is_relative_to(root):
            relative_paths.append(target.relative_to(root).as_posix())

    if not relative_paths:
        raise NoSourceRootFound(target.as_posix())
    return min(relative_paths, key=len).lstrip("/")


def file_to_namespace(relative_path: str) -> str:
    """`my_app/core.clj` -> `my-app.core`"""
    stem, _ = os.path.splitext(relative_path)
    return stem.replace("/", ".").replace("_", "-")


def path_to_namespace(path: PathLike, source_roots: Iterable[PathLike]) -> str:
    """Namespace name of a (possibly not yet existing) file under a source root."""
    return file_to_namespace(chop_source_root(path, source_roots))


def namespace_to_path(namespace: str, root: PathLike, extension: str = ".clj") -> Path:
    """`my-app.core` under `root` -> `root/my_app/core.clj`"""
    relative = PurePosixPath(*namespace.replace("-", "_").split("."))
    return normalize_path(root) / (str(relative) + extension)


def is_source_file(path: PathLike, extensions: Sequence[str]) -> bool:
    path = Path(path)
    return path.suffix in extensions and not path.name.startswith(".")
