import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .loader import Loader
from .pointer import SemanticPointer

LANG_ENV_VAR = "LATHE_LANG"
PROJECT_MARKERS = ("pyproject.toml", "deps.edn", "project.clj", ".git")


def _nearest_project_dir(start: Path) -> Path:
    for candidate in [start, *start.parents]:
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate
    return start


class Needle:
    """
    Resolves semantic pointers to message templates.

    Catalogs are searched in every root, under `needle/<lang>` and then
    `.lathe/needle/<lang>`; roots later in `self.roots` take precedence.
    A key missing from the requested language falls back to the default
    language and finally to the key itself.
    """

    def __init__(self, roots: Optional[List[Path]] = None, default_lang: str = "en"):
        self.default_lang = default_lang
        self.roots: List[Path] = list(roots) if roots else [
            _nearest_project_dir(Path.cwd().resolve())
        ]
        self._loader = Loader()
        self._catalogs: Dict[str, Dict[str, str]] = {}

    def add_root(self, path: Path) -> None:
        """Registers `path` with the lowest precedence."""
        if path in self.roots:
            return
        self.roots.insert(0, path)
        self._catalogs.clear()

    def _catalog_dirs(self, lang: str) -> Iterator[Path]:
        for root in self.roots:
            yield root / "needle" / lang
            yield root / ".lathe" / "needle" / lang

    def _catalog(self, lang: str) -> Dict[str, str]:
        if lang not in self._catalogs:
            merged: Dict[str, str] = {}
            for directory in self._catalog_dirs(lang):
                merged.update(self._loader.load_directory(directory))
            self._catalogs[lang] = merged
        return self._catalogs[lang]

    def get(
        self, pointer: Union[SemanticPointer, str], lang: Optional[str] = None
    ) -> str:
        key = str(pointer)
        requested = lang or os.getenv(LANG_ENV_VAR, self.default_lang)
        for candidate in dict.fromkeys([requested, self.default_lang]):
            template = self._catalog(candidate).get(key)
            if template is not None:
                return template
        return key


needle = Needle()
