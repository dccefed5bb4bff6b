import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from lathe.errors import MalformedDeclaration
from lathe.lang.clojure.declaration import Declaration, read_declaration
from lathe.workspace import Workspace
from .models import SymbolReference, match_text, offset_to_position

log = logging.getLogger(__name__)

_DEFMACRO = r"\(defmacro\s+(?:\^(?:\{[^}]*\}|\S+)\s+)*"
_DELIMITER = r"(?=[\s()\[\]{}\"]|$)"


class MacroFinder(Protocol):
    def find_macro(self, name: str) -> Optional[List[SymbolReference]]:
        """Occurrences of macro `name`, or None when `name` is not a macro."""
        ...


class NullMacroFinder:
    def find_macro(self, name: str) -> Optional[List[SymbolReference]]:
        return None


class DefmacroFinder:
    """
    Finds a macro's definition and call sites by reading source text.

    Analyzed code no longer contains macro call sites, so this looks at the
    text instead: `(defmacro name ...)` marks a definition, `(name ...)`,
    `(alias/name ...)` or `(ns/name ...)` a call in a file that can see it.
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def _read_sources(self) -> List[Tuple[Path, str, Optional[Declaration]]]:
        sources = []
        for path in self.workspace.discover_files():
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                log.warning(f"Could not read {path}: {e}")
                continue
            try:
                decl = read_declaration(text, path)
            except MalformedDeclaration:
                decl = None
            sources.append((path, text, decl))
        return sources

    def _reference(
        self, path: Path, text: str, start: int, end: int, name: str
    ) -> SymbolReference:
        line, column = offset_to_position(text, start)
        return SymbolReference(
            line_beg=line,
            line_end=line,
            col_beg=column,
            col_end=column + (end - start),
            name=name,
            file=str(path.resolve()),
            match=match_text(text, line),
        )

    def _qualifiers(
        self, decl: Declaration, macro_namespaces: List[str], simple: str
    ) -> Dict[str, str]:
        qualifiers: Dict[str, str] = {}
        for ns in macro_namespaces:
            full = f"{ns}/{simple}"
            if decl.name == ns:
                qualifiers[simple] = full
                qualifiers[full] = full
            for clause in decl.dependencies:
                if clause.namespace != ns:
                    continue
                qualifiers[full] = full
                if clause.alias:
                    qualifiers[f"{clause.alias}/{simple}"] = full
                if clause.refer_all or (clause.refer and simple in clause.refer):
                    qualifiers[simple] = full
        return qualifiers

    def find_macro(self, name: str) -> Optional[List[SymbolReference]]:
        ns_hint, _, simple = name.rpartition("/")
        sources = self._read_sources()

        definition = re.compile(_DEFMACRO + "(" + re.escape(simple) + ")" + _DELIMITER)
        references: List[SymbolReference] = []
        macro_namespaces: List[str] = []
        for path, text, decl in sources:
            if decl is None or (ns_hint and decl.name != ns_hint):
                continue
            for m in definition.finditer(text):
                if decl.name not in macro_namespaces:
                    macro_namespaces.append(decl.name)
                references.append(
                    self._reference(
                        path, text, m.start(1), m.end(1), f"{decl.name}/{simple}"
                    )
                )

        if not macro_namespaces:
            return None

        for path, text, decl in sources:
            if decl is None:
                continue
            qualifiers = self._qualifiers(decl, macro_namespaces, simple)
            if not qualifiers:
                continue
            alternatives = sorted(qualifiers, key=len, reverse=True)
            call = re.compile(
                r"\((" + "|".join(re.escape(q) for q in alternatives) + ")" + _DELIMITER
            )
            for m in call.finditer(text, decl.end):
                references.append(
                    self._reference(path, text, m.start(1), m.end(1), qualifiers[m.group(1)])
                )

        return references
