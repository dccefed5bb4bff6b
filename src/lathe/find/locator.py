import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from lathe.errors import AnalyzerError, InvalidRequest, MalformedDeclaration
from lathe.lang.clojure.declaration import alias_map, read_declaration
from lathe.workspace import Workspace
from .ast import AstNode, BindingNode, ConstNode, HostNode, InvokeNode, LocalNode, VarNode
from .macros import MacroFinder, NullMacroFinder
from .models import SymbolReference, match_text
from .provider import AstProvider
from .traversal import NodeMatch, find_nodes, node_at_loc, nodes, top_level_form_index

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

SYMBOL_PATTERN = re.compile(r"[\w\.:\*\+\-_!\?]+")


def node_to_var(
    alias_info: Dict[str, str], node: Optional[AstNode], default_namespace: str
) -> Optional[str]:
    """
    Fully-qualified name referenced by `node`. Vars of the default namespace
    come back unqualified; namespace aliases are resolved.
    """
    field = None
    if isinstance(node, HostNode):
        target = node.class_name
        field = node.field
    elif isinstance(node, VarNode):
        target = node.var.replace("#'", "")
        if target.startswith(default_namespace + "/"):
            target = target[len(default_namespace) + 1 :]
    else:
        return None

    ns, sep, member = target.partition("/")
    if sep:
        full = f"{alias_info.get(ns, ns)}/{member}"
    else:
        full = alias_info.get(target, target)
    return "/".join(part for part in (full, field) if part)


def _aliases_in(source: str) -> Dict[str, str]:
    try:
        return alias_map(read_declaration(source))
    except MalformedDeclaration:
        return {}


class SymbolLocator:
    def __init__(
        self,
        workspace: Workspace,
        ast_provider: AstProvider,
        macro_finder: Optional[MacroFinder] = None,
    ):
        self.workspace = workspace
        self.ast_provider = ast_provider
        self.macro_finder = macro_finder or NullMacroFinder()

    @property
    def default_namespace(self) -> str:
        return self.workspace.config.default_namespace

    # --- Predicates ---

    def _contains_var(self, var_name: str, alias_info: Dict[str, str], node: AstNode):
        if node_to_var(alias_info, node, self.default_namespace) == var_name:
            return var_name
        return None

    def _contains_const(self, var_name: str, node: AstNode):
        if not isinstance(node, ConstNode):
            return None
        parts = var_name.split("/")
        ns = parts[0]
        name = parts[1] if len(parts) > 1 else None
        words = set(SYMBOL_PATTERN.findall(node.val))
        if ns in words and (name is None or name in words):
            return var_name
        return None

    # --- Searches ---

    def _gather(
        self, matches: List[NodeMatch], name: str, file: Optional[str], content: str
    ) -> List[SymbolReference]:
        return [
            SymbolReference(
                line_beg=m.line_beg,
                line_end=m.line_end,
                col_beg=m.col_beg,
                col_end=m.col_end,
                name=name,
                file=file,
                match=match_text(content, m.line_beg, m.line_end),
            )
            for m in matches
        ]

    def find_symbol_in_file(self, fully_qualified_name: str, path: Path) -> List[SymbolReference]:
        try:
            content = path.read_text(encoding="utf-8")
            forest = self.ast_provider.parse(content)
        except (OSError, UnicodeDecodeError, AnalyzerError) as e:
            log.warning(f"Skipping {path}: {e}")
            return []

        alias_info = _aliases_in(content)

        def pred(node: AstNode):
            return self._contains_var(
                fully_qualified_name, alias_info, node
            ) or self._contains_const(fully_qualified_name, node)

        matches = find_nodes(forest, pred, name=fully_qualified_name)
        return self._gather(matches, fully_qualified_name, str(path.resolve()), content)

    def find_global_symbol(
        self,
        file: Optional[PathLike],
        namespace: Optional[str],
        name: str,
        directory: Optional[PathLike] = None,
    ) -> List[SymbolReference]:
        if namespace is None:
            if not file:
                raise InvalidRequest("Either a file or a namespace is required")
            namespace = read_declaration(
                Path(file).read_text(encoding="utf-8"), file
            ).name

        if namespace == self.default_namespace:
            fully_qualified_name = name
        else:
            fully_qualified_name = f"{namespace}/{name}"

        search_dir = Path(directory) if directory else Path(".")
        results: List[SymbolReference] = []
        for path in self.workspace.discover_files(search_dir):
            results.extend(self.find_symbol_in_file(fully_qualified_name, path))
        return results

    def find_local_symbol(
        self, file: PathLike, name: str, line: int, column: int
    ) -> List[SymbolReference]:
        """
        Occurrences of the local bound at `line`/`column`, limited to the
        top-level form that contains that location.
        """
        if not isinstance(line, int) or not isinstance(column, int):
            raise InvalidRequest("line and column must be integers")
        if not file or not str(file).strip():
            raise InvalidRequest("file must not be blank")

        path = Path(file)
        content = path.read_text(encoding="utf-8")
        forest = self.ast_provider.parse(content)

        form_index = top_level_form_index(line, column, forest)
        if form_index is None:
            return []
        top_level_form = forest[form_index]

        local_name = next(
            (
                node.name
                for node in nodes([top_level_form])
                if isinstance(node, (LocalNode, BindingNode))
                and node.form == name
                and node.local
                and node_at_loc(line, column, node)
            ),
            None,
        )
        if local_name is None:
            return []

        def is_same_local(node: AstNode) -> bool:
            return (
                isinstance(node, (LocalNode, BindingNode))
                and node.name == local_name
                and bool(node.local)
            )

        matches = find_nodes([top_level_form], is_same_local, name=name)
        return self._gather(matches, name, str(path.resolve()), content)

    def find_symbol(
        self,
        file: Optional[PathLike],
        name: str,
        namespace: Optional[str] = None,
        directory: Optional[PathLike] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> List[SymbolReference]:
        """
        Macro occurrences if `name` is a macro; otherwise the local's
        occurrences when a location inside a binding is given; otherwise
        every occurrence of the global var.
        """
        if not name:
            raise InvalidRequest("name must not be blank")
        if file and not self.workspace.is_source_file(file):
            raise InvalidRequest(f"{file} is not a source file")

        # Analyzed code has no macro call sites left, so macros go first.
        macro_refs = self.macro_finder.find_macro(name)
        if macro_refs is not None:
            return macro_refs

        if file and line is not None and column is not None:
            local_refs = self.find_local_symbol(file, name, line, column)
            if local_refs:
                return local_refs

        return self.find_global_symbol(file, namespace, name, directory)

    def find_debug_invocations(
        self, source: str, debug_fns: str
    ) -> Optional[List[SymbolReference]]:
        """Calls to any of the comma-separated functions, or None if there are none."""
        fn_names: Set[str] = {n.strip() for n in debug_fns.split(",") if n.strip()}
        forest = self.ast_provider.parse(source)
        alias_info = _aliases_in(source)

        def invoked(node: AstNode):
            if not isinstance(node, InvokeNode):
                return None
            var = node_to_var(alias_info, node.fn, self.default_namespace)
            return var if var in fn_names else None

        matches = find_nodes(forest, invoked)
        results = [
            SymbolReference(
                line_beg=m.line_beg,
                line_end=m.line_end,
                col_beg=m.col_beg,
                col_end=m.col_end,
                name=m.annotation,
                file=None,
                match=match_text(source, m.line_beg, m.line_end),
            )
            for m in matches
        ]
        return results or None
