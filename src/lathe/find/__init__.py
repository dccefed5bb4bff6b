from .ast import (
    AstNode,
    BindingNode,
    ConstNode,
    GenericNode,
    HostNode,
    InvokeNode,
    LocalNode,
    Span,
    VarNode,
    load_forest,
    node_from_dict,
)
from .locator import SymbolLocator, node_to_var
from .macros import DefmacroFinder, MacroFinder, NullMacroFinder
from .models import SymbolReference, match_text
from .provider import (
    AstProvider,
    CommandAstProvider,
    JsonAstProvider,
    make_ast_provider,
)
from .traversal import (
    NodeMatch,
    find_nodes,
    node_at_loc,
    nodes,
    present_before_expansion,
    prune_macro_expansions,
    top_level_form_index,
)

__all__ = [
    "AstNode",
    "BindingNode",
    "ConstNode",
    "GenericNode",
    "HostNode",
    "InvokeNode",
    "LocalNode",
    "Span",
    "VarNode",
    "load_forest",
    "node_from_dict",
    "SymbolLocator",
    "node_to_var",
    "DefmacroFinder",
    "MacroFinder",
    "NullMacroFinder",
    "SymbolReference",
    "match_text",
    "AstProvider",
    "CommandAstProvider",
    "JsonAstProvider",
    "make_ast_provider",
    "NodeMatch",
    "find_nodes",
    "node_at_loc",
    "nodes",
    "present_before_expansion",
    "prune_macro_expansions",
    "top_level_form_index",
]
