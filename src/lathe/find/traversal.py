import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Optional

from .ast import AstNode, with_children

NodePredicate = Callable[[AstNode], Any]


@dataclass(frozen=True)
class NodeMatch:
    line_beg: int
    line_end: Optional[int]
    col_beg: Optional[int]
    col_end: Optional[int]
    annotation: Any = None


def nodes(forest: Iterable[AstNode]) -> Iterator[AstNode]:
    """All nodes of all trees, parents before their children."""
    for tree in forest:
        stack = [tree]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def present_before_expansion(name: str, node: AstNode) -> bool:
    """
    True if `node` is not the result of macro expansion, or if it is and the
    unqualified part of `name` appears as a word in its original form.
    """
    original = node.raw_forms[0] if node.raw_forms else ""
    if not original:
        return True
    simple = name.split("/")[-1]
    return re.search(r"(^|\W)" + re.escape(simple) + r"\W", original) is not None


def prune_macro_expansions(name: str, node: AstNode) -> AstNode:
    """Drops the expansion subtree of macro call sites that never mention `name`."""
    pruned_children = tuple(prune_macro_expansions(name, c) for c in node.children)
    if not present_before_expansion(name, node):
        return with_children(node, ())
    if any(new is not old for new, old in zip(pruned_children, node.children)):
        return with_children(node, pruned_children)
    return node


def find_nodes(
    forest: Iterable[AstNode], pred: NodePredicate, name: Optional[str] = None
) -> List[NodeMatch]:
    """
    Locates every node for which `pred` returns a truthy value.

    The predicate's return value is kept as the match annotation. With `name`,
    macro call sites are pruned first unless they mentioned `name` before
    expansion. Nodes without a start line cannot be located and are skipped.
    """
    if name is not None:
        forest = [prune_macro_expansions(name, tree) for tree in forest]

    matches: List[NodeMatch] = []
    for node in nodes(forest):
        annotation = pred(node)
        if not annotation or node.span.line is None:
            continue
        matches.append(
            NodeMatch(
                line_beg=node.span.line,
                line_end=node.span.end_line,
                col_beg=node.span.column,
                col_end=node.span.end_column,
                annotation=annotation,
            )
        )
    return matches


def node_at_loc(line: int, column: int, node: AstNode) -> bool:
    start, end = node.span.start, node.span.end
    if start is None:
        return False
    return start <= (line, column) <= end


def top_level_form_index(
    line: int, column: int, forest: List[AstNode]
) -> Optional[int]:
    for index, tree in enumerate(forest):
        if node_at_loc(line, column, tree):
            return index
    return None
