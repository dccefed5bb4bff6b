"""
AST node model for analyzed Clojure code.

The analyzer itself is external; it hands over a forest (one tree per
top-level form) serialized as JSON in the shape of tools.analyzer maps:
`op`, `env` with `line`/`column`/`end-line`/`end-column`, `children` naming
the child keys, `raw-forms` for nodes produced by macro expansion, plus the
op-specific keys decoded below.
"""

import json
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from lathe.errors import AnalyzerError


@dataclass(frozen=True)
class Span:
    line: Optional[int] = None
    column: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @property
    def start(self) -> Optional[Tuple[int, int]]:
        if self.line is None or self.column is None:
            return None
        return (self.line, self.column)

    @property
    def end(self) -> Optional[Tuple[int, int]]:
        """End position; a span without an end ends where it starts."""
        if self.start is None:
            return None
        end_line = self.end_line if self.end_line is not None else self.line
        end_column = self.end_column if self.end_column is not None else self.column
        return (end_line, end_column)


@dataclass(frozen=True, eq=False, kw_only=True)
class AstNode:
    span: Span = Span()
    children: Tuple["AstNode", ...] = ()
    raw_forms: Tuple[str, ...] = ()


@dataclass(frozen=True, eq=False, kw_only=True)
class InvokeNode(AstNode):
    fn: Optional[AstNode] = None


@dataclass(frozen=True, eq=False, kw_only=True)
class BindingNode(AstNode):
    # `name` is the analyzer's unique binding identity, `form` the source symbol.
    name: str
    form: str
    local: Optional[str] = None


@dataclass(frozen=True, eq=False, kw_only=True)
class LocalNode(AstNode):
    name: str
    form: str
    local: Optional[str] = None


@dataclass(frozen=True, eq=False, kw_only=True)
class ConstNode(AstNode):
    val: str


@dataclass(frozen=True, eq=False, kw_only=True)
class VarNode(AstNode):
    var: str


@dataclass(frozen=True, eq=False, kw_only=True)
class HostNode(AstNode):
    class_name: str
    field: Optional[str] = None


@dataclass(frozen=True, eq=False, kw_only=True)
class GenericNode(AstNode):
    op: str


def with_children(node: AstNode, children: Tuple[AstNode, ...]) -> AstNode:
    return replace(node, children=children)


# --- JSON decoding ---


def _span(data: Dict[str, Any]) -> Span:
    env = data.get("env") or {}
    return Span(
        line=env.get("line"),
        column=env.get("column"),
        end_line=env.get("end-line"),
        end_column=env.get("end-column"),
    )


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def node_from_dict(data: Dict[str, Any]) -> AstNode:
    decoded: Dict[str, List[AstNode]] = {}
    children: List[AstNode] = []
    for entry in data.get("children") or []:
        value = data.get(entry) if isinstance(entry, str) else entry
        if isinstance(value, dict):
            nodes = [node_from_dict(value)]
        elif isinstance(value, list):
            nodes = [node_from_dict(v) for v in value if isinstance(v, dict)]
        else:
            nodes = []
        if isinstance(entry, str):
            decoded[entry] = nodes
        children.extend(nodes)

    common = dict(
        span=_span(data),
        children=tuple(children),
        raw_forms=tuple(_text(f) for f in data.get("raw-forms") or []),
    )
    op = data.get("op")

    if op == "invoke":
        fn_nodes = decoded.get("fn")
        if fn_nodes is None and isinstance(data.get("fn"), dict):
            fn_nodes = [node_from_dict(data["fn"])]
        return InvokeNode(fn=fn_nodes[0] if fn_nodes else None, **common)
    if op == "binding":
        return BindingNode(
            name=_text(data.get("name")),
            form=_text(data.get("form")),
            local=data.get("local"),
            **common,
        )
    if op == "local":
        return LocalNode(
            name=_text(data.get("name")),
            form=_text(data.get("form")),
            local=data.get("local"),
            **common,
        )
    if op == "const":
        return ConstNode(val=_text(data.get("val")), **common)
    if op in ("var", "the-var"):
        return VarNode(var=_text(data.get("var")), **common)
    if data.get("class"):
        return HostNode(
            class_name=_text(data.get("class")), field=data.get("field"), **common
        )
    return GenericNode(op=_text(op), **common)


def load_forest(json_text: str) -> List[AstNode]:
    """Decodes analyzer output; anything that is not a forest raises AnalyzerError."""
    try:
        data = json.loads(json_text)
        if isinstance(data, dict):
            data = [data]
        return [node_from_dict(item) for item in data if isinstance(item, dict)]
    except (ValueError, TypeError, AttributeError) as e:
        raise AnalyzerError(f"Malformed analyzer output: {e}") from e
