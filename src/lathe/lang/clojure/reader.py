"""
Clojure source text as plain data.

Parsing is done by the tree-sitter Clojure grammar; this module turns its
concrete syntax tree into small immutable forms that keep their character
offsets, and prints forms back. Nothing is evaluated: reader macros and
tagged literals are kept as `Wrapped` forms and printed back verbatim.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterator, List, Optional, Tuple

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from lathe.errors import ReaderError

class Form:
    start: int
    end: int


@dataclass(frozen=True)
class Symbol(Form):
    name: str
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Keyword(Form):
    name: str
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


@dataclass(frozen=True)
class StringLit(Form):
    raw: str
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    @property
    def value(self) -> str:
        body = self.raw[1:-1]
        return (
            body.replace('\\"', '"')
            .replace("\\n", "\n")
            .replace("\\t", "\t")
            .replace("\\\\", "\\")
        )


@dataclass(frozen=True)
class Atom(Form):
    """Scalar literals other than strings and keywords, kept as raw text."""

    raw: str
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


@dataclass(frozen=True)
class ListForm(Form):
    items: Tuple[Form, ...] = ()
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


@dataclass(frozen=True)
class VectorForm(Form):
    items: Tuple[Form, ...] = ()
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


@dataclass(frozen=True)
class MapForm(Form):
    items: Tuple[Form, ...] = ()
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    def get(self, key: Form) -> Optional[Form]:
        for k, v in zip(self.items[::2], self.items[1::2]):
            if k == key:
                return v
        return None


@dataclass(frozen=True)
class SetForm(Form):
    items: Tuple[Form, ...] = ()
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Wrapped(Form):
    """A form behind a reader macro: `'x`, `#'x`, `#(...)`, `#?(...)`, `#inst "..."`."""

    prefix: str
    form: Form
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Meta(Form):
    meta: Form
    form: Form
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)


def unwrap_meta(form: Form) -> Form:
    while isinstance(form, Meta):
        form = form.form
    return form


# Node types that carry no value.
GAPS = {"comment", "dis_expr"}
METADATA = {"meta_lit", "old_meta_lit"}
OPENERS = {"(", "[", "{", "#{"}

ATOMS = {"num_lit", "char_lit", "nil_lit", "bool_lit", "regex_lit", "sym_val_lit"}
COLLECTIONS = {
    "list_lit": ListForm,
    "vec_lit": VectorForm,
    "map_lit": MapForm,
    "set_lit": SetForm,
}
# Collections behind a dispatch prefix: `#(...)`, `#?(...)`, `#?@(...)`, `#:ns{...}`.
PREFIXED_COLLECTIONS = {
    "anon_fn_lit": ListForm,
    "read_cond_lit": ListForm,
    "splicing_read_cond_lit": ListForm,
    "ns_map_lit": MapForm,
}
WRAPPERS = {
    "quoting_lit",
    "syn_quoting_lit",
    "unquoting_lit",
    "unquote_splicing_lit",
    "derefing_lit",
    "var_quoting_lit",
    "evaling_lit",
}


@lru_cache(maxsize=1)
def _parser() -> Parser:
    return get_parser("clojure")


class _Source:
    """The text being read, with tree-sitter byte offsets mapped back to characters."""

    def __init__(self, text: str):
        self.data = text.encode("utf-8")
        self._ascii = len(self.data) == len(text)

    def offset(self, byte: int) -> int:
        if self._ascii:
            return byte
        return len(self.data[:byte].decode("utf-8"))

    def slice(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8")


class FormBuilder:
    def __init__(self, source: _Source):
        self.source = source

    def _error(self, node: Node, message: str) -> ReaderError:
        return ReaderError(message, self.source.offset(node.start_byte))

    def check(self, node: Node) -> None:
        if node.type == "ERROR" or node.is_missing or node.has_error:
            snippet = self.source.slice(node.start_byte, node.end_byte)[:30]
            raise self._error(node, f"Unreadable form {snippet!r}")

    def build(self, node: Node) -> Form:
        self.check(node)
        parts = [c for c in node.named_children if c.type not in GAPS]
        metas = [c for c in parts if c.type in METADATA]
        values = [c for c in parts if c.type not in METADATA]

        body_start = node.start_byte
        if metas:
            body_start = next(
                c.start_byte
                for c in node.children
                if c.start_byte >= metas[-1].end_byte and c.type not in GAPS
            )
        form = self._build_body(node, values, body_start)

        for meta in reversed(metas):
            meta_values = [c for c in meta.named_children if c.type not in GAPS]
            form = Meta(
                meta=self.build(meta_values[-1]),
                form=form,
                start=self.source.offset(meta.start_byte),
                end=self.source.offset(node.end_byte),
            )
        return form

    def _build_body(self, node: Node, values: List[Node], body_start: int) -> Form:
        kind = node.type
        text = self.source.slice(body_start, node.end_byte)
        start = self.source.offset(body_start)
        end = self.source.offset(node.end_byte)

        if kind == "sym_lit":
            return Symbol(name=text, start=start, end=end)
        if kind == "kwd_lit":
            return Keyword(name=text[1:], start=start, end=end)
        if kind == "str_lit":
            return StringLit(raw=text, start=start, end=end)
        if kind in ATOMS:
            return Atom(raw=text, start=start, end=end)

        if kind in COLLECTIONS or kind in PREFIXED_COLLECTIONS:
            opener = next(
                c for c in node.children if c.type in OPENERS and c.start_byte >= body_start
            )
            items = tuple(
                self.build(c) for c in values if c.start_byte >= opener.end_byte
            )
            if kind in COLLECTIONS:
                return COLLECTIONS[kind](items=items, start=start, end=end)
            inner = PREFIXED_COLLECTIONS[kind](
                items=items, start=self.source.offset(opener.start_byte), end=end
            )
            prefix = self.source.slice(body_start, opener.start_byte).strip()
            return Wrapped(prefix=prefix, form=inner, start=start, end=end)

        if kind == "tagged_or_ctor_lit":
            tag, value = values[0], values[-1]
            prefix = "#" + self.source.slice(tag.start_byte, tag.end_byte) + " "
            return Wrapped(prefix=prefix, form=self.build(value), start=start, end=end)
        if kind in WRAPPERS:
            value = values[-1]
            prefix = self.source.slice(body_start, value.start_byte).strip()
            return Wrapped(prefix=prefix, form=self.build(value), start=start, end=end)

        raise self._error(node, f"Unsupported syntax {kind}")


def _top_level(text: str) -> Iterator[Form]:
    source = _Source(text)
    root = _parser().parse(source.data).root_node
    builder = FormBuilder(source)
    if root.type == "ERROR":
        builder.check(root)
    for node in root.named_children:
        if node.type not in GAPS:
            yield builder.build(node)


def read_forms(text: str) -> List[Form]:
    return list(_top_level(text))


def read_first_form(text: str) -> Optional[Form]:
    """Returns the first top-level form, or None when there is none."""
    return next(_top_level(text), None)


def print_form(form: Form) -> str:
    """Renders a form as single-line source text."""
    if isinstance(form, Symbol):
        return form.name
    if isinstance(form, Keyword):
        return ":" + form.name
    if isinstance(form, (StringLit, Atom)):
        return form.raw
    if isinstance(form, ListForm):
        return "(" + " ".join(print_form(f) for f in form.items) + ")"
    if isinstance(form, VectorForm):
        return "[" + " ".join(print_form(f) for f in form.items) + "]"
    if isinstance(form, MapForm):
        pairs = [
            f"{print_form(k)} {print_form(v)}"
            for k, v in zip(form.items[::2], form.items[1::2])
        ]
        if len(form.items) % 2:
            pairs.append(print_form(form.items[-1]))
        return "{" + ", ".join(pairs) + "}"
    if isinstance(form, SetForm):
        return "#{" + " ".join(print_form(f) for f in form.items) + "}"
    if isinstance(form, Wrapped):
        return form.prefix + print_form(form.form)
    if isinstance(form, Meta):
        return f"^{print_form(form.meta)} {print_form(form.form)}"
    raise TypeError(f"Cannot print {type(form).__name__}")
