from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from lathe.errors import MalformedDeclaration, ReaderError
from .reader import (
    Form,
    Keyword,
    ListForm,
    MapForm,
    StringLit,
    Symbol,
    VectorForm,
    print_form,
    read_first_form,
    unwrap_meta,
)

DEPENDENCY_DIRECTIVES = ("require", "use", "require-macros", "use-macros")
IMPORT_DIRECTIVE = "import"


@dataclass(frozen=True)
class DependencyClause:
    """
    One libspec of a `:require`/`:use` clause, e.g. `[app.core :as core :refer [f]]`.

    Options other than `:as` and `:refer` are kept as (keyword, form) pairs
    and printed back unchanged.
    """

    namespace: str
    alias: Optional[str] = None
    refer: Optional[Tuple[str, ...]] = None
    refer_all: bool = False
    options: Tuple[Tuple[str, Optional[Form]], ...] = ()
    directive: str = "require"

    def render(self) -> str:
        parts = [self.namespace]
        if self.alias is not None:
            parts.append(f":as {self.alias}")
        if self.refer_all:
            parts.append(":refer :all")
        elif self.refer is not None:
            parts.append(":refer [" + " ".join(self.refer) + "]")
        for key, value in self.options:
            parts.append(f":{key}" if value is None else f":{key} {print_form(value)}")
        if len(parts) == 1:
            return self.namespace
        return "[" + " ".join(parts) + "]"


@dataclass(frozen=True)
class ImportClause:
    class_name: str

    @property
    def package(self) -> Optional[str]:
        return prefix(self.class_name)

    @property
    def simple_name(self) -> str:
        return suffix(self.class_name)


@dataclass
class Declaration:
    """The parsed `(ns ...)` form of a source file."""

    name: str
    form: ListForm
    name_form: Form
    docstring: Optional[StringLit] = None
    attr_map: Optional[MapForm] = None
    clauses: List[Form] = field(default_factory=list)
    dependencies: List[DependencyClause] = field(default_factory=list)
    imports: List[ImportClause] = field(default_factory=list)
    # Entries of a directive that are not libspecs: flags, reader conditionals.
    passthrough: Dict[str, List[Form]] = field(default_factory=dict)

    @property
    def start(self) -> int:
        return self.form.start

    @property
    def end(self) -> int:
        return self.form.end

    def head(self, text: str) -> str:
        return text[: self.start]

    def body(self, text: str) -> str:
        return text[self.end :]


def prefix(fully_qualified_name: str) -> Optional[str]:
    """
    java.util.Date -> java.util
    clojure.walk/walk -> clojure.walk
    """
    name = str(fully_qualified_name)
    if "/" in name:
        return name.split("/")[0]
    parts = name.split(".")[:-1]
    return ".".join(parts) if parts else None


def suffix(fully_qualified_name: str) -> str:
    """
    java.util.Date -> Date
    clojure.core/str -> str
    """
    name = str(fully_qualified_name)
    if name == "/":
        return name
    if "/" in name:
        return name.split("/")[-1]
    return name.split(".")[-1]


def munge(namespace: str) -> str:
    """Class-path form of a namespace name: `my-app.core` -> `my_app.core`."""
    return namespace.replace("-", "_")


def _is_libspec(form: Form) -> bool:
    return isinstance(form, (Symbol, VectorForm))


def is_prefix_form(form: Form) -> bool:
    """True for `[prefix libspec1 libspec2 ...]` and its list variant."""
    if not isinstance(form, (VectorForm, ListForm)) or len(form.items) < 2:
        return False
    head, *rest = form.items
    return (
        isinstance(head, Symbol)
        and not any(isinstance(item, Keyword) for item in form.items)
        and all(_is_libspec(item) for item in rest)
    )


def _parse_libspec(
    items: Tuple[Form, ...], directive: str, ns_prefix: Optional[str] = None
) -> DependencyClause:
    head = unwrap_meta(items[0])
    if not isinstance(head, Symbol):
        raise MalformedDeclaration(f"Libspec must start with a symbol: {print_form(head)}")
    namespace = f"{ns_prefix}.{head.name}" if ns_prefix else head.name

    alias: Optional[str] = None
    refer: Optional[Tuple[str, ...]] = None
    refer_all = False
    options: List[Tuple[str, Optional[Form]]] = []

    rest = list(items[1:])
    while rest:
        key = rest.pop(0)
        if not isinstance(key, Keyword):
            raise MalformedDeclaration(
                f"Expected keyword option in libspec for {namespace}, got {print_form(key)}"
            )
        value = rest.pop(0) if rest else None
        if key.name == "as" and isinstance(value, Symbol):
            alias = value.name
        elif key.name == "refer" and value == Keyword("all"):
            refer_all = True
        elif key.name == "refer" and isinstance(value, (VectorForm, ListForm)):
            refer = tuple(print_form(v) for v in value.items)
        else:
            options.append((key.name, value))

    return DependencyClause(
        namespace=namespace,
        alias=alias,
        refer=refer,
        refer_all=refer_all,
        options=tuple(options),
        directive=directive,
    )


def _parse_dependency_entries(
    entries: Tuple[Form, ...], directive: str
) -> Tuple[List[DependencyClause], List[Form]]:
    clauses: List[DependencyClause] = []
    passthrough: List[Form] = []
    for entry in entries:
        entry = unwrap_meta(entry)
        if isinstance(entry, Symbol):
            clauses.append(DependencyClause(namespace=entry.name, directive=directive))
        elif is_prefix_form(entry):
            ns_prefix = entry.items[0].name
            for item in entry.items[1:]:
                if isinstance(item, Symbol):
                    clauses.append(
                        DependencyClause(
                            namespace=f"{ns_prefix}.{item.name}", directive=directive
                        )
                    )
                else:
                    clauses.append(_parse_libspec(item.items, directive, ns_prefix))
        elif isinstance(entry, (VectorForm, ListForm)) and entry.items:
            clauses.append(_parse_libspec(entry.items, directive))
        else:
            passthrough.append(entry)
    return clauses, passthrough


def _parse_import_entries(
    entries: Tuple[Form, ...],
) -> Tuple[List[ImportClause], List[Form]]:
    imports: List[ImportClause] = []
    passthrough: List[Form] = []
    for entry in entries:
        if isinstance(entry, Symbol):
            imports.append(ImportClause(entry.name))
        elif (
            isinstance(entry, (VectorForm, ListForm))
            and entry.items
            and all(isinstance(item, Symbol) for item in entry.items)
        ):
            package = entry.items[0].name
            if len(entry.items) == 1:
                imports.append(ImportClause(package))
            for item in entry.items[1:]:
                imports.append(ImportClause(f"{package}.{item.name}"))
        else:
            passthrough.append(entry)
    return imports, passthrough


def directive_of(clause: Form) -> Optional[str]:
    if isinstance(clause, ListForm) and clause.items:
        head = clause.items[0]
        if isinstance(head, Keyword):
            return head.name
    return None


def parse_declaration(form: Form) -> Declaration:
    if (
        not isinstance(form, ListForm)
        or len(form.items) < 2
        or form.items[0] != Symbol("ns")
    ):
        raise MalformedDeclaration("Malformed ns form!")

    name_form = form.items[1]
    name = unwrap_meta(name_form)
    if not isinstance(name, Symbol):
        raise MalformedDeclaration("Namespace name must be a symbol")

    rest = list(form.items[2:])
    docstring = None
    attr_map = None
    if rest and isinstance(rest[0], StringLit):
        docstring = rest.pop(0)
    if rest and isinstance(rest[0], MapForm):
        attr_map = rest.pop(0)

    decl = Declaration(
        name=name.name,
        form=form,
        name_form=name_form,
        docstring=docstring,
        attr_map=attr_map,
        clauses=rest,
    )

    for clause in rest:
        directive = directive_of(clause)
        if directive in DEPENDENCY_DIRECTIVES:
            deps, extra = _parse_dependency_entries(clause.items[1:], directive)
            decl.dependencies.extend(deps)
        elif directive == IMPORT_DIRECTIVE:
            imports, extra = _parse_import_entries(clause.items[1:])
            decl.imports.extend(imports)
        else:
            continue
        if extra:
            decl.passthrough.setdefault(directive, []).extend(extra)

    return decl


def read_declaration(text: str, path: Optional[Union[str, Path]] = None) -> Declaration:
    """
    Reads the `ns` declaration, which must be the first top-level form.

    Raises MalformedDeclaration when it is missing or unreadable.
    """
    try:
        form = read_first_form(text)
    except ReaderError as e:
        raise MalformedDeclaration(str(e), path) from e
    if form is None:
        raise MalformedDeclaration("No ns form found", path)
    try:
        return parse_declaration(form)
    except MalformedDeclaration as e:
        if path is not None and e.path is None:
            raise MalformedDeclaration(str(e), path) from e
        raise


def read_declaration_file(path: Union[str, Path]) -> Declaration:
    return read_declaration(Path(path).read_text(encoding="utf-8"), path)


def namespace_of(text: str) -> str:
    return read_declaration(text).name


def alias_map(decl: Declaration) -> Dict[str, str]:
    """Maps each alias declared in the dependency clauses to its namespace."""
    aliases: Dict[str, str] = {}
    for clause in decl.dependencies:
        if clause.alias:
            aliases[clause.alias] = clause.namespace
        for key, value in clause.options:
            if key == "as-alias" and isinstance(value, Symbol):
                aliases[value.name] = clause.namespace
    return aliases


# --- Rendering ---


def _render_clause(keyword: str, entries: List[str]) -> str:
    head = f"(:{keyword} "
    if not entries:
        return f"(:{keyword})"
    indent = "\n" + " " * (len(head) + 2)
    return head + indent.join(entries) + ")"


def _render_imports(imports: List[ImportClause]) -> List[str]:
    groups: Dict[Optional[str], List[str]] = {}
    for imp in imports:
        groups.setdefault(imp.package, []).append(imp.simple_name)
    rendered: List[str] = []
    for package, names in groups.items():
        if package is None:
            rendered.extend(names)
        else:
            rendered.append("[" + " ".join([package] + names) + "]")
    return rendered


def rebuild_declaration(
    decl: Declaration,
    dependencies: List[DependencyClause],
    imports: List[ImportClause],
) -> str:
    """
    Renders a new `ns` form from `decl` with its dependency and import
    clauses replaced. Name, docstring, attribute map and every other clause
    are kept in their original order.
    """
    lines = [f"(ns {print_form(decl.name_form)}"]
    if decl.docstring is not None:
        lines.append(decl.docstring.raw)
    if decl.attr_map is not None:
        lines.append(print_form(decl.attr_map))

    deps_by_directive: Dict[str, List[str]] = {}
    for clause in dependencies:
        deps_by_directive.setdefault(clause.directive, []).append(clause.render())

    def entries_for(directive: str) -> List[str]:
        if directive == IMPORT_DIRECTIVE:
            entries = _render_imports(imports)
        else:
            entries = list(deps_by_directive.get(directive, []))
        entries.extend(print_form(f) for f in decl.passthrough.get(directive, []))
        return entries

    emitted = set()
    for clause in decl.clauses:
        directive = directive_of(clause)
        if directive in DEPENDENCY_DIRECTIVES or directive == IMPORT_DIRECTIVE:
            if directive in emitted:
                continue
            emitted.add(directive)
            entries = entries_for(directive)
            if entries:
                lines.append(_render_clause(directive, entries))
        else:
            lines.append(print_form(clause))

    for directive in DEPENDENCY_DIRECTIVES + (IMPORT_DIRECTIVE,):
        if directive in emitted:
            continue
        entries = entries_for(directive)
        if entries:
            lines.append(_render_clause(directive, entries))

    return "\n  ".join(lines) + ")"
