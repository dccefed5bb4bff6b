import re
from dataclasses import replace
from typing import Dict, List

from .declaration import (
    Declaration,
    DependencyClause,
    ImportClause,
    munge,
    read_declaration,
    rebuild_declaration,
)

# Characters that may precede a namespace inside a longer symbol. A match
# preceded by one of them is part of a different name.
_SYMBOL_CHARS = r"\w.*+!\-?<>=$&%/"


def rename_dependencies(
    dependencies: List[DependencyClause], old_ns: str, new_ns: str
) -> List[DependencyClause]:
    return [
        replace(clause, namespace=new_ns) if clause.namespace == old_ns else clause
        for clause in dependencies
    ]


def replace_package_prefix(class_name: str, old_prefix: str, new_prefix: str) -> str:
    if class_name == old_prefix:
        return new_prefix
    if class_name.startswith(old_prefix + "."):
        return new_prefix + class_name[len(old_prefix) :]
    return class_name


def rename_imports(
    imports: List[ImportClause], old_ns: str, new_ns: str
) -> List[ImportClause]:
    old_prefix = munge(old_ns)
    new_prefix = munge(new_ns)
    return [
        ImportClause(replace_package_prefix(imp.class_name, old_prefix, new_prefix))
        for imp in imports
    ]


def _replace_symbol_prefixes(text: str, replacements: Dict[str, str]) -> str:
    # Alternatives are tried in insertion order, each position is rewritten once.
    alternatives = "|".join(re.escape(old) for old in replacements)
    pattern = re.compile(f"(?<![{_SYMBOL_CHARS}])(?:{alternatives})")
    return pattern.sub(lambda m: replacements[m.group(0)], text)


def rewrite_body(body: str, old_ns: str, new_ns: str) -> str:
    """
    Rewrites fully-qualified references outside the ns form:
    `old-ns/` becomes `new-ns/` and `old_ns/` becomes `new_ns/`. When the
    two spellings of the old name coincide the unmunged rename wins.
    """
    replacements = {old_ns + "/": new_ns + "/"}
    replacements.setdefault(munge(old_ns) + "/", munge(new_ns) + "/")
    return _replace_symbol_prefixes(body, replacements)


def rebuild_for_rename(decl: Declaration, old_ns: str, new_ns: str) -> str:
    return rebuild_declaration(
        decl,
        rename_dependencies(decl.dependencies, old_ns, new_ns),
        rename_imports(decl.imports, old_ns, new_ns),
    )


def update_dependent(text: str, old_ns: str, new_ns: str, path=None) -> str:
    """New content of a file that depends on `old_ns` once it becomes `new_ns`."""
    decl = read_declaration(text, path)
    return (
        decl.head(text)
        + rebuild_for_rename(decl, old_ns, new_ns)
        + rewrite_body(decl.body(text), old_ns, new_ns)
    )


def update_own_namespace(text: str, old_ns: str, new_ns: str) -> str:
    """Renames the moved file's own declaration: first textual occurrence only."""
    return text.replace(old_ns, new_ns, 1)
