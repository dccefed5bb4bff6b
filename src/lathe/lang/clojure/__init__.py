from .reader import read_forms, read_first_form, print_form
from .declaration import (
    Declaration,
    DependencyClause,
    ImportClause,
    alias_map,
    munge,
    namespace_of,
    prefix,
    suffix,
    read_declaration,
    read_declaration_file,
    rebuild_declaration,
)
from .paths import (
    path_to_namespace,
    namespace_to_path,
    normalize_path,
    to_unix_path,
    is_source_file,
)
from .rewrite import (
    rename_dependencies,
    rename_imports,
    rewrite_body,
    update_dependent,
    update_own_namespace,
)

__all__ = [
    "read_forms",
    "read_first_form",
    "print_form",
    "Declaration",
    "DependencyClause",
    "ImportClause",
    "alias_map",
    "munge",
    "namespace_of",
    "prefix",
    "suffix",
    "read_declaration",
    "read_declaration_file",
    "rebuild_declaration",
    "path_to_namespace",
    "namespace_to_path",
    "normalize_path",
    "to_unix_path",
    "is_source_file",
    "rename_dependencies",
    "rename_imports",
    "rewrite_body",
    "update_dependent",
    "update_own_namespace",
]
