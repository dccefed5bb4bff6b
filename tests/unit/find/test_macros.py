
import pytest

from lathe.find import DefmacroFinder, NullMacroFinder
from lathe.workspace import Workspace


@pytest.fixture
def workspace(workspace_factory):
    root = (
        workspace_factory.with_deps_edn(["src"])
        .with_source(
            "src/app/macros.clj",
            """
            (ns app.macros)

            (defmacro ^:private with-retry [n & body]
              `(loop [] ~@body))
            """,
        )
        .with_source(
            "src/app/user.clj",
            """
            (ns app.user
              (:require [app.macros :as m :refer [with-retry]]))

            (defn a [] (m/with-retry 3 (work)))
            (defn b [] (with-retry 2 (work)))
            (defn c [] (app.macros/with-retry 1 (work)))
            """,
        )
        .with_source(
            "src/app/other.clj",
            """
            (ns app.other)

            (defn d [] (with-retry 1))
            """,
        )
        .build()
    )
    return Workspace(root)


def test_finds_definition_and_visible_call_sites(workspace):
    refs = DefmacroFinder(workspace).find_macro("with-retry")

    macros_file = str((workspace.root_path / "src/app/macros.clj").resolve())
    user_file = str((workspace.root_path / "src/app/user.clj").resolve())
    assert [(r.file, r.line_beg, r.col_beg) for r in refs] == [
        (macros_file, 3, 21),
        (user_file, 4, 13),
        (user_file, 5, 13),
        (user_file, 6, 13),
    ]
    assert {r.name for r in refs} == {"app.macros/with-retry"}
    assert refs[1].match == "(defn a [] (m/with-retry 3 (work)))"


def test_qualified_name_restricts_the_namespace(workspace):
    assert len(DefmacroFinder(workspace).find_macro("app.macros/with-retry")) == 4
    assert DefmacroFinder(workspace).find_macro("app.other/with-retry") is None


def test_non_macros_return_none(workspace):
    assert DefmacroFinder(workspace).find_macro("a") is None
    assert NullMacroFinder().find_macro("with-retry") is None
