from textwrap import dedent

import pytest

from lathe.errors import MalformedDeclaration
from lathe.lang.clojure.declaration import (
    DependencyClause,
    ImportClause,
    alias_map,
    munge,
    namespace_of,
    prefix,
    read_declaration,
    rebuild_declaration,
    suffix,
)


def test_extracts_flat_dependencies_and_imports():
    decl = read_declaration(
        dedent(
            """
            (ns app.handler
              "Request handlers."
              (:require [app.core :as core :refer [run]]
                        [clojure.string :as str]
                        app.util
                        [app views models])
              (:use [app.legacy :only [helper]])
              (:import (java.util Date UUID)
                       java.io.File))
            """
        )
    )

    assert decl.name == "app.handler"
    assert decl.docstring.value == "Request handlers."
    assert [d.namespace for d in decl.dependencies] == [
        "app.core",
        "clojure.string",
        "app.util",
        "app.views",
        "app.models",
        "app.legacy",
    ]
    core = decl.dependencies[0]
    assert core.alias == "core"
    assert core.refer == ("run",)
    assert decl.dependencies[-1].directive == "use"
    assert [i.class_name for i in decl.imports] == [
        "java.util.Date",
        "java.util.UUID",
        "java.io.File",
    ]


def test_absent_sections_yield_empty_lists():
    decl = read_declaration("(ns app.core)")

    assert decl.dependencies == []
    assert decl.imports == []


def test_declaration_must_be_first_form():
    with pytest.raises(MalformedDeclaration):
        read_declaration("(def x 1)\n(ns app.core)")


@pytest.mark.parametrize("source", ["", "(ns)", "(ns \"not-a-symbol\")", "(ns app.core"])
def test_malformed_declarations(source):
    with pytest.raises(MalformedDeclaration):
        read_declaration(source)


def test_malformed_declaration_names_the_file():
    with pytest.raises(MalformedDeclaration) as excinfo:
        read_declaration("(ns)", "/src/app/broken.clj")

    assert excinfo.value.path == "/src/app/broken.clj"


def test_head_and_body_split_around_the_form():
    text = ";; Copyright\n(ns app.core)\n\n(defn f [] 1)\n"
    decl = read_declaration(text)

    assert decl.head(text) == ";; Copyright\n"
    assert decl.body(text) == "\n\n(defn f [] 1)\n"


def test_alias_map_includes_as_alias():
    decl = read_declaration(
        "(ns app.core (:require [app.db :as db] [app.spec :as-alias spec] app.util))"
    )

    assert alias_map(decl) == {"db": "app.db", "spec": "app.spec"}


def test_name_helpers():
    assert munge("my-app.core-utils") == "my_app.core_utils"
    assert prefix("java.util.Date") == "java.util"
    assert suffix("java.util.Date") == "Date"
    assert prefix("clojure.walk/walk") == "clojure.walk"
    assert suffix("clojure.walk/walk") == "walk"
    assert prefix("Date") is None
    assert ImportClause("java.util.Date").package == "java.util"
    assert namespace_of(";; x\n(ns ^:dev app.core)") == "app.core"


def test_dependency_clause_rendering():
    assert DependencyClause("app.util").render() == "app.util"
    assert (
        DependencyClause("app.core", alias="core", refer=("a", "b")).render()
        == "[app.core :as core :refer [a b]]"
    )
    assert DependencyClause("app.core", refer_all=True).render() == "[app.core :refer :all]"


def test_rebuild_preserves_layout_and_other_clauses():
    source = dedent(
        """\
        (ns ^:no-doc app.handler
          "Handlers."
          {:author "me"}
          (:refer-clojure :exclude [get])
          (:require [app.core :as core]
                    [clojure.string :as str])
          (:import [java.util Date UUID])
          (:gen-class))"""
    )
    decl = read_declaration(source)

    assert rebuild_declaration(decl, decl.dependencies, decl.imports) == source


def test_rebuild_keeps_passthrough_entries():
    decl = read_declaration(
        "(ns app.core (:require #?(:clj [app.jvm :as jvm]) [app.db :as db] :reload))"
    )

    rebuilt = rebuild_declaration(decl, decl.dependencies, decl.imports)

    assert "[app.db :as db]" in rebuilt
    assert "#?(:clj [app.jvm :as jvm])" in rebuilt
    assert ":reload" in rebuilt


def test_rebuild_appends_missing_clauses():
    decl = read_declaration("(ns app.core)")

    rebuilt = rebuild_declaration(
        decl, [DependencyClause("app.db", alias="db")], [ImportClause("java.io.File")]
    )

    assert rebuilt == dedent(
        """\
        (ns app.core
          (:require [app.db :as db])
          (:import [java.io File]))"""
    )
