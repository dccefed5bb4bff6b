from textwrap import dedent

import pytest

from lathe.errors import NoSourceRootFound
from lathe.lang.clojure.paths import normalize_path
from lathe.refactor import RenameEngine
from lathe.workspace import Workspace


def _posix(path):
    return normalize_path(path).as_posix()


def test_rename_moves_file_and_updates_dependents(workspace_factory):
    # 1. Arrange
    root = (
        workspace_factory.with_deps_edn(["src"])
        .with_source(
            "src/app/core.clj",
            """
            (ns app.core
              (:import [java.util Date]))

            (defrecord Record [id])
            (defn run [x] x)
            """,
        )
        .with_source(
            "src/app/handler.clj",
            """
            (ns app.handler
              (:require [app.core :as core]
                        [clojure.string :as str])
              (:import [app.core Record]))

            (defn handle [] (app.core/run (core/run 1)))
            """,
        )
        .with_source(
            "src/app/unrelated.clj",
            """
            (ns app.unrelated
              (:require [app.core-extra :as extra]))

            (def x 'app.core-extra/x)
            """,
        )
        .build()
    )
    old_path = root / "src/app/core.clj"
    new_path = root / "src/app/domain/core.clj"
    handler = root / "src/app/handler.clj"
    unrelated_before = (root / "src/app/unrelated.clj").read_text()

    # 2. Act
    affected = RenameEngine(Workspace(root)).rename(old_path, new_path)

    # 3. Assert
    assert affected == [_posix(handler), _posix(new_path)]
    assert not old_path.exists()
    assert new_path.read_text().startswith("(ns app.domain.core\n")
    assert handler.read_text() == dedent(
        """\
        (ns app.handler
          (:require [app.domain.core :as core]
                    [clojure.string :as str])
          (:import [app.domain.core Record]))

        (defn handle [] (app.domain.core/run (core/run 1)))
        """
    )
    assert (root / "src/app/unrelated.clj").read_text() == unrelated_before


def test_rename_handles_munged_names(workspace_factory):
    root = (
        workspace_factory.with_deps_edn(["src"])
        .with_source("src/my_app/core_utils.clj", "(ns my-app.core-utils)\n(defn f [] 1)\n")
        .with_source(
            "src/my_app/main.clj",
            """
            (ns my-app.main
              (:require [my-app.core-utils :as cu])
              (:import [my_app.core_utils Rec]))

            (defn go [] (my-app.core-utils/f) (my_app.core_utils.Rec. 1))
            """,
        )
        .build()
    )

    RenameEngine(Workspace(root)).rename(
        root / "src/my_app/core_utils.clj", root / "src/my_app/string_utils.clj"
    )

    main = (root / "src/my_app/main.clj").read_text()
    assert "[my-app.string-utils :as cu]" in main
    assert "[my_app.string_utils Rec]" in main
    assert "(my-app.string-utils/f)" in main
    assert (root / "src/my_app/string_utils.clj").read_text().startswith(
        "(ns my-app.string-utils)"
    )


def test_rename_into_hyphenated_namespace(workspace_factory):
    # 1. Arrange
    root = (
        workspace_factory.with_deps_edn(["src"])
        .with_source("src/app/util.clj", "(ns app.util)\n(defn f [] 1)\n")
        .with_source(
            "src/app/main.clj",
            """
            (ns app.main
              (:require [app.util :as u]))

            (defn go [] (app.util/f) (u/f))
            """,
        )
        .build()
    )

    # 2. Act
    RenameEngine(Workspace(root)).rename(root / "src/app/util.clj", root / "src/app/my_util.clj")

    # 3. Assert
    main = (root / "src/app/main.clj").read_text()
    assert "[app.my-util :as u]" in main
    assert "(app.my-util/f)" in main
    assert "app.my_util" not in main
    assert (root / "src/app/my_util.clj").read_text().startswith("(ns app.my-util)")


def test_rename_directory(workspace_factory):
    # 1. Arrange
    root = (
        workspace_factory.with_deps_edn(["src"])
        .with_source("src/app/util/num.clj", "(ns app.util.num)")
        .with_source("src/app/util/text.clj", "(ns app.util.text (:require [app.util.num :as n]))")
        .with_source("src/app/handler.clj", "(ns app.handler (:require app.util.text))")
        .build()
    )

    # 2. Act
    affected = RenameEngine(Workspace(root)).rename(root / "src/app/util", root / "src/app/helpers")

    # 3. Assert
    assert sorted(affected) == sorted(
        [
            _posix(root / "src/app/helpers/num.clj"),
            _posix(root / "src/app/helpers/text.clj"),
            _posix(root / "src/app/handler.clj"),
        ]
    )
    assert not (root / "src/app/util").exists()
    assert "[app.helpers.num :as n]" in (root / "src/app/helpers/text.clj").read_text()
    assert (root / "src/app/helpers/num.clj").read_text() == "(ns app.helpers.num)"
    assert "app.helpers.text" in (root / "src/app/handler.clj").read_text()


def test_directory_rename_outside_source_roots_leaves_tree_untouched(workspace_factory):
    # 1. Arrange
    root = (
        workspace_factory.with_deps_edn(["src"])
        .with_raw_file("src/app/LICENSE", "MIT")
        .with_source("src/app/core.clj", "(ns app.core)")
        .with_source("src/main.clj", "(ns main (:require app.core))")
        .build()
    )

    # 2. Act
    with pytest.raises(NoSourceRootFound):
        RenameEngine(Workspace(root)).rename(root / "src/app", root / "lib/app")

    # 3. Assert
    assert (root / "src/app/LICENSE").read_text() == "MIT"
    assert (root / "src/app/core.clj").read_text() == "(ns app.core)"
    assert (root / "src/main.clj").read_text() == "(ns main (:require app.core))"
    assert not (root / "lib").exists()


def test_plain_move_prunes_empty_directories(workspace_factory):
    root = (
        workspace_factory.with_deps_edn(["src"])
        .with_raw_file("src/app/data.edn", "{:a 1}")
        .with_source("src/main.clj", "(ns main)")
        .build()
    )

    affected = RenameEngine(Workspace(root)).rename(
        root / "src/app/data.edn", root / "resources/data.edn"
    )

    assert affected == [_posix(root / "resources/data.edn")]
    assert (root / "resources/data.edn").read_text() == "{:a 1}"
    assert not (root / "src/app").exists()
    assert (root / "src").is_dir()


def test_rename_without_dependents(workspace_factory):
    root = workspace_factory.with_deps_edn(["src"]).with_source("src/app/lonely.clj", "(ns app.lonely)").build()

    affected = RenameEngine(Workspace(root)).rename(
        root / "src/app/lonely.clj", root / "src/app/alone.clj"
    )

    assert affected == [_posix(root / "src/app/alone.clj")]
    assert (root / "src/app/alone.clj").read_text() == "(ns app.alone)"
