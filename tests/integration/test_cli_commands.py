import json

from typer.testing import CliRunner

from lathe.cli import factories
from lathe.cli.main import app
from lathe.find import InvokeNode, Span, SymbolLocator, VarNode
from lathe.needle import L
from lathe.test_utils import SpyBus, StubAstProvider

runner = CliRunner()

CORE = "(ns app.core)\n(defn run [x] x)\n"
USER = "(ns app.user\n  (:require [app.core :as core]))\n\n(defn go [] (core/run 1))\n"


def _project(workspace_factory):
    return (
        workspace_factory.with_deps_edn(["src"])
        .with_source("src/app/core.clj", CORE)
        .with_source("src/app/user.clj", USER)
        .build()
    )


def _stub_locator(monkeypatch):
    fn = VarNode(var="#'app.core/run", span=Span(4, 14, 4, 22))
    forest = [InvokeNode(fn=fn, span=Span(4, 13, 4, 25), children=(fn,))]
    provider = StubAstProvider(lambda source: forest if source == USER else [])
    monkeypatch.setattr(
        factories, "make_locator", lambda workspace: SymbolLocator(workspace, provider)
    )


def test_rename_command_applies_with_yes(workspace_factory, monkeypatch):
    # 1. Arrange
    root = _project(workspace_factory)

    # 2. Act
    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(
            app,
            ["rename", "src/app/core.clj", "src/app/domain/core.clj", "--yes"],
            catch_exceptions=False,
        )

    # 3. Assert
    assert result.exit_code == 0, result.stdout
    spy_bus.assert_id_called(L.rename.run.preview_header, level="warning")
    spy_bus.assert_id_called(L.rename.run.success, level="success")
    assert (root / "src/app/domain/core.clj").exists()
    assert "[app.domain.core :as core]" in (root / "src/app/user.clj").read_text()


def test_rename_command_dry_run_changes_nothing(workspace_factory, monkeypatch):
    root = _project(workspace_factory)

    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(
            app,
            ["rename", "src/app/core.clj", "src/app/domain/core.clj", "--dry-run"],
            catch_exceptions=False,
        )

    assert result.exit_code == 0, result.stdout
    assert "[MOVE] src/app/core.clj -> src/app/domain/core.clj" in result.stdout
    assert (root / "src/app/core.clj").exists()
    assert not (root / "src/app/domain").exists()


def test_rename_command_aborts_without_confirmation(workspace_factory, monkeypatch):
    root = _project(workspace_factory)

    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(
            app, ["rename", "src/app/core.clj", "src/app/main.clj"], input="n\n"
        )

    assert result.exit_code == 1
    spy_bus.assert_id_called(L.rename.run.aborted, level="error")
    assert (root / "src/app/core.clj").exists()


def test_rename_command_reports_invalid_requests(workspace_factory, monkeypatch):
    _project(workspace_factory)

    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(app, ["rename", "src/app/missing.clj", "src/app/x.clj", "-y"])

    assert result.exit_code == 1
    spy_bus.assert_id_called(L.error.generic, level="error")


def test_find_command(workspace_factory, monkeypatch):
    _project(workspace_factory)
    _stub_locator(monkeypatch)

    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(
            app, ["find", "run", "--ns", "app.core"], catch_exceptions=False
        )

    assert result.exit_code == 0, result.stdout
    spy_bus.assert_id_called(L.find.run.match)
    counts = [m for m in spy_bus.get_messages() if m["id"] == str(L.find.run.result_count)]
    assert counts[0]["params"]["count"] == 1


def test_find_command_json_output(workspace_factory, monkeypatch):
    root = _project(workspace_factory)
    _stub_locator(monkeypatch)

    result = runner.invoke(
        app, ["find", "run", "--file", "src/app/core.clj", "--json"], catch_exceptions=False
    )

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload == [
        {
            "line-beg": 4,
            "line-end": 4,
            "col-beg": 14,
            "col-end": 22,
            "name": "app.core/run",
            "file": str((root / "src/app/user.clj").resolve()),
            "match": "(defn go [] (core/run 1))",
        }
    ]


def test_find_command_without_analyzer_fails_cleanly(workspace_factory, monkeypatch):
    _project(workspace_factory)

    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(app, ["find", "run", "--ns", "app.core"])

    assert result.exit_code == 1
    spy_bus.assert_id_called(L.error.generic, level="error")


def test_debug_fns_command(workspace_factory, monkeypatch):
    _project(workspace_factory)
    _stub_locator(monkeypatch)

    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(
            app, ["debug-fns", "src/app/user.clj", "app.core/run"], catch_exceptions=False
        )

    assert result.exit_code == 0, result.stdout
    spy_bus.assert_id_called(L.find.debug.match)


def test_deps_command(workspace_factory, monkeypatch):
    root = _project(workspace_factory)

    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        result = runner.invoke(app, ["deps", "app.core"], catch_exceptions=False)

    assert result.exit_code == 0, result.stdout
    entries = [m["params"]["path"] for m in spy_bus.get_messages() if m["id"] == str(L.deps.run.entry)]
    assert entries == [(root / "src/app/user.clj").as_posix()]
