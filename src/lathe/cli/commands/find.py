import json
from pathlib import Path
from typing import Optional

import typer

from lathe.common import bus, needle
from lathe.errors import LatheError
from lathe.needle import L
from lathe.refactor import NamespaceTracker
from lathe.cli import factories


def find_command(
    name: str = typer.Argument(..., help="Name of the var, local or macro."),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help=needle.get(L.cli.option.find_file.help)
    ),
    ns: Optional[str] = typer.Option(
        None, "--ns", help=needle.get(L.cli.option.find_ns.help)
    ),
    directory: Optional[Path] = typer.Option(
        None, "--dir", "-d", help=needle.get(L.cli.option.find_dir.help)
    ),
    line: Optional[int] = typer.Option(
        None, "--line", help=needle.get(L.cli.option.find_line.help)
    ),
    column: Optional[int] = typer.Option(
        None, "--column", help=needle.get(L.cli.option.find_column.help)
    ),
    as_json: bool = typer.Option(
        False, "--json", help=needle.get(L.cli.option.json.help)
    ),
):
    try:
        workspace = factories.get_workspace()
        bus.debug(L.debug.log.analyzer, command=workspace.config.analyzer_command)
        locator = factories.make_locator(workspace)
        results = locator.find_symbol(
            file,
            name,
            namespace=ns,
            directory=directory or workspace.root_path,
            line=line,
            column=column,
        )
    except LatheError as e:
        bus.error(L.error.generic, error=str(e))
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    if not results:
        bus.info(L.find.run.no_results, name=name)
        return
    for ref in results:
        bus.info(
            L.find.run.match,
            file=ref.file,
            line=ref.line_beg,
            column=ref.col_beg,
            match=ref.match,
        )
    bus.success(L.find.run.result_count, count=len(results), name=name)


def debug_fns_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    names: str = typer.Argument(..., help="Comma-separated function names."),
    as_json: bool = typer.Option(
        False, "--json", help=needle.get(L.cli.option.json.help)
    ),
):
    try:
        workspace = factories.get_workspace()
        locator = factories.make_locator(workspace)
        results = locator.find_debug_invocations(
            file.read_text(encoding="utf-8"), names
        )
    except LatheError as e:
        bus.error(L.error.generic, error=str(e))
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps([r.to_dict() for r in results or []], indent=2))
        return

    if results is None:
        bus.info(L.find.debug.none, names=names)
        return
    for ref in results:
        bus.info(
            L.find.debug.match,
            line=ref.line_beg,
            column=ref.col_beg,
            name=ref.name,
            match=ref.match,
        )


def deps_command(
    namespace: str = typer.Argument(..., help="Namespace whose dependents to list."),
):
    try:
        workspace = factories.get_workspace()
    except LatheError as e:
        bus.error(L.error.generic, error=str(e))
        raise typer.Exit(code=1)
    tracker = NamespaceTracker.build(workspace)

    dependents = sorted(tracker.dependents(namespace))
    bus.info(L.deps.run.header, count=len(dependents), namespace=namespace)
    for path in dependents:
        bus.info(L.deps.run.entry, path=path.as_posix())
    for cycle in tracker.cycles_through(namespace):
        bus.warning(L.deps.run.cycle, namespace=namespace, cycle=" -> ".join(cycle))
