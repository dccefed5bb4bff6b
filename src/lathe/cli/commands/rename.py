from pathlib import Path

import typer

from lathe.common import bus, needle
from lathe.errors import LatheError, PartialCommitError
from lathe.needle import L
from lathe.cli import factories


def rename_command(
    old_path: Path = typer.Argument(..., help="File or directory to move."),
    new_path: Path = typer.Argument(..., help="Destination path."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help=needle.get(L.cli.option.rename_dry_run.help)
    ),
    yes: bool = typer.Option(
        False, "-y", "--yes", help=needle.get(L.cli.option.rename_yes.help)
    ),
):
    try:
        workspace = factories.get_workspace()
        bus.debug(L.debug.log.source_roots, roots=workspace.source_roots())
        engine = factories.make_rename_engine(workspace)

        bus.info(L.rename.run.planning, old=old_path, new=new_path)
        planned = engine.preview(old_path, new_path)
        bus.warning(L.rename.run.preview_header, count=len(planned))
        for desc in planned:
            typer.echo(f"  {desc}")

        if dry_run:
            return

        confirmed = yes or typer.confirm(needle.get(L.rename.run.confirm), default=False)
        if not confirmed:
            bus.error(L.rename.run.aborted)
            raise typer.Exit(code=1)

        bus.info(L.rename.run.applying, old=old_path, new=new_path)
        affected = engine.rename(old_path, new_path)
        for path in affected:
            bus.info(L.rename.run.affected, path=path)
        bus.success(L.rename.run.success, count=len(affected))

    except PartialCommitError as e:
        bus.error(
            L.rename.run.partial,
            count=len(e.applied),
            failed=e.failed,
            applied=", ".join(e.applied),
        )
        raise typer.Exit(code=1)
    except LatheError as e:
        bus.error(L.error.generic, error=str(e))
        raise typer.Exit(code=1)
