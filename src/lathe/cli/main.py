import logging

import typer

from lathe.common import bus, needle
from lathe.needle import L
from .rendering import CliRenderer

from .commands.rename import rename_command
from .commands.find import find_command, debug_fns_command, deps_command

app = typer.Typer(
    name="lathe",
    help=needle.get(L.cli.app.description),
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help=needle.get(L.cli.option.verbose.help)
    ),
):
    # The CLI is the composition root: it picks the renderer and log level.
    bus.set_renderer(CliRenderer(verbose=verbose))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.command(name="rename", help=needle.get(L.cli.command.rename.help))(rename_command)
app.command(name="find", help=needle.get(L.cli.command.find.help))(find_command)
app.command(name="debug-fns", help=needle.get(L.cli.command.debug_fns.help))(
    debug_fns_command
)
app.command(name="deps", help=needle.get(L.cli.command.deps.help))(deps_command)


if __name__ == "__main__":
    app()
