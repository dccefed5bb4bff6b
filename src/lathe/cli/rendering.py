from typing import Dict, Optional

import typer

from lathe.common.messaging import protocols

LEVEL_COLORS: Dict[str, Optional[str]] = {
    "debug": typer.colors.BRIGHT_BLACK,
    "info": None,
    "success": typer.colors.GREEN,
    "warning": typer.colors.YELLOW,
    "error": typer.colors.RED,
}


class CliRenderer(protocols.Renderer):
    """Colored terminal output; errors go to stderr, debug only when verbose."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def render(self, message: str, level: str) -> None:
        if level == "debug" and not self.verbose:
            return
        typer.secho(message, fg=LEVEL_COLORS.get(level), err=level == "error")
