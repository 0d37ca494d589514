import typer

from pysym.common.messaging.protocols import Level, Renderer

_COLORS = {
    "success": typer.colors.GREEN,
    "warning": typer.colors.YELLOW,
    "error": typer.colors.RED,
    "debug": typer.colors.BRIGHT_BLACK,
}


class CliRenderer(Renderer):
    """Writes diagnostics to stderr; stdout is reserved for symbol lines."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def render(self, message: str, level: Level) -> None:
        if level == "debug" and not self.verbose:
            return
        typer.secho(message, fg=_COLORS.get(level), err=True)
