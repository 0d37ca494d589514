import sys
from pathlib import Path
from typing import List, Optional

import typer

from pysym.app import SymbolRunner
from pysym.common import bus, pysym_needle as nexus
from pysym.config import load_config_from_path
from pysym.needle import L
from pysym.spec.errors import KindMaskError, StructuralError
from pysym.symline import all_kinds, parse_kind_mask
from .rendering import CliRenderer

app = typer.Typer(
    name="pysym",
    help=nexus.get(L.cli.app.description),
    add_completion=False,
)


@app.command(epilog=nexus.get(L.cli.app.line_format))
def main(
    packages: Optional[List[str]] = typer.Argument(
        None, help=nexus.get(L.cli.argument.packages.help)
    ),
    kinds: Optional[str] = typer.Option(
        None, "--kinds", "-k", help=nexus.get(L.cli.option.kinds.help)
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help=nexus.get(L.cli.option.verbose.help)
    ),
    print_type: bool = typer.Option(
        False, "--types", "-t", help=nexus.get(L.cli.option.types.help)
    ),
    show_all: bool = typer.Option(
        False, "--all", "-a", help=nexus.get(L.cli.option.all.help)
    ),
    write: bool = typer.Option(
        False, "--write", "-w", help=nexus.get(L.cli.option.write.help)
    ),
    root: Optional[Path] = typer.Option(
        None, "--root", help=nexus.get(L.cli.option.root.help)
    ),
):
    # The CLI is the composition root. It decides *which* renderer to use.
    bus.set_renderer(CliRenderer(verbose=verbose))

    root_path = (root or Path.cwd()).resolve()
    config = load_config_from_path(root_path)

    kind_list = kinds if kinds is not None else (config.kinds or all_kinds())
    try:
        mask = parse_kind_mask(kind_list)
    except KindMaskError as e:
        raise typer.BadParameter(str(e), param_hint="'--kinds'")

    pkgs = list(packages) if packages else ["."]

    try:
        runner = SymbolRunner(root_path, sys.stdout, config=config)
        if write:
            success = runner.run_rename(pkgs, sys.stdin)
        else:
            success = runner.run_print(
                pkgs, mask, show_all=show_all, print_type=print_type
            )
    except StructuralError as e:
        bus.error(L.error.structural, error=str(e))
        raise typer.Exit(code=1)
    finally:
        sys.stdout.flush()

    if not success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
