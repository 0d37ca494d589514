from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from pysym.common import bus
from pysym.common.transaction import FileSystemAdapter
from pysym.config import PysymConfig, load_config_from_path
from pysym.needle import L
from pysym.workspace import Workspace

from ..context import SymbolContext
from .print_symbols import print_syms


class SymbolRunner:
    """Bootstraps a workspace from ``root_path`` and runs one command."""

    def __init__(
        self,
        root_path: Path,
        out: TextIO,
        config: Optional[PysymConfig] = None,
        extra_paths: Optional[Sequence[str]] = None,
    ):
        self.root_path = root_path
        self.out = out
        self.config = config or load_config_from_path(root_path)
        self.extra_paths = extra_paths
        self.workspace = Workspace(root_path, self.config)
        bus.debug(
            L.debug.log.workspace_paths, paths=self.workspace.get_search_paths()
        )

    def run_print(
        self,
        pkgs: List[str],
        mask: int,
        show_all: bool = False,
        print_type: bool = False,
    ) -> bool:
        ctx = SymbolContext(
            self.workspace,
            self.out,
            thread_safe=self.config.thread_safe,
            extra_paths=self.extra_paths,
        )
        print_syms(ctx, mask, pkgs, show_all=show_all, print_type=print_type)
        return True

    def run_rename(
        self,
        pkgs: List[str],
        stdin: TextIO,
        fs: Optional[FileSystemAdapter] = None,
    ) -> bool:
        # Deferred import: the rename engine itself depends on pysym.app.
        from pysym.refactor.engine import RenameSession

        session = RenameSession(
            self.workspace,
            self.out,
            thread_safe=self.config.thread_safe,
            extra_paths=self.extra_paths,
            fs=fs,
        )
        session.read_symbols(stdin)
        bus.debug(
            L.debug.log.rename_directives,
            count=len(session.lines),
            plus=len(session.plus_pkgs),
        )
        session.add_globals()
        bus.debug(L.debug.log.rename_globals, count=len(session.global_replace))
        session.replace(pkgs)
        return True
