from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Set, TextIO, Union

from pysym.analysis import OccurrenceVisitor
from pysym.app.context import SymbolContext
from pysym.common import bus
from pysym.common.transaction import FileSystemAdapter, TransactionManager
from pysym.lang.python import CompilationUnit, CstPrinter
from pysym.lang.python.printer import EditKey
from pysym.needle import L
from pysym.spec.errors import PackageLocatorError, PrinterError, SymbolLineError
from pysym.spec.protocols import Printer
from pysym.spec.models import (
    DeclarationIdentity,
    ObjKind,
    Occurrence,
    PositionKey,
    SymbolLine,
    display_path,
)
from pysym.symline import decode
from pysym.workspace import Workspace


class RenameSession(SymbolContext):
    """
    Applies rename directives read as symbol lines.

    A line marked ``+`` renames every occurrence of the declaration found at
    its position, in every package the rename runs over. A line without the
    mark renames only the occurrence at its own position. Renames are
    recorded as edits per unit and written out by ``flush``; units without
    edits are never written.
    """

    def __init__(
        self,
        workspace: Workspace,
        out: TextIO,
        thread_safe: bool = True,
        extra_paths: Optional[Sequence[str]] = None,
        fs: Optional[FileSystemAdapter] = None,
    ):
        super().__init__(workspace, out, thread_safe, extra_paths)
        self.fs = fs
        self.printer: Printer = CstPrinter()
        # All input lines, by position without byte offset.
        self.lines: Dict[PositionKey, SymbolLine] = {}
        # Package directories holding a line with a "+".
        self.plus_pkgs: Set[Path] = set()
        # Package directories mentioned by any line.
        self.sym_pkgs: Set[Path] = set()
        # Declarations renamed everywhere, with their new name.
        self.global_replace: Dict[DeclarationIdentity, str] = {}
        # Declarations with contradicting directives; never renamed.
        self.conflicted: Set[DeclarationIdentity] = set()
        self.edits: Dict[str, Dict[EditKey, str]] = {}
        self.changed: Dict[str, CompilationUnit] = {}

    def read_symbols(self, stream: Iterable[str]) -> None:
        for raw in stream:
            text = raw.rstrip("\r\n")
            if not text.strip():
                continue
            try:
                sym = decode(text)
            except SymbolLineError as e:
                bus.warning(L.rename.bad_line, line=text, error=str(e))
                continue

            key = sym.position.key
            old = self.lines.get(key)
            if old is not None:
                bus.warning(
                    L.rename.duplicate,
                    pos=str(sym.position),
                    original=str(old.position),
                )
                continue

            try:
                self.import_path_of(sym.position)
            except PackageLocatorError as e:
                bus.warning(L.rename.no_package, pos=str(sym.position), error=str(e))
                continue

            self.lines[key] = sym
            pkg_dir = Path(key[0]).parent
            if sym.plus:
                self.plus_pkgs.add(pkg_dir)
            self.sym_pkgs.add(pkg_dir)

    def add_globals(self) -> None:
        """Records every "+" directive against the declaration it names."""

        def visit(occ: Occurrence) -> bool:
            if occ.kind is ObjKind.MODULE:
                return True
            line = self.lines.get(occ.position.key)
            if line is None or not line.plus:
                return True
            sym = line.sym_name
            identity = occ.identity
            if identity.name == sym or identity in self.conflicted:
                return True

            old = self.global_replace.get(identity)
            if old is not None and old != sym:
                bus.error(
                    L.rename.conflict.global_global,
                    pos=str(occ.position),
                    expr=line.expr,
                    old=old,
                    new=sym,
                )
                self.conflicted.add(identity)
                del self.global_replace[identity]
                return True

            self.global_replace[identity] = sym
            return True

        for pkg_dir in sorted(self.plus_pkgs):
            pkg = self.importer(pkg_dir)
            if pkg is None:
                continue
            for unit in pkg.units:
                self.visit_exprs(visit, unit)

    def replace(self, pkgs: Iterable[Union[str, Path]]) -> None:
        """Renames occurrences in ``pkgs`` and writes the changed files."""
        for ref in pkgs:
            pkg = self.importer(ref)
            if pkg is None:
                continue
            for unit in pkg.units:
                self.visit_exprs(self._replace_visitor(unit), unit)
        self.flush()

    def _replace_visitor(self, unit: CompilationUnit) -> OccurrenceVisitor:
        def visit(occ: Occurrence) -> bool:
            if occ.kind is ObjKind.MODULE:
                return True
            identity = occ.identity
            line = self.lines.get(occ.position.key)
            glob_sym = self.global_replace.get(identity)

            if identity in self.conflicted:
                if line is not None:
                    bus.warning(L.rename.conflict.skipped, pos=str(occ.position))
                return True
            if line is None and glob_sym is None:
                return True

            new_sym: Optional[str] = None
            line_repl = line is not None
            if line is not None:
                new_sym = line.sym_name
                if new_sym == identity.name:
                    # A line for this symbol that keeps its name.
                    line_repl = False
            if glob_sym is not None:
                if line_repl and glob_sym != new_sym:
                    bus.error(
                        L.rename.conflict.global_local,
                        pos=str(occ.position),
                        glob=glob_sym,
                        local=new_sym,
                    )
                    return True
                new_sym = glob_sym

            if new_sym == occ.name:
                self.printf(f"{occ.position}: no change")
                return True

            pos = occ.position
            self.edits.setdefault(unit.path, {})[(pos.line, pos.column)] = new_sym
            self.changed[unit.path] = unit
            return True

        return visit

    def flush(self) -> None:
        tm = TransactionManager(self.workspace.root_path, self.fs)
        for path in sorted(self.changed):
            unit = self.changed[path]
            try:
                code = self.printer.render(unit, self.edits[path])
            except PrinterError as e:
                bus.error(L.rename.print_failed, path=display_path(path), error=str(e))
                continue
            tm.add_write(Path(path), code)

        for op in tm.commit():
            self.printf(display_path(str(op.path)))

        self.changed.clear()
        self.edits.clear()
