from pathlib import Path
from typing import Optional, Sequence, TextIO, Union

from pysym.analysis import OccurrenceClassifier, OccurrenceVisitor
from pysym.common import bus
from pysym.lang.python import (
    CompilationUnit,
    Package,
    PackageCache,
    PythonPackageLocator,
    ScopeResolver,
)
from pysym.needle import L
from pysym.spec.errors import PackageLocatorError
from pysym.spec.models import Position
from pysym.workspace import Workspace


class SymbolContext:
    """
    Everything one run needs: the workspace, the package locator and cache,
    the resolver and the stream protocol lines are written to.
    """

    def __init__(
        self,
        workspace: Workspace,
        out: TextIO,
        thread_safe: bool = True,
        extra_paths: Optional[Sequence[str]] = None,
    ):
        self.workspace = workspace
        self.out = out
        self.locator = PythonPackageLocator(workspace, extra_paths)
        self.cache = PackageCache(self.locator, thread_safe=thread_safe)
        self.resolver = ScopeResolver(self.cache)
        self.classifier = OccurrenceClassifier(self.resolver)

    def importer(self, ref: Union[str, Path]) -> Optional[Package]:
        try:
            pkg = self.cache.package(ref)
        except PackageLocatorError as e:
            bus.debug(L.package.locator_failed, package=str(ref), error=str(e))
            pkg = None
        if pkg is None:
            bus.error(L.package.not_found, package=str(ref))
        return pkg

    def visit_exprs(self, visitor: OccurrenceVisitor, unit: CompilationUnit) -> bool:
        return self.classifier.visit_exprs(visitor, unit)

    def import_path_of(self, position: Position) -> str:
        return self.locator.import_path_of(position)

    def printf(self, line: str) -> None:
        self.out.write(line + "\n")
