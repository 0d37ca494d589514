import threading
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import libcst as cst
from libcst.metadata import (
    ByteSpanPositionProvider,
    ExpressionContextProvider,
    MetadataWrapper,
    ParentNodeProvider,
    PositionProvider,
    ScopeProvider,
)

from pysym.common import bus
from pysym.needle import L

from pysym.spec.protocols import PackageLocator

from .locator import ROOT_PACKAGE

_PROVIDERS = (
    ScopeProvider,
    PositionProvider,
    ByteSpanPositionProvider,
    ParentNodeProvider,
    ExpressionContextProvider,
)


def module_name_for(import_path: str, stem: str) -> str:
    if stem == "__init__":
        return stem if import_path == ROOT_PACKAGE else import_path
    return stem if import_path == ROOT_PACKAGE else f"{import_path}.{stem}"


class CompilationUnit:
    """
    One parsed source file together with the libcst metadata the resolver
    and the classifier need. Metadata is computed on first use.
    """

    def __init__(self, path: Path, import_path: str, module: cst.Module):
        self.path = str(path)
        self.import_path = import_path
        self.module_name = module_name_for(import_path, path.stem)
        self.is_package_init = path.stem == "__init__"
        self.wrapper = MetadataWrapper(module)
        self._metadata: Optional[Mapping[Any, Mapping[cst.CSTNode, Any]]] = None

    @property
    def module(self) -> cst.Module:
        return self.wrapper.module

    @property
    def package_name(self) -> Optional[str]:
        """The package relative imports in this unit are resolved against."""
        if self.is_package_init:
            return None if self.import_path == ROOT_PACKAGE else self.module_name
        return None if self.import_path == ROOT_PACKAGE else self.import_path

    def metadata(self, provider: Any) -> Mapping[cst.CSTNode, Any]:
        if self._metadata is None:
            self._metadata = self.wrapper.resolve_many(_PROVIDERS)
        return self._metadata[provider]

    @property
    def scopes(self) -> Mapping[cst.CSTNode, Any]:
        return self.metadata(ScopeProvider)

    @property
    def positions(self) -> Mapping[cst.CSTNode, Any]:
        return self.metadata(PositionProvider)

    @property
    def byte_spans(self) -> Mapping[cst.CSTNode, Any]:
        return self.metadata(ByteSpanPositionProvider)

    @property
    def parents(self) -> Mapping[cst.CSTNode, cst.CSTNode]:
        return self.metadata(ParentNodeProvider)

    @property
    def expression_contexts(self) -> Mapping[cst.CSTNode, Any]:
        return self.metadata(ExpressionContextProvider)

    def __repr__(self) -> str:
        return f"<CompilationUnit {self.module_name} at {self.path}>"


class Package:
    def __init__(self, import_path: str, directory: Path, cache: "PackageCache"):
        self.import_path = import_path
        self.directory = directory
        self._cache = cache

    @property
    def units(self) -> List[CompilationUnit]:
        units = []
        for path in sorted(self.directory.glob("*.py")):
            unit = self._cache.unit_at(path)
            if unit is not None:
                units.append(unit)
        return units

    def __repr__(self) -> str:
        return f"<Package {self.import_path} at {self.directory}>"


class PackageCache:
    """
    Memoizes packages by directory and compilation units by file for one run.

    Each file is parsed at most once. When ``thread_safe`` is set, lookups
    and parses are serialized by a lock.
    """

    def __init__(self, locator: PackageLocator, thread_safe: bool = True):
        self.locator = locator
        self._lock = threading.RLock() if thread_safe else nullcontext()
        self._packages: Dict[Path, Package] = {}
        self._units: Dict[Path, Optional[CompilationUnit]] = {}

    def package(self, ref: Union[str, Path]) -> Optional[Package]:
        """
        Looks up a package by dotted identifier or by directory.

        ``.`` and anything that looks like a path are taken relative to the
        working directory; dotted identifiers are searched on the search
        paths and fall back to a directory of the same name.
        """
        directory: Optional[Path]
        if isinstance(ref, Path):
            directory = ref
        elif ref == ROOT_PACKAGE or "/" in ref or ref.startswith("."):
            directory = Path(ref)
        else:
            directory = self.locator.directory_of(ref)
            if directory is None and Path(ref).is_dir():
                directory = Path(ref)
        if directory is None or not directory.is_dir():
            return None
        return self.package_at(directory)

    def package_at(self, directory: Path) -> Package:
        directory = directory.resolve()
        with self._lock:
            pkg = self._packages.get(directory)
            if pkg is None:
                import_path = self.locator.import_path_of_dir(directory)
                pkg = Package(import_path, directory, self)
                self._packages[directory] = pkg
            return pkg

    def unit_at(self, path: Path) -> Optional[CompilationUnit]:
        path = path.resolve()
        with self._lock:
            if path in self._units:
                return self._units[path]
            unit = self._parse(path)
            self._units[path] = unit
            return unit

    def unit_for_module(self, module_name: str) -> Optional[CompilationUnit]:
        path = self.locator.find_module_file(module_name)
        if path is None:
            return None
        return self.unit_at(path)

    def _parse(self, path: Path) -> Optional[CompilationUnit]:
        try:
            source = path.read_bytes()
            module = cst.parse_module(source)
        except OSError as e:
            bus.error(L.cache.read_failed, path=str(path), error=str(e))
            return None
        except cst.ParserSyntaxError as e:
            bus.error(L.cache.parse_failed, path=str(path), error=str(e))
            return None
        import_path = self.locator.import_path_of_dir(path.parent)
        return CompilationUnit(path, import_path, module)
