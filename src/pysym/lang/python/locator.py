import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import griffe

from pysym.spec.errors import PackageLocatorError, StructuralError
from pysym.spec.models import Position
from pysym.workspace import Workspace

log = logging.getLogger(__name__)

ROOT_PACKAGE = "."


def _existing_dirs(paths: Sequence[str]) -> List[Path]:
    dirs = []
    for entry in paths:
        if not entry:
            continue
        path = Path(entry)
        if path.is_dir():
            dirs.append(path.resolve())
    return dirs


class PythonPackageLocator:
    """
    Maps directories to package identifiers and back.

    A package is a directory; its identifier is the dotted path of the
    directory relative to the deepest search root containing it, or ``.``
    for a search root itself. Workspace roots are searched before
    ``sys.path``.
    """

    def __init__(
        self, workspace: Workspace, extra_paths: Optional[Sequence[str]] = None
    ):
        self.workspace = workspace
        workspace_roots = workspace.get_search_paths()
        external = [
            p
            for p in _existing_dirs(sys.path if extra_paths is None else extra_paths)
            if p not in workspace_roots
        ]
        self.workspace_roots: List[Path] = workspace_roots
        self.external_roots: List[Path] = external
        self._roots_by_depth = sorted(
            workspace_roots + external, key=lambda p: len(p.parts), reverse=True
        )
        self._pkg_dirs: Dict[str, str] = {}
        self._module_files: Dict[str, Optional[Path]] = {}
        self._finder = griffe.ModuleFinder(search_paths=external)

    @property
    def search_paths(self) -> List[Path]:
        return self.workspace_roots + self.external_roots

    def import_path_of(self, position: Position) -> str:
        if not position.file:
            raise StructuralError(f"empty file name at {position}")
        directory = os.path.dirname(os.path.realpath(position.file))
        return self.import_path_of_dir(Path(directory))

    def import_path_of_dir(self, directory: Path) -> str:
        key = str(directory)
        cached = self._pkg_dirs.get(key)
        if cached is not None:
            return cached

        resolved = directory.resolve()
        for root in self._roots_by_depth:
            if resolved == root or resolved.is_relative_to(root):
                rel = resolved.relative_to(root)
                import_path = ".".join(rel.parts) if rel.parts else ROOT_PACKAGE
                self._pkg_dirs[key] = import_path
                return import_path

        raise PackageLocatorError(
            f"cannot reverse-map {directory} to a package: not under any search path"
        )

    def directory_of(self, import_path: str) -> Optional[Path]:
        """Finds the directory of a dotted package identifier."""
        if import_path == ROOT_PACKAGE:
            return Path.cwd().resolve()
        parts = import_path.split(".")
        for root in self.search_paths:
            candidate = root.joinpath(*parts)
            if candidate.is_dir():
                return candidate
        return None

    def find_module_file(self, module_name: str) -> Optional[Path]:
        """
        Finds the source file of a module: ``a/b.py`` or ``a/b/__init__.py``.

        Workspace roots are searched directly; everything else is located
        with griffe's module finder over ``sys.path``. Returns None for
        compiled, namespace and unknown modules.
        """
        if module_name in self._module_files:
            return self._module_files[module_name]

        found = self._find_in_workspace(module_name)
        if found is None:
            found = self._find_external(module_name)
        self._module_files[module_name] = found
        return found

    def _find_in_workspace(self, module_name: str) -> Optional[Path]:
        parts = module_name.split(".")
        for root in self.workspace_roots:
            base = root.joinpath(*parts)
            for candidate in (base.with_suffix(".py"), base / "__init__.py"):
                if candidate.is_file():
                    return candidate.resolve()
        return None

    def _find_external(self, module_name: str) -> Optional[Path]:
        if not self.external_roots:
            return None
        top, *rest = module_name.split(".")
        try:
            # The finder resolves the top-level package only.
            _, package = self._finder.find_spec(top, try_relative_path=False)
        except ModuleNotFoundError:
            return None
        path = getattr(package, "path", None)
        # Namespace packages carry a list of directories instead of a file.
        if not isinstance(path, Path) or path.suffix != ".py":
            return None
        if not rest:
            return path.resolve()
        if path.name != "__init__.py":
            return None
        base = path.parent.joinpath(*rest)
        for candidate in (base.with_suffix(".py"), base / "__init__.py"):
            if candidate.is_file():
                return candidate.resolve()
        return None
