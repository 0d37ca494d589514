import logging
import os
from pathlib import Path
from typing import List, Optional, Set

from pysym.config import PysymConfig

log = logging.getLogger(__name__)

_SKIPPED_DIRS = {".venv", "venv", ".git", "__pycache__", "node_modules", ".tox"}


class Workspace:
    """
    The set of source roots a run analyses.

    Roots are the workspace directory itself, its ``src/`` and ``tests/``
    directories, the same for every nested ``pyproject.toml`` project, the
    configured search paths and ``PYTHONPATH``.
    """

    def __init__(self, root_path: Path, config: Optional[PysymConfig] = None):
        self.root_path = root_path.resolve()
        self.config = config or PysymConfig()
        self._roots: List[Path] = self._discover_roots()

    def _discover_roots(self) -> List[Path]:
        roots: Set[Path] = set(self._find_code_dirs(self.root_path))

        for dirpath, dirnames, filenames in os.walk(self.root_path):
            dirnames[:] = sorted(d for d in dirnames if d not in _SKIPPED_DIRS)
            pkg_root = Path(dirpath)
            if pkg_root == self.root_path or "pyproject.toml" not in filenames:
                continue
            roots.update(self._find_code_dirs(pkg_root))

        for path in self.config.resolved_search_paths():
            if path.is_dir():
                roots.add(path)
            else:
                log.warning(f"Configured search path {path} is not a directory")

        for entry in os.environ.get("PYTHONPATH", "").split(os.pathsep):
            if entry and Path(entry).is_dir():
                roots.add(Path(entry).resolve())

        return sorted(roots)

    def _find_code_dirs(self, pkg_root: Path) -> List[Path]:
        dirs: Set[Path] = {pkg_root}

        src_dir = pkg_root / "src"
        if src_dir.is_dir():
            dirs.add(src_dir)

        tests_dir = pkg_root / "tests"
        if tests_dir.is_dir():
            dirs.add(tests_dir)

        return sorted(dirs)

    def get_search_paths(self) -> List[Path]:
        return list(self._roots)

    def contains(self, path: Path) -> bool:
        return path.resolve().is_relative_to(self.root_path)
