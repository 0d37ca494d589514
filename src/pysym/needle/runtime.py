import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from .loader import Loader
from .pointer import SemanticPointer


def find_project_root(start_dir: Optional[Path] = None) -> Path:
    """
    Finds the project root by searching upwards for common markers.
    Search priority: pyproject.toml -> .git
    """
    start = (start_dir or Path.cwd()).resolve()
    current_dir = start
    while current_dir.parent != current_dir:
        if (current_dir / "pyproject.toml").is_file():
            return current_dir
        if (current_dir / ".git").is_dir():
            return current_dir
        current_dir = current_dir.parent
    return start


class Needle:
    """
    The runtime kernel for semantic addressing.

    Message templates live in ``<asset_root>/needle/<lang>/*.json``. Project
    overrides in ``<project>/.pysym/needle/<lang>/`` win over packaged assets.
    """

    def __init__(
        self,
        asset_roots: Optional[List[Path]] = None,
        project_root: Optional[Path] = None,
    ):
        self.default_lang = "en"
        self.asset_roots: List[Path] = list(asset_roots or [])
        self.project_root = project_root
        self._registry: Dict[str, Dict[str, str]] = {}
        self._loader = Loader()

    def _ensure_lang_loaded(self, lang: str) -> Dict[str, str]:
        if lang in self._registry:
            return self._registry[lang]

        merged: Dict[str, str] = {}
        for root in self.asset_roots:
            merged.update(self._loader.load_directory(root / "needle" / lang))

        project_root = self.project_root or find_project_root()
        merged.update(
            self._loader.load_directory(project_root / ".pysym" / "needle" / lang)
        )

        self._registry[lang] = merged
        return merged

    def get(
        self, pointer: Union[SemanticPointer, str], lang: Optional[str] = None
    ) -> str:
        """
        Resolves a semantic pointer to a string value with graceful fallback.

        Lookup Order:
        1. Target Language
        2. Default Language (en)
        3. Identity (the key itself)
        """
        key = str(pointer)
        target_lang = lang or os.getenv("PYSYM_LANG", self.default_lang)

        val = self._ensure_lang_loaded(target_lang).get(key)
        if val is not None:
            return val

        if target_lang != self.default_lang:
            val = self._ensure_lang_loaded(self.default_lang).get(key)
            if val is not None:
                return val

        return key
