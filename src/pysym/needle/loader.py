import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

log = logging.getLogger(__name__)


class FileHandler(Protocol):
    """Reads one message catalog format into a flat ``{id: template}`` map."""

    def match(self, path: Path) -> bool: ...

    def load(self, path: Path) -> Dict[str, Any]: ...


class JsonHandler:
    def match(self, path: Path) -> bool:
        return path.suffix.lower() == ".json"

    def load(self, path: Path) -> Dict[str, Any]:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)


class Loader:
    """
    Collects message templates from every catalog below a directory.

    Files are read in sorted order, so a later file overrides an id an
    earlier one defined. A catalog that cannot be read is skipped.
    """

    def __init__(self, handlers: Optional[List[FileHandler]] = None):
        self.handlers = handlers or [JsonHandler()]

    def _merge_file(self, path: Path, registry: Dict[str, str]) -> None:
        handler = next((h for h in self.handlers if h.match(path)), None)
        if handler is None:
            return
        try:
            content = handler.load(path)
        except (OSError, json.JSONDecodeError) as e:
            log.warning(f"Skipping malformed message catalog {path}: {e}")
            return
        for msg_id, template in content.items():
            registry[msg_id] = str(template)

    def load_directory(self, root_path: Path) -> Dict[str, str]:
        registry: Dict[str, str] = {}
        if not root_path.is_dir():
            return registry

        for dirpath, _, filenames in sorted(os.walk(root_path)):
            for filename in sorted(filenames):
                self._merge_file(Path(dirpath) / filename, registry)
        return registry
