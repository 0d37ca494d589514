import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib


@dataclass
class PysymConfig:
    search_paths: List[str] = field(default_factory=list)
    kinds: Optional[str] = None
    thread_safe: bool = True
    # Directory holding the pyproject.toml; search paths are relative to it.
    config_dir: Optional[Path] = None

    def resolved_search_paths(self) -> List[Path]:
        base = self.config_dir or Path.cwd()
        return [(base / p).resolve() for p in self.search_paths]


def _find_pyproject_toml(search_path: Path) -> Path:
    current_dir = search_path.resolve()
    while True:
        pyproject_path = current_dir / "pyproject.toml"
        if pyproject_path.is_file():
            return pyproject_path
        if current_dir.parent == current_dir:
            break
        current_dir = current_dir.parent
    raise FileNotFoundError("Could not find pyproject.toml in any parent directory.")


def load_config_from_path(search_path: Path) -> PysymConfig:
    try:
        config_path = _find_pyproject_toml(search_path)
    except FileNotFoundError:
        return PysymConfig()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    pysym_data: Dict[str, Any] = data.get("tool", {}).get("pysym", {})

    return PysymConfig(
        search_paths=list(pysym_data.get("search_paths", [])),
        kinds=pysym_data.get("kinds"),
        thread_safe=bool(pysym_data.get("thread_safe", True)),
        config_dir=config_path.parent,
    )
