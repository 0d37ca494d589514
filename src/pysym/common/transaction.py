import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Union

from pysym.common import bus
from pysym.needle import L


class FileSystemAdapter(Protocol):
    def write_text(self, path: Path, content: str) -> None: ...


class RealFileSystem:
    def write_text(self, path: Path, content: str) -> None:
        # Write next to the target and swap it in, so a failed write never
        # leaves a truncated source file behind.
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            if path.exists():
                os.chmod(tmp_name, path.stat().st_mode & 0o7777)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


@dataclass
class FileOp(ABC):
    path: Path

    @abstractmethod
    def execute(self, fs: FileSystemAdapter, root: Path) -> None: ...

    @abstractmethod
    def describe(self) -> str: ...


@dataclass
class WriteFileOp(FileOp):
    content: str

    def execute(self, fs: FileSystemAdapter, root: Path) -> None:
        fs.write_text(root / self.path, self.content)

    def describe(self) -> str:
        return f"[WRITE] {self.path}"


class TransactionManager:
    """
    Collects file operations and applies them in order on commit.

    A failing operation is reported and skipped; the remaining operations
    still run. ``commit`` returns the operations that succeeded.
    """

    def __init__(self, root_path: Path, fs: Optional[FileSystemAdapter] = None):
        self.root_path = root_path
        self.fs = fs or RealFileSystem()
        self._ops: List[FileOp] = []

    def add_write(self, path: Union[str, Path], content: str) -> None:
        self._ops.append(WriteFileOp(Path(path), content))

    def commit(self) -> List[FileOp]:
        done: List[FileOp] = []
        for op in self._ops:
            try:
                op.execute(self.fs, self.root_path)
            except OSError as e:
                bus.error(L.transaction.op_failed, op=op.describe(), error=str(e))
                continue
            done.append(op)
        self._ops.clear()
        return done
