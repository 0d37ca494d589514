import os
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Optional, Tuple


class ObjKind(IntEnum):
    """
    Declaration kinds. The values are bit positions in a kind mask.
    MODULE is internal: it can never be selected or encoded.
    """

    MODULE = 1
    CONST = 2
    TYPE = 3
    VAR = 4
    FUNC = 5

    @property
    def token(self) -> str:
        return _KIND_TOKENS[self]


_KIND_TOKENS = {
    ObjKind.MODULE: "module",
    ObjKind.CONST: "const",
    ObjKind.TYPE: "type",
    ObjKind.VAR: "var",
    ObjKind.FUNC: "func",
}

# Kinds that may appear on a protocol line, in declaration order.
PROTOCOL_KINDS = (ObjKind.CONST, ObjKind.TYPE, ObjKind.VAR, ObjKind.FUNC)

PositionKey = Tuple[str, int, int]


def display_path(path: str) -> str:
    """Renders a file path relative to the working directory when below it."""
    try:
        rel = Path(path).resolve().relative_to(Path.cwd().resolve())
    except ValueError:
        return path
    return rel.as_posix()


@dataclass(frozen=True)
class Position:
    """
    A source location. Lines and columns are 1-based.

    The byte offset is carried for information only; it never takes part in
    equality, since edits shift offsets.
    """

    file: str
    line: int
    column: int
    offset: int = field(default=0, compare=False)

    @property
    def key(self) -> PositionKey:
        if not self.file:
            return ("", self.line, self.column)
        return (os.path.realpath(self.file), self.line, self.column)

    def __str__(self) -> str:
        return f"{display_path(self.file)}:{self.line}:{self.column}"


@dataclass(frozen=True)
class DeclarationIdentity:
    """
    Identifies one declared entity by its fully qualified name.
    Only ``fqn`` takes part in equality and hashing.
    """

    fqn: str
    name: str = field(compare=False)
    kind: ObjKind = field(compare=False)
    universe: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        return self.fqn


@dataclass(frozen=True)
class TypeInfo:
    """
    Static type of an expression as far as the resolver can tell.

    ``category`` is one of "module", "class", "instance", "function" or
    "unknown". ``target`` is the FQN of the module or class it refers to.
    """

    category: str
    text: str
    target: Optional[str] = None

    @property
    def is_module(self) -> bool:
        return self.category == "module"

    @property
    def display_name(self) -> str:
        if self.target is None:
            return self.text
        return self.target.rsplit(".", 1)[-1]


UNKNOWN_TYPE = TypeInfo("unknown", "Any")


@dataclass
class Occurrence:
    """
    One classified identifier or attribute use inside a compilation unit.

    ``node`` is the ``libcst.Name`` whose value would change on rename; it is
    an opaque handle, edits are recorded by ``position`` and applied later.
    """

    position: Position
    name: str
    node: Any
    unit_path: str
    identity: DeclarationIdentity
    type_info: TypeInfo
    decl_position: Optional[Position] = None
    local: bool = False
    # Static type of the selector base, for attribute occurrences.
    base_type: Optional[TypeInfo] = None

    @property
    def kind(self) -> ObjKind:
        return self.identity.kind

    @property
    def universe(self) -> bool:
        return self.identity.universe

    @property
    def is_selector(self) -> bool:
        return self.base_type is not None

    @property
    def marks_declaration(self) -> bool:
        return self.decl_position is not None and self.decl_position == self.position


@dataclass(frozen=True)
class SymbolLine:
    position: Position
    expr_package: str
    refer_package: str
    expr: str
    local: bool
    kind: ObjKind
    plus: bool = False
    expr_type: Optional[str] = None

    @property
    def sym_name(self) -> str:
        return self.expr.rsplit(".", 1)[-1]
