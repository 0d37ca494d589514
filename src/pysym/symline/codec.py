"""
Encoding and decoding of symbol lines.

One line describes one occurrence::

    <file>:<line>:<col>: <exprPkg> <referPkg> <expr> [local]<kind>[+][ <type>]
"""

import re

from pysym.spec.errors import SymbolLineError
from pysym.spec.models import ObjKind, Position, PROTOCOL_KINDS, SymbolLine

LINE_PATTERN = re.compile(
    r"^([^:]+):([1-9]\d*):([1-9]\d*): "
    r"(\S+) (\S+) (\S+) (local)?([^\s+]+)(\+)?(?: (\S.*))?$"
)

_TOKEN_KINDS = {kind.token: kind for kind in PROTOCOL_KINDS}


def decode(text: str) -> SymbolLine:
    match = LINE_PATTERN.match(text)
    if match is None:
        raise SymbolLineError(f"invalid line {text!r}")

    (
        filename,
        line,
        column,
        expr_pkg,
        refer_pkg,
        expr,
        local,
        kind_token,
        plus,
        expr_type,
    ) = match.groups()

    kind = _TOKEN_KINDS.get(kind_token)
    if kind is None:
        raise SymbolLineError(f"invalid kind {kind_token!r}")

    return SymbolLine(
        position=Position(filename, int(line), int(column)),
        expr_package=expr_pkg,
        refer_package=refer_pkg,
        expr=expr,
        local=local == "local",
        kind=kind,
        plus=plus == "+",
        expr_type=expr_type,
    )


def encode(sym: SymbolLine) -> str:
    if sym.kind not in _TOKEN_KINDS.values():
        raise SymbolLineError(f"kind {sym.kind.name} cannot be encoded")
    pos = sym.position
    parts = [
        f"{pos.file}:{pos.line}:{pos.column}:",
        sym.expr_package,
        sym.refer_package,
        sym.expr,
        ("local" if sym.local else "") + sym.kind.token + ("+" if sym.plus else ""),
    ]
    if sym.expr_type is not None:
        parts.append(sym.expr_type)
    return " ".join(parts)


def is_kind_token(token: str) -> bool:
    return token in _TOKEN_KINDS


def kind_of(token: str) -> ObjKind:
    return _TOKEN_KINDS[token]
