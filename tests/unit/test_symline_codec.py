import pytest

from pysym.spec.errors import SymbolLineError
from pysym.spec.models import ObjKind, Position, SymbolLine
from pysym.symline import LINE_PATTERN, decode, encode


def test_decode_full_line():
    sym = decode("pkg/mod.py:12:5: pkg.sub other.pkg Point.x localvar+ int")

    assert sym.position == Position("pkg/mod.py", 12, 5)
    assert sym.expr_package == "pkg.sub"
    assert sym.refer_package == "other.pkg"
    assert sym.expr == "Point.x"
    assert sym.local is True
    assert sym.kind is ObjKind.VAR
    assert sym.plus is True
    assert sym.expr_type == "int"
    assert sym.sym_name == "x"


def test_decode_minimal_line():
    sym = decode("mod.py:1:1: . . helper func")

    assert sym.local is False
    assert sym.plus is False
    assert sym.expr_type is None
    assert sym.kind is ObjKind.FUNC
    assert sym.sym_name == "helper"


def test_type_text_may_contain_spaces():
    sym = decode("mod.py:3:5: . . f func+ def f(a, b) -> int")
    assert sym.expr_type == "def f(a, b) -> int"


@pytest.mark.parametrize(
    "line",
    [
        "mod.py:1:1: . . x var",
        "mod.py:10:17: pkg builtins print func",
        "src/a.py:2:3: a a C.attr localconst+",
        "mod.py:4:1: . . T type+ type[T]",
    ],
)
def test_encode_reproduces_decoded_line(line):
    assert encode(decode(line)) == line


@pytest.mark.parametrize(
    "line",
    [
        "",
        "mod.py:1:1 . . x var",
        "mod.py:0:1: . . x var",
        "mod.py:01:1: . . x var",
        "mod.py:1:1: . . x",
        "mod.py:1:1: . . x  var",
        "mod.py:1:1: . . x module",
        "mod.py:1:1: . . x bogus+",
    ],
)
def test_decode_rejects_malformed_lines(line):
    with pytest.raises(SymbolLineError):
        decode(line)


def test_encode_refuses_module_kind():
    sym = SymbolLine(
        position=Position("mod.py", 1, 1),
        expr_package=".",
        refer_package=".",
        expr="os",
        local=False,
        kind=ObjKind.MODULE,
    )
    with pytest.raises(SymbolLineError):
        encode(sym)


def test_line_pattern_captures_file_name():
    match = LINE_PATTERN.match("a b/c.py:7:2: . . x var")
    assert match is not None
    assert match.group(1) == "a b/c.py"
