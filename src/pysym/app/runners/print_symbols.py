from typing import Iterable

from pysym.common import bus
from pysym.needle import L
from pysym.spec.errors import StructuralError
from pysym.spec.models import Occurrence, Position, SymbolLine, display_path
from pysym.symline import encode, mask_admits

from ..context import SymbolContext


def render_expression(occ: Occurrence) -> str:
    if occ.base_type is None or occ.base_type.is_module:
        return occ.name
    return f"{occ.base_type.display_name}.{occ.name}"


def refer_package(ctx: SymbolContext, occ: Occurrence) -> str:
    if occ.universe:
        return occ.identity.fqn.split(".", 1)[0]
    if occ.decl_position is None:
        raise StructuralError(f"{occ.position}: {occ.name} has no declaration")
    return ctx.import_path_of(occ.decl_position)


def print_syms(
    ctx: SymbolContext,
    mask: int,
    pkgs: Iterable[str],
    show_all: bool = False,
    print_type: bool = False,
) -> None:
    """Prints one symbol line for every admitted occurrence in ``pkgs``."""

    def visit(occ: Occurrence) -> bool:
        if not mask_admits(mask, occ.kind):
            return True
        if occ.universe and not show_all:
            return True
        if occ.base_type is not None and occ.base_type.category == "unknown":
            bus.debug(L.classify.no_type, pos=str(occ.position))
            return True

        line = SymbolLine(
            position=Position(
                display_path(occ.position.file), occ.position.line, occ.position.column
            ),
            expr_package=ctx.import_path_of(occ.position),
            refer_package=refer_package(ctx, occ),
            expr=render_expression(occ),
            local=occ.local,
            kind=occ.kind,
            plus=occ.marks_declaration,
            expr_type=occ.type_info.text if print_type else None,
        )
        ctx.printf(encode(line))
        return True

    for ref in pkgs:
        pkg = ctx.importer(ref)
        if pkg is None:
            continue
        for unit in pkg.units:
            ctx.visit_exprs(visit, unit)
