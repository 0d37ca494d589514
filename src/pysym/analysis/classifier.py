from typing import Callable, Optional

import libcst as cst

from pysym.common import bus
from pysym.lang.python.cache import CompilationUnit
from pysym.needle import L
from pysym.spec.models import DeclarationIdentity, ObjKind, Occurrence
from pysym.spec.protocols import Resolver

from .walker import WalkResult, walk

# Returns False to abort the rest of the unit.
OccurrenceVisitor = Callable[[Occurrence], bool]


class OccurrenceClassifier:
    """
    Walks a compilation unit and classifies every name and attribute
    selector against the declaration it refers to.

    - ``from m import *`` aborts the unit.
    - Only the names an import binds are visited, never module paths.
    - For dictionary entries and keyword arguments only the value is visited.
    - For ``base.attr`` the base is visited first, then ``attr``.
    """

    def __init__(self, resolver: Resolver):
        self.resolver = resolver

    def visit_exprs(self, visitor: OccurrenceVisitor, unit: CompilationUnit) -> bool:
        ok = True

        def emit(node: cst.CSTNode) -> WalkResult:
            nonlocal ok
            if not self._classify(visitor, unit, node):
                ok = False
                return WalkResult.ABORT_UNIT
            return WalkResult.SKIP_SUBTREE

        def visit(node: cst.CSTNode) -> WalkResult:
            nonlocal ok
            if isinstance(node, cst.ImportFrom):
                if isinstance(node.names, cst.ImportStar):
                    bus.error(
                        L.classify.star_import,
                        pos=str(self.resolver.position_of(unit, node)),
                    )
                    ok = False
                    return WalkResult.ABORT_UNIT
                for alias in node.names:
                    if isinstance(alias.name, cst.Name):
                        if emit(alias.name) is WalkResult.ABORT_UNIT:
                            return WalkResult.ABORT_UNIT
                    if alias.asname is not None:
                        if emit(alias.asname.name) is WalkResult.ABORT_UNIT:
                            return WalkResult.ABORT_UNIT
                return WalkResult.SKIP_SUBTREE

            if isinstance(node, cst.Import):
                for alias in node.names:
                    if alias.asname is not None:
                        if emit(alias.asname.name) is WalkResult.ABORT_UNIT:
                            return WalkResult.ABORT_UNIT
                return WalkResult.SKIP_SUBTREE

            if isinstance(node, cst.Name):
                return emit(node)

            if isinstance(node, cst.Attribute):
                if not walk(node.value, visit):
                    return WalkResult.ABORT_UNIT
                return emit(node)

            if isinstance(node, cst.DictElement):
                # The key may be a plain value rather than a reference.
                if not walk(node.value, visit):
                    return WalkResult.ABORT_UNIT
                return WalkResult.SKIP_SUBTREE

            if isinstance(node, cst.Arg) and node.keyword is not None:
                if not walk(node.value, visit):
                    return WalkResult.ABORT_UNIT
                return WalkResult.SKIP_SUBTREE

            return WalkResult.CONTINUE

        walk(unit.module, visit)
        return ok

    def _classify(
        self, visitor: OccurrenceVisitor, unit: CompilationUnit, expr: cst.CSTNode
    ) -> bool:
        name_node = expr.attr if isinstance(expr, cst.Attribute) else expr
        position = self.resolver.position_of(unit, name_node)
        code = unit.module.code_for_node(expr)

        resolved = self.resolver.resolve(unit, expr)
        if resolved is None:
            identity = self._synthetic_init(unit, name_node)
            if identity is None:
                bus.debug(L.classify.no_object, pos=str(position), expr=code)
                return True
            return visitor(
                Occurrence(
                    position=position,
                    name=name_node.value,
                    node=name_node,
                    unit_path=unit.path,
                    identity=identity,
                    type_info=self.resolver.expression_type(unit, expr),
                    decl_position=position,
                )
            )

        identity, type_info = resolved
        decl_position = None
        if not identity.universe:
            decl_position = self.resolver.declaration_position(identity)
            if decl_position is None:
                bus.warning(L.classify.no_declaration, pos=str(position), expr=code)
                return True

        base_type = None
        if isinstance(expr, cst.Attribute):
            base_type = self.resolver.expression_type(unit, expr.value)

        return visitor(
            Occurrence(
                position=position,
                name=name_node.value,
                node=name_node,
                unit_path=unit.path,
                identity=identity,
                type_info=type_info,
                decl_position=decl_position,
                local=self.resolver.is_local(identity),
                base_type=base_type,
            )
        )

    def _synthetic_init(
        self, unit: CompilationUnit, name_node: cst.Name
    ) -> Optional[DeclarationIdentity]:
        """
        A module level ``def init`` the resolver cannot bind still gets an
        identity of its own, so it can be renamed.
        """
        parent = unit.parents.get(name_node)
        if not isinstance(parent, cst.FunctionDef) or parent.name is not name_node:
            return None
        if name_node.value != "init" or unit.parents.get(parent) is not unit.module:
            return None
        pos = self.resolver.position_of(unit, name_node)
        fqn = f"{unit.module_name}.init@{pos.line}:{pos.column}"
        return DeclarationIdentity(fqn, "init", ObjKind.FUNC)
