import builtins
import re
import sys
from dataclasses import dataclass
from typing import Any, Collection, Dict, FrozenSet, Hashable, Iterator, List, Optional, Tuple, Union

import libcst as cst
from libcst.helpers import get_absolute_module_from_package_for_import
from libcst.metadata import (
    Access,
    Assignment,
    BaseAssignment,
    BuiltinAssignment,
    BuiltinScope,
    ClassScope,
    ComprehensionScope,
    ExpressionContext,
    FunctionScope,
    GlobalScope,
    ImportAssignment,
    Scope,
)

from pysym.spec.models import (
    DeclarationIdentity,
    ObjKind,
    Position,
    TypeInfo,
    UNKNOWN_TYPE,
)

from .cache import CompilationUnit, PackageCache

_CONST_NAME = re.compile(r"^_*[A-Z][A-Z0-9_]*$")
_TYPE_FACTORIES = {"TypeVar", "NewType", "ParamSpec", "TypeVarTuple", "NamedTuple"}

Seen = FrozenSet[Hashable]


@dataclass
class Entity:
    identity: DeclarationIdentity
    type_info: TypeInfo
    position: Optional[Position]
    local: bool = False


@dataclass
class _UnitIndex:
    accesses: Dict[int, Access]
    assignments: Dict[int, BaseAssignment]


def _normalize(text: str) -> str:
    return " ".join(text.split())


def _leftmost_name(node: cst.CSTNode) -> Optional[cst.Name]:
    while True:
        if isinstance(node, cst.Name):
            return node
        if isinstance(node, cst.Attribute):
            node = node.value
        elif isinstance(node, cst.Call):
            node = node.func
        else:
            return None


def _name_token(assignment: BaseAssignment) -> Optional[cst.Name]:
    """The Name node that spells the bound name at an assignment site."""
    if not isinstance(assignment, Assignment):
        return None
    node = assignment.node
    if isinstance(node, cst.Name):
        return node
    if isinstance(node, (cst.FunctionDef, cst.ClassDef, cst.Param)):
        return node.name
    if isinstance(assignment, ImportAssignment):
        as_name = assignment.as_name
        if isinstance(as_name, cst.Name) and as_name.value == assignment.name:
            return as_name
    return None


def _is_plain_import(assignment: BaseAssignment) -> bool:
    """True for `import a` and `from m import n`, which bind no new entity."""
    if not isinstance(assignment, ImportAssignment):
        return False
    node = assignment.node
    if isinstance(node, (cst.Import, cst.ImportFrom)) and not isinstance(
        node.names, cst.ImportStar
    ):
        for alias in node.names:
            if alias.asname is not None and (
                cst.ensure_type(alias.asname.name, cst.Name).value == assignment.name
            ):
                return False
    return True


def _is_local_scope(scope: Scope) -> bool:
    while not isinstance(scope, (GlobalScope, BuiltinScope)):
        if isinstance(scope, (FunctionScope, ComprehensionScope)):
            return True
        scope = scope.parent
    return False


def _decorator_names(node: cst.FunctionDef) -> List[str]:
    names = []
    for decorator in node.decorators:
        target = decorator.decorator
        if isinstance(target, cst.Call):
            target = target.func
        if isinstance(target, cst.Name):
            names.append(target.value)
        elif isinstance(target, cst.Attribute):
            names.append(target.attr.value)
    return names


def _first_param(params: cst.Parameters) -> Optional[cst.Param]:
    if params.posonly_params:
        return params.posonly_params[0]
    if params.params:
        return params.params[0]
    return None


def _iter_nodes(node: cst.CSTNode) -> Iterator[cst.CSTNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _builtin_describe(name: str, fqn: str, obj: Any) -> Tuple[ObjKind, TypeInfo]:
    if isinstance(obj, type):
        return ObjKind.TYPE, TypeInfo("class", f"type[{name}]", fqn)
    if callable(obj):
        return ObjKind.FUNC, TypeInfo("function", type(obj).__name__)
    type_name = type(obj).__name__
    return ObjKind.CONST, TypeInfo("instance", type_name, f"builtins.{type_name}")


class ScopeResolver:
    """
    Resolves names and attribute selectors to declarations using libcst's
    scope analysis.

    Names are resolved inside their unit; imports are followed into other
    units obtained from the package cache. Attributes are resolved from the
    static type of their base: a module, a class or an instance of a class.
    Every entity is identified by its fully qualified name.
    """

    def __init__(self, cache: PackageCache):
        self.cache = cache
        self._entities: Dict[str, Entity] = {}
        self._indexes: Dict[str, _UnitIndex] = {}
        self._classes: Dict[str, Tuple[CompilationUnit, cst.ClassDef]] = {}
        self._functions: Dict[str, Tuple[CompilationUnit, cst.FunctionDef]] = {}
        self._instance_attrs: Dict[str, Dict[str, List[cst.Attribute]]] = {}

    # --- Public contract ---

    def resolve(
        self, unit: CompilationUnit, node: cst.CSTNode
    ) -> Optional[Tuple[DeclarationIdentity, TypeInfo]]:
        entity = self._resolve_expr(unit, node, frozenset())
        if entity is None:
            return None
        return entity.identity, entity.type_info

    def declaration_position(
        self, identity: DeclarationIdentity
    ) -> Optional[Position]:
        entity = self._entities.get(identity.fqn)
        return entity.position if entity else None

    def is_local(self, identity: DeclarationIdentity) -> bool:
        entity = self._entities.get(identity.fqn)
        return entity.local if entity else False

    def expression_type(self, unit: CompilationUnit, node: cst.CSTNode) -> TypeInfo:
        return self._expr_type(unit, node, frozenset())

    def position_of(self, unit: CompilationUnit, node: cst.CSTNode) -> Position:
        start = unit.positions[node].start
        offset = unit.byte_spans[node].start
        return Position(unit.path, start.line, start.column + 1, offset)

    # --- Name resolution ---

    def _resolve_expr(
        self, unit: CompilationUnit, node: cst.CSTNode, seen: Seen
    ) -> Optional[Entity]:
        if isinstance(node, cst.Name):
            return self._resolve_name(unit, node, seen)
        if isinstance(node, cst.Attribute):
            base = self._expr_type(unit, node.value, seen)
            return self._lookup_attr(base, node.attr.value, seen)
        return None

    def _resolve_name(
        self, unit: CompilationUnit, node: cst.Name, seen: Seen
    ) -> Optional[Entity]:
        parent = unit.parents.get(node)

        # The imported name in `from m import n as k` denotes m.n.
        if isinstance(parent, cst.ImportAlias) and parent.asname is not None:
            statement = unit.parents.get(parent)
            if parent.name is node and isinstance(statement, cst.ImportFrom):
                module = self._import_from_module(unit, statement)
                return self._member(module, node.value, seen) if module else None

        index = self._index(unit)
        assignment = index.assignments.get(id(node))
        if assignment is not None:
            return self._entity_for_assignment(unit, assignment, node.value, seen)

        access = index.accesses.get(id(node))
        if access is not None:
            return self._entity_for_referents(unit, access.referents, node.value, seen)

        # Names in `global` and `nonlocal` statements are neither accesses
        # nor assignments.
        if isinstance(parent, cst.NameItem):
            scope = self._scope_of(unit, node)
            if scope is not None:
                return self._entity_for_referents(
                    unit, scope[node.value], node.value, seen
                )
        return None

    def _scope_of(self, unit: CompilationUnit, node: cst.CSTNode) -> Optional[Scope]:
        current: Optional[cst.CSTNode] = node
        while current is not None:
            scope = unit.scopes.get(current)
            if scope is not None:
                return scope
            current = unit.parents.get(current)
        return None

    def _index(self, unit: CompilationUnit) -> _UnitIndex:
        index = self._indexes.get(unit.path)
        if index is not None:
            return index

        accesses: Dict[int, Access] = {}
        assignments: Dict[int, BaseAssignment] = {}
        scopes = {scope for scope in unit.scopes.values() if scope is not None}
        for scope in scopes:
            for access in scope.accesses:
                name = _leftmost_name(access.node)
                if name is not None:
                    accesses[id(name)] = access
            for assignment in scope.assignments:
                token = _name_token(assignment)
                if token is not None:
                    assignments[id(token)] = assignment

        index = _UnitIndex(accesses, assignments)
        self._indexes[unit.path] = index
        return index

    @staticmethod
    def _choose(assignments: Collection[BaseAssignment]) -> Optional[BaseAssignment]:
        """Picks the binding in effect: the latest user binding, else a builtin."""
        user = [a for a in assignments if isinstance(a, Assignment)]
        if user:
            return max(user, key=lambda a: a._index)
        return next(iter(assignments), None)

    def _entity_for_referents(
        self,
        unit: CompilationUnit,
        referents: Collection[BaseAssignment],
        name: str,
        seen: Seen,
    ) -> Optional[Entity]:
        chosen = self._choose(referents)
        if chosen is None:
            return None
        return self._entity_for_assignment(unit, chosen, name, seen)

    def _entity_for_assignment(
        self,
        unit: CompilationUnit,
        assignment: BaseAssignment,
        name: str,
        seen: Seen,
    ) -> Optional[Entity]:
        if isinstance(assignment, BuiltinAssignment):
            return self._builtin_entity(assignment.name)
        if isinstance(assignment, ImportAssignment):
            return self._import_entity(unit, assignment, name, seen)
        return self._declared_entity(unit, assignment.scope, assignment.name, seen)

    # --- Declarations ---

    def _qualify(self, unit: CompilationUnit, scope: Scope, name: str) -> str:
        parts: List[str] = [name]
        while isinstance(scope, (FunctionScope, ClassScope, ComprehensionScope)):
            node = scope.node
            if isinstance(scope, ComprehensionScope):
                parts.append(f"<comprehension@{self._at(unit, node)}>")
            elif isinstance(node, cst.Lambda):
                parts.append("<locals>")
                parts.append(f"<lambda@{self._at(unit, node)}>")
            else:
                if isinstance(scope, FunctionScope):
                    parts.append("<locals>")
                parts.append(self._def_label(unit, scope, node))
            scope = scope.parent
        parts.append(unit.module_name)
        return ".".join(reversed(parts))

    def _at(self, unit: CompilationUnit, node: cst.CSTNode) -> str:
        start = unit.positions[node].start
        return f"{start.line}:{start.column + 1}"

    def _def_label(
        self, unit: CompilationUnit, scope: Scope, node: Union[cst.FunctionDef, cst.ClassDef]
    ) -> str:
        # A name bound by several defs in one scope (property accessors,
        # branch-dependent definitions) keeps its locals apart by position.
        name_node = node.name
        label = name_node.value
        defs = [
            a
            for a in scope.parent.assignments[label]
            if isinstance(a, Assignment)
            and isinstance(a.node, (cst.FunctionDef, cst.ClassDef))
        ]
        if len(defs) > 1:
            return f"{label}@{self._at(unit, name_node)}"
        return label

    def _token_key(self, unit: CompilationUnit, assignment: Assignment) -> Tuple[int, int]:
        token = _name_token(assignment) or assignment.node
        start = unit.positions[token].start
        return start.line, start.column

    def _declared_entity(
        self, unit: CompilationUnit, scope: Scope, name: str, seen: Seen
    ) -> Optional[Entity]:
        fqn = self._qualify(unit, scope, name)
        cached = self._entities.get(fqn)
        if cached is not None:
            return cached

        own = [
            a
            for a in scope.assignments[name]
            if isinstance(a, Assignment) and not _is_plain_import(a)
        ]
        if not own:
            return None
        first = min(own, key=lambda a: self._token_key(unit, a))
        token = _name_token(first) or first.node
        position = self.position_of(unit, token)
        kind = self._kind_of(unit, first, scope)
        identity = DeclarationIdentity(fqn, name, kind)
        local = _is_local_scope(scope)

        if fqn in seen and not isinstance(first.node, (cst.ClassDef, cst.FunctionDef)):
            return Entity(identity, UNKNOWN_TYPE, position, local)

        type_info = self._binding_type(unit, first, scope, fqn, seen | {fqn})
        entity = Entity(identity, type_info, position, local)
        self._entities[fqn] = entity
        return entity

    def _kind_of(
        self, unit: CompilationUnit, assignment: Assignment, scope: Scope
    ) -> ObjKind:
        node = assignment.node
        if isinstance(node, cst.FunctionDef):
            return ObjKind.FUNC
        if isinstance(node, cst.ClassDef):
            return ObjKind.TYPE
        if isinstance(node, cst.Param):
            return ObjKind.VAR
        if isinstance(node, cst.Name):
            statement = unit.parents.get(node)
            if isinstance(statement, cst.AssignTarget):
                statement = unit.parents.get(statement)
            if isinstance(statement, cst.AnnAssign):
                annotation = _normalize(
                    unit.module.code_for_node(statement.annotation.annotation)
                )
                if annotation.rsplit(".", 1)[-1] == "TypeAlias":
                    return ObjKind.TYPE
                if annotation.split("[", 1)[0].rsplit(".", 1)[-1] == "Final":
                    return ObjKind.CONST
            if isinstance(statement, cst.Assign) and isinstance(statement.value, cst.Call):
                func = statement.value.func
                factory = func.attr if isinstance(func, cst.Attribute) else func
                if isinstance(factory, cst.Name) and factory.value in _TYPE_FACTORIES:
                    return ObjKind.TYPE
            if isinstance(scope, (GlobalScope, ClassScope)) and _CONST_NAME.match(
                node.value
            ):
                return ObjKind.CONST
        return ObjKind.VAR

    def _binding_type(
        self,
        unit: CompilationUnit,
        assignment: Assignment,
        scope: Scope,
        fqn: str,
        seen: Seen,
    ) -> TypeInfo:
        node = assignment.node
        if isinstance(node, cst.ClassDef):
            self._classes[fqn] = (unit, node)
            return TypeInfo("class", f"type[{node.name.value}]", fqn)
        if isinstance(node, cst.FunctionDef):
            self._functions[fqn] = (unit, node)
            return TypeInfo("function", self._signature(unit, node), fqn)
        if isinstance(node, cst.Param):
            return self._param_type(unit, node, scope, seen)
        if isinstance(node, cst.Name):
            parent = unit.parents.get(node)
            if isinstance(parent, cst.AssignTarget):
                statement = unit.parents.get(parent)
                if isinstance(statement, cst.Assign):
                    return self._expr_type(unit, statement.value, seen)
            if isinstance(parent, cst.AnnAssign):
                annotated = self._annotation_type(unit, parent.annotation.annotation, seen)
                if annotated.category == "unknown" and parent.value is not None:
                    inferred = self._expr_type(unit, parent.value, seen)
                    if inferred.category != "unknown":
                        return inferred
                return annotated
            if isinstance(parent, cst.NamedExpr):
                return self._expr_type(unit, parent.value, seen)
        return UNKNOWN_TYPE

    def _signature(self, unit: CompilationUnit, node: cst.FunctionDef) -> str:
        code = unit.module.code_for_node
        text = f"def {node.name.value}({code(node.params)})"
        if node.asynchronous is not None:
            text = "async " + text
        if node.returns is not None:
            text += f" -> {code(node.returns.annotation)}"
        return _normalize(text)

    def _param_type(
        self, unit: CompilationUnit, param: cst.Param, scope: Scope, seen: Seen
    ) -> TypeInfo:
        if param.annotation is not None:
            return self._annotation_type(unit, param.annotation.annotation, seen)

        # The first parameter of a method is its instance or class.
        function = scope.node if isinstance(scope, FunctionScope) else None
        class_scope = scope.parent
        if not isinstance(function, cst.FunctionDef) or not isinstance(
            class_scope, ClassScope
        ):
            return UNKNOWN_TYPE
        if _first_param(function.params) is not param:
            return UNKNOWN_TYPE
        decorators = _decorator_names(function)
        if "staticmethod" in decorators:
            return UNKNOWN_TYPE

        classdef = cst.ensure_type(class_scope.node, cst.ClassDef)
        owner = self._declared_entity(
            unit, class_scope.parent, classdef.name.value, seen
        )
        if owner is None or owner.type_info.target is None:
            return UNKNOWN_TYPE
        if "classmethod" in decorators or function.name.value == "__new__":
            return owner.type_info
        return TypeInfo("instance", classdef.name.value, owner.type_info.target)

    # --- Imports and modules ---

    def _import_from_module(
        self, unit: CompilationUnit, statement: cst.ImportFrom
    ) -> Optional[str]:
        return get_absolute_module_from_package_for_import(unit.package_name, statement)

    def _import_entity(
        self,
        unit: CompilationUnit,
        assignment: ImportAssignment,
        name: str,
        seen: Seen,
    ) -> Optional[Entity]:
        statement = assignment.node
        if isinstance(statement.names, cst.ImportStar):
            return None

        for alias in statement.names:
            asname = (
                cst.ensure_type(alias.asname.name, cst.Name)
                if alias.asname is not None
                else None
            )
            if asname is not None and asname.value == assignment.name:
                if isinstance(statement, cst.Import):
                    target = self._module_entity(alias.evaluated_name)
                else:
                    module = self._import_from_module(unit, statement)
                    target = (
                        self._member(module, alias.evaluated_name, seen)
                        if module
                        else None
                    )
                return self._alias_entity(unit, assignment, asname, target)

            if asname is not None:
                continue
            if isinstance(statement, cst.Import):
                # `import a.b` binds `a` (and, for libcst, `a.b`).
                dotted = alias.evaluated_name
                if dotted == assignment.name or dotted.startswith(assignment.name + "."):
                    return self._module_entity(assignment.name.split(".", 1)[0])
                continue
            if alias.evaluated_name == assignment.name:
                module = self._import_from_module(unit, statement)
                if module is None:
                    return None
                return self._member(module, alias.evaluated_name, seen)
        return None

    def _alias_entity(
        self,
        unit: CompilationUnit,
        assignment: ImportAssignment,
        token: cst.Name,
        target: Optional[Entity],
    ) -> Entity:
        fqn = self._qualify(unit, assignment.scope, token.value)
        cached = self._entities.get(fqn)
        if cached is not None:
            return cached
        kind = target.identity.kind if target else ObjKind.VAR
        type_info = target.type_info if target else UNKNOWN_TYPE
        entity = Entity(
            DeclarationIdentity(fqn, token.value, kind),
            type_info,
            self.position_of(unit, token),
            _is_local_scope(assignment.scope),
        )
        self._entities[fqn] = entity
        return entity

    def _module_entity(self, module_name: str) -> Optional[Entity]:
        cached = self._entities.get(module_name)
        if cached is not None:
            return cached

        short_name = module_name.rsplit(".", 1)[-1]
        type_info = TypeInfo("module", module_name, module_name)
        unit = self.cache.unit_for_module(module_name)
        if unit is not None:
            position: Optional[Position] = Position(unit.path, 1, 1)
            universe = False
        elif module_name in sys.builtin_module_names:
            position = None
            universe = True
        else:
            directory = self.cache.locator.directory_of(module_name)
            if directory is None:
                return None
            # Namespace package: a directory without __init__.py.
            position = Position(str(directory), 1, 1)
            universe = False

        entity = Entity(
            DeclarationIdentity(module_name, short_name, ObjKind.MODULE, universe),
            type_info,
            position,
        )
        self._entities[module_name] = entity
        return entity

    def _member(self, module_name: str, member: str, seen: Seen) -> Optional[Entity]:
        key = ("member", module_name, member)
        if key in seen:
            return None
        seen = seen | {key}

        unit = self.cache.unit_for_module(module_name)
        if unit is not None:
            global_scope = unit.scopes.get(unit.module)
            if global_scope is not None:
                chosen = self._choose(global_scope.assignments[member])
                if chosen is not None:
                    return self._entity_for_assignment(unit, chosen, member, seen)
            if not unit.is_package_init:
                return None
        elif module_name in sys.builtin_module_names:
            return self._compiled_member(module_name, member)

        return self._module_entity(f"{module_name}.{member}")

    def _builtin_entity(self, name: str) -> Optional[Entity]:
        return self._compiled_member("builtins", name)

    def _compiled_member(self, module_name: str, member: str) -> Optional[Entity]:
        fqn = f"{module_name}.{member}"
        cached = self._entities.get(fqn)
        if cached is not None:
            return cached
        # Only modules that are already loaded are inspected.
        module = sys.modules.get(module_name)
        if module is None or not hasattr(module, member):
            return None
        kind, type_info = _builtin_describe(member, fqn, getattr(module, member))
        entity = Entity(DeclarationIdentity(fqn, member, kind, True), type_info, None)
        self._entities[fqn] = entity
        return entity

    # --- Attributes ---

    def _lookup_attr(self, base: TypeInfo, attr: str, seen: Seen) -> Optional[Entity]:
        if base.target is None:
            return None
        if base.is_module:
            return self._member(base.target, attr, seen)
        if base.category in ("class", "instance"):
            return self._class_member(
                base.target, attr, base.category == "instance", seen, frozenset()
            )
        return None

    def _class_member(
        self,
        class_fqn: str,
        attr: str,
        instance: bool,
        seen: Seen,
        visited: FrozenSet[str],
    ) -> Optional[Entity]:
        if class_fqn.startswith("builtins."):
            return self._builtin_class_member(class_fqn, attr)

        found = self._classes.get(class_fqn)
        if found is None:
            return None
        unit, classdef = found

        class_scope = self._class_scope(unit, classdef)
        if class_scope is not None:
            chosen = self._choose(class_scope.assignments[attr])
            if chosen is not None:
                return self._entity_for_assignment(unit, chosen, attr, seen)

        if instance:
            entity = self._instance_attribute(unit, classdef, class_fqn, attr, seen)
            if entity is not None:
                return entity

        visited = visited | {class_fqn}
        for base in classdef.bases:
            base_type = self._expr_type(unit, base.value, seen)
            if base_type.category != "class" or base_type.target is None:
                continue
            if base_type.target in visited:
                continue
            entity = self._class_member(base_type.target, attr, instance, seen, visited)
            if entity is not None:
                return entity
        return None

    def _builtin_class_member(self, class_fqn: str, attr: str) -> Optional[Entity]:
        fqn = f"{class_fqn}.{attr}"
        cached = self._entities.get(fqn)
        if cached is not None:
            return cached
        cls = getattr(builtins, class_fqn.split(".", 1)[1], None)
        if cls is None or not hasattr(cls, attr):
            return None
        kind, type_info = _builtin_describe(attr, fqn, getattr(cls, attr))
        entity = Entity(DeclarationIdentity(fqn, attr, kind, True), type_info, None)
        self._entities[fqn] = entity
        return entity

    def _class_scope(
        self, unit: CompilationUnit, classdef: cst.ClassDef
    ) -> Optional[ClassScope]:
        for statement in classdef.body.body:
            scope = unit.scopes.get(statement)
            if isinstance(scope, ClassScope) and scope.node is classdef:
                return scope
        return None

    def _instance_attribute(
        self,
        unit: CompilationUnit,
        classdef: cst.ClassDef,
        class_fqn: str,
        attr: str,
        seen: Seen,
    ) -> Optional[Entity]:
        fqn = f"{class_fqn}.{attr}"
        cached = self._entities.get(fqn)
        if cached is not None:
            return cached

        stores = self._instance_stores(unit, classdef, class_fqn).get(attr)
        if not stores:
            return None
        first = min(stores, key=lambda n: (unit.positions[n].start.line, unit.positions[n].start.column))
        position = self.position_of(unit, first.attr)
        identity = DeclarationIdentity(fqn, attr, ObjKind.VAR)
        if fqn in seen:
            return Entity(identity, UNKNOWN_TYPE, position)

        type_info = UNKNOWN_TYPE
        parent = unit.parents.get(first)
        if isinstance(parent, cst.AssignTarget):
            statement = unit.parents.get(parent)
            if isinstance(statement, cst.Assign):
                type_info = self._expr_type(unit, statement.value, seen | {fqn})
        elif isinstance(parent, cst.AnnAssign):
            type_info = self._annotation_type(
                unit, parent.annotation.annotation, seen | {fqn}
            )

        entity = Entity(identity, type_info, position)
        self._entities[fqn] = entity
        return entity

    def _instance_stores(
        self, unit: CompilationUnit, classdef: cst.ClassDef, class_fqn: str
    ) -> Dict[str, List[cst.Attribute]]:
        stores = self._instance_attrs.get(class_fqn)
        if stores is not None:
            return stores

        stores = {}
        contexts = unit.expression_contexts
        for statement in classdef.body.body:
            if not isinstance(statement, cst.FunctionDef):
                continue
            if "staticmethod" in _decorator_names(statement):
                continue
            receiver = _first_param(statement.params)
            if receiver is None:
                continue
            for node in _iter_nodes(statement.body):
                if (
                    isinstance(node, cst.Attribute)
                    and isinstance(node.value, cst.Name)
                    and node.value.value == receiver.name.value
                    and contexts.get(node) == ExpressionContext.STORE
                ):
                    stores.setdefault(node.attr.value, []).append(node)

        self._instance_attrs[class_fqn] = stores
        return stores

    # --- Static types ---

    def _annotation_type(
        self, unit: CompilationUnit, annotation: cst.BaseExpression, seen: Seen
    ) -> TypeInfo:
        text = _normalize(unit.module.code_for_node(annotation))
        if isinstance(annotation, (cst.Name, cst.Attribute)):
            entity = self._resolve_expr(unit, annotation, seen)
            if entity is not None and entity.type_info.category == "class":
                return TypeInfo("instance", text, entity.type_info.target)
        return TypeInfo("unknown", text)

    def _expr_type(
        self, unit: CompilationUnit, expr: cst.BaseExpression, seen: Seen
    ) -> TypeInfo:
        if isinstance(expr, (cst.Name, cst.Attribute)):
            entity = self._resolve_expr(unit, expr, seen)
            return entity.type_info if entity is not None else UNKNOWN_TYPE

        if isinstance(expr, cst.Call):
            callee = self._expr_type(unit, expr.func, seen)
            if callee.category == "class" and callee.target is not None:
                return TypeInfo("instance", callee.display_name, callee.target)
            if callee.category == "function" and callee.target in self._functions:
                func_unit, func = self._functions[callee.target]
                if func.returns is not None:
                    return self._annotation_type(
                        func_unit, func.returns.annotation, seen
                    )
            return UNKNOWN_TYPE

        literal = self._literal_type(expr)
        if literal is not None:
            return TypeInfo("instance", literal, f"builtins.{literal}")
        if isinstance(expr, cst.Lambda):
            return TypeInfo("function", "lambda")
        return UNKNOWN_TYPE

    @staticmethod
    def _literal_type(expr: cst.BaseExpression) -> Optional[str]:
        if isinstance(expr, cst.Integer):
            return "int"
        if isinstance(expr, cst.Float):
            return "float"
        if isinstance(expr, cst.Imaginary):
            return "complex"
        if isinstance(expr, cst.SimpleString):
            return "bytes" if "b" in expr.prefix.lower() else "str"
        if isinstance(expr, (cst.ConcatenatedString, cst.FormattedString)):
            return "str"
        if isinstance(expr, (cst.List, cst.ListComp)):
            return "list"
        if isinstance(expr, (cst.Dict, cst.DictComp)):
            return "dict"
        if isinstance(expr, (cst.Set, cst.SetComp)):
            return "set"
        if isinstance(expr, cst.Tuple):
            return "tuple"
        return None
