from typing import Dict, Tuple, cast

import libcst as cst
from libcst.metadata import CodeRange, PositionProvider

from pysym.spec.errors import PrinterError

from .cache import CompilationUnit

# (line, column), both 1-based, of a Name token.
EditKey = Tuple[int, int]


class NameEditTransformer(cst.CSTTransformer):
    """Replaces the value of Name tokens found at the given positions."""

    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(self, edits: Dict[EditKey, str]):
        self.edits = edits
        self.applied = 0

    def leave_Name(
        self, original_node: cst.Name, updated_node: cst.Name
    ) -> cst.BaseExpression:
        pos = cast(CodeRange, self.get_metadata(PositionProvider, original_node))
        new_name = self.edits.get((pos.start.line, pos.start.column + 1))
        if new_name is None:
            return updated_node
        self.applied += 1
        return updated_node.with_changes(value=new_name)


class CstPrinter:
    """
    Renders a compilation unit with a batch of name edits applied.

    The result is parsed again before it is handed out; output that does not
    parse (e.g. a keyword used as a new name) is a PrinterError.
    """

    def render(self, unit: CompilationUnit, edits: Dict[EditKey, str]) -> str:
        transformer = NameEditTransformer(edits)
        try:
            new_module = unit.wrapper.visit(transformer)
        except cst.CSTValidationError as e:
            raise PrinterError(f"cannot apply edits to {unit.path}: {e}") from e
        if transformer.applied != len(edits):
            raise PrinterError(
                f"{unit.path}: {len(edits) - transformer.applied} edit(s) "
                "do not match any name"
            )

        code = new_module.code
        try:
            cst.parse_module(code)
        except cst.ParserSyntaxError as e:
            raise PrinterError(f"{unit.path} would not parse after renaming: {e}") from e
        return code
