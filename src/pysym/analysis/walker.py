from enum import Enum
from typing import Callable

import libcst as cst


class WalkResult(Enum):
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"
    ABORT_UNIT = "abort_unit"


Visit = Callable[[cst.CSTNode], WalkResult]


def walk(node: cst.CSTNode, visit: Visit) -> bool:
    """
    Walks ``node`` depth first in source order.

    Returns False as soon as ``visit`` asks to abort, True otherwise.
    """
    result = visit(node)
    if result is WalkResult.ABORT_UNIT:
        return False
    if result is WalkResult.SKIP_SUBTREE:
        return True
    for child in node.children:
        if not walk(child, visit):
            return False
    return True
