import libcst as cst

from pysym.analysis import WalkResult, walk


def _names(source: str, stop_at=None, skip=None):
    seen = []

    def visit(node):
        if isinstance(node, cst.Name):
            seen.append(node.value)
            if node.value == stop_at:
                return WalkResult.ABORT_UNIT
        if skip is not None and isinstance(node, skip):
            return WalkResult.SKIP_SUBTREE
        return WalkResult.CONTINUE

    completed = walk(cst.parse_module(source), visit)
    return seen, completed


def test_walk_visits_names_in_source_order():
    seen, completed = _names("a = b\nc(d)\n")
    assert seen == ["a", "b", "c", "d"]
    assert completed is True


def test_skip_subtree_prunes_children():
    seen, _ = _names("def f(x):\n    return y\nz\n", skip=cst.FunctionDef)
    assert seen == ["z"]


def test_abort_stops_the_walk():
    seen, completed = _names("a\nb\nc\n", stop_at="b")
    assert seen == ["a", "b"]
    assert completed is False
