import stat
from pathlib import Path

from pysym.common.transaction import (
    FileSystemAdapter,
    RealFileSystem,
    TransactionManager,
    WriteFileOp,
)
from pysym.needle import L
from pysym.test_utils import SpyBus


def test_commit_writes_in_order(tmp_path, mocker):
    fs = mocker.create_autospec(FileSystemAdapter, instance=True)
    tm = TransactionManager(tmp_path, fs)
    tm.add_write("a.py", "A")
    tm.add_write(Path("pkg/b.py"), "B")

    done = tm.commit()

    assert [op.path for op in done] == [Path("a.py"), Path("pkg/b.py")]
    fs.write_text.assert_has_calls(
        [
            mocker.call(tmp_path / "a.py", "A"),
            mocker.call(tmp_path / "pkg/b.py", "B"),
        ]
    )
    assert tm.commit() == []


def test_failed_write_is_reported_and_others_continue(tmp_path, mocker, monkeypatch):
    fs = mocker.create_autospec(FileSystemAdapter, instance=True)
    fs.write_text.side_effect = [PermissionError("denied"), None]
    tm = TransactionManager(tmp_path, fs)
    tm.add_write("a.py", "A")
    tm.add_write("b.py", "B")

    spy = SpyBus()
    with spy.patch(monkeypatch):
        done = tm.commit()

    assert done == [WriteFileOp(Path("b.py"), "B")]
    spy.assert_id_called(L.transaction.op_failed, level="error")


def test_real_file_system_replaces_atomically(tmp_path):
    target = tmp_path / "mod.py"
    target.write_text("old\n")
    target.chmod(0o750)

    RealFileSystem().write_text(target, "new\n")

    assert target.read_text() == "new\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o750
    assert [p.name for p in tmp_path.iterdir()] == ["mod.py"]


def test_absolute_paths_ignore_the_root(tmp_path):
    target = tmp_path / "sub" / "x.py"
    target.parent.mkdir()
    tm = TransactionManager(Path("/unused"))
    tm.add_write(target, "x = 1\n")

    tm.commit()

    assert target.read_text() == "x = 1\n"
