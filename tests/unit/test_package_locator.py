from pathlib import Path

import pytest

from pysym.lang.python import PythonPackageLocator
from pysym.lang.python.cache import PackageCache, module_name_for
from pysym.needle import L
from pysym.spec.errors import PackageLocatorError, StructuralError
from pysym.spec.models import Position
from pysym.test_utils import SpyBus
from pysym.workspace import Workspace


@pytest.fixture
def project(workspace_factory):
    return (
        workspace_factory.with_source("main.py", "x = 1\n")
        .with_source("pkg/__init__.py", "")
        .with_source("pkg/sub/mod.py", "y = 2\n")
        .with_source("src/lib/core.py", "z = 3\n")
        .build()
    )


def _locator(root, extra_paths=()):
    return PythonPackageLocator(Workspace(root), extra_paths=list(extra_paths))


def test_import_path_of_maps_directories(project):
    locator = _locator(project)

    assert locator.import_path_of(Position("main.py", 1, 1)) == "."
    assert locator.import_path_of(Position("pkg/sub/mod.py", 1, 1)) == "pkg.sub"
    # The deepest root wins: src/ is a root of its own.
    assert locator.import_path_of(Position("src/lib/core.py", 1, 1)) == "lib"


def test_import_path_of_outside_every_root(project, tmp_path_factory):
    elsewhere = tmp_path_factory.mktemp("elsewhere")
    locator = _locator(project)

    with pytest.raises(PackageLocatorError):
        locator.import_path_of(Position(str(elsewhere / "a.py"), 1, 1))


def test_empty_file_name_is_structural(project):
    with pytest.raises(StructuralError):
        _locator(project).import_path_of(Position("", 1, 1))


def test_directory_of_dotted_path(project):
    locator = _locator(project)

    assert locator.directory_of(".") == project.resolve()
    assert locator.directory_of("pkg.sub") == project.resolve() / "pkg" / "sub"
    assert locator.directory_of("lib") == project.resolve() / "src" / "lib"
    assert locator.directory_of("nothing.here") is None


def test_find_module_file_in_workspace(project):
    locator = _locator(project)

    assert locator.find_module_file("pkg") == project.resolve() / "pkg" / "__init__.py"
    assert locator.find_module_file("pkg.sub.mod") == (
        project.resolve() / "pkg" / "sub" / "mod.py"
    )
    assert locator.find_module_file("pkg.missing") is None


def test_find_module_file_through_external_roots(project, tmp_path_factory):
    site = tmp_path_factory.mktemp("site")
    (site / "extlib").mkdir()
    (site / "extlib" / "__init__.py").write_text("")
    (site / "extlib" / "util.py").write_text("def tool(): ...\n")
    (site / "single.py").write_text("A = 1\n")

    locator = _locator(project, extra_paths=[str(site)])

    assert locator.find_module_file("extlib.util") == (site / "extlib" / "util.py").resolve()
    assert locator.find_module_file("single") == (site / "single.py").resolve()
    assert locator.find_module_file("single.attr") is None
    assert locator.import_path_of_dir(site / "extlib") == "extlib"


def test_module_names():
    assert module_name_for(".", "main") == "main"
    assert module_name_for(".", "__init__") == "__init__"
    assert module_name_for("pkg.sub", "mod") == "pkg.sub.mod"
    assert module_name_for("pkg", "__init__") == "pkg"


def test_package_cache_parses_each_file_once(project):
    cache = PackageCache(_locator(project))

    pkg = cache.package("pkg.sub")
    assert pkg is not None
    assert pkg.import_path == "pkg.sub"
    assert cache.package(Path("pkg/sub")) is pkg
    assert cache.package("./pkg/sub") is pkg

    first = pkg.units
    second = pkg.units
    assert [u.module_name for u in first] == ["pkg.sub.mod"]
    assert first[0] is second[0]


def test_package_cache_unknown_package(project):
    cache = PackageCache(_locator(project), thread_safe=False)
    assert cache.package("no.such.pkg") is None


def test_package_cache_reports_syntax_errors(workspace_factory, monkeypatch):
    root = (
        workspace_factory.with_source("good.py", "a = 1\n")
        .with_raw_file("bad.py", "def broken(:\n")
        .build()
    )
    cache = PackageCache(_locator(root))
    spy = SpyBus()

    with spy.patch(monkeypatch):
        units = cache.package(".").units

    assert [u.module_name for u in units] == ["good"]
    spy.assert_id_called(L.cache.parse_failed, level="error")
