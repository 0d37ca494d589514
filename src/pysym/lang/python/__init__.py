from .cache import CompilationUnit, Package, PackageCache
from .locator import PythonPackageLocator, ROOT_PACKAGE
from .printer import CstPrinter, NameEditTransformer
from .resolver import ScopeResolver

__all__ = [
    "CompilationUnit",
    "Package",
    "PackageCache",
    "PythonPackageLocator",
    "ROOT_PACKAGE",
    "CstPrinter",
    "NameEditTransformer",
    "ScopeResolver",
]
