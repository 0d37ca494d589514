from .pointer import L, SemanticPointer
from .runtime import Needle, find_project_root
from .loader import FileHandler, JsonHandler, Loader

__all__ = [
    "L",
    "SemanticPointer",
    "Needle",
    "find_project_root",
    "FileHandler",
    "JsonHandler",
    "Loader",
]
