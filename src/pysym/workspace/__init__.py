from .core import Workspace

__all__ = ["Workspace"]
