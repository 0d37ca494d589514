from .session import RenameSession

__all__ = ["RenameSession"]
