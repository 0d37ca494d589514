from .context import SymbolContext
from .runners import SymbolRunner, print_syms

__all__ = ["SymbolContext", "SymbolRunner", "print_syms"]
