from .print_symbols import print_syms
from .symbols import SymbolRunner

__all__ = ["print_syms", "SymbolRunner"]
