from .errors import (
    KindMaskError,
    PackageLocatorError,
    PrinterError,
    PysymError,
    StructuralError,
    SymbolLineError,
)
from .models import (
    DeclarationIdentity,
    ObjKind,
    Occurrence,
    Position,
    SymbolLine,
    TypeInfo,
)

__all__ = [
    "KindMaskError",
    "PackageLocatorError",
    "PrinterError",
    "PysymError",
    "StructuralError",
    "SymbolLineError",
    "DeclarationIdentity",
    "ObjKind",
    "Occurrence",
    "Position",
    "SymbolLine",
    "TypeInfo",
]
