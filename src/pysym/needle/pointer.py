from typing import Any


class SemanticPointer:
    def __init__(self, path: str = ""):
        # Dunder name so it never collides with a message key segment.
        self.__path = path

    def __getattr__(self, name: str) -> "SemanticPointer":
        new_path = f"{self.__path}.{name}" if self.__path else name
        return SemanticPointer(new_path)

    def __truediv__(self, other: Any) -> "SemanticPointer":
        segment = str(other)
        new_path = f"{self.__path}.{segment}" if self.__path else segment
        return SemanticPointer(new_path)

    def __str__(self) -> str:
        return self.__path

    def __repr__(self) -> str:
        return f"<SemanticPointer: '{self.__path}'>"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SemanticPointer):
            return self.__path == other.__path
        return str(other) == self.__path

    def __hash__(self) -> int:
        return hash(self.__path)


# Root anchor for all message ids.
L = SemanticPointer()
