from typing import Any


class SemanticPointer:
    """Dotted message id built by attribute access: ``L.check.run.fail``."""

    def __init__(self, path: str = ""):
        self.__path = path

    def __getattr__(self, name: str) -> "SemanticPointer":
        if name.startswith("__"):
            raise AttributeError(name)
        return SemanticPointer(f"{self.__path}.{name}" if self.__path else name)

    def __str__(self) -> str:
        return self.__path

    def __repr__(self) -> str:
        return f"<SemanticPointer: '{self.__path}'>"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SemanticPointer):
            return self.__path == other.__path
        return isinstance(other, str) and other == self.__path

    def __hash__(self) -> int:
        return hash(self.__path)


L = SemanticPointer()
