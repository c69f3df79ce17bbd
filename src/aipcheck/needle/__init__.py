from .pointer import L, SemanticPointer
from .catalog import MessageCatalog, catalog

__all__ = ["L", "SemanticPointer", "MessageCatalog", "catalog"]
