from .bus import SpyBus
from .workspace import WorkspaceFactory
from .helpers import create_test_app, schema_from_source

__all__ = ["SpyBus", "WorkspaceFactory", "create_test_app", "schema_from_source"]
