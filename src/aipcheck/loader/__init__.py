from .errors import ParseError
from .lexer import Token, TokenKind, tokenize
from .parser import ProtoParser, parse_proto
from .discovery import discover_proto_files
from .schema_loader import LoadResult, display_path, load_file, load_schema

__all__ = [
    "ParseError",
    "Token",
    "TokenKind",
    "tokenize",
    "ProtoParser",
    "parse_proto",
    "discover_proto_files",
    "LoadResult",
    "display_path",
    "load_file",
    "load_schema",
]
