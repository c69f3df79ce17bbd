import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from aipcheck.spec import ProtoFile, Schema
from .errors import ParseError
from .parser import parse_proto

log = logging.getLogger(__name__)


@dataclass
class LoadResult:
    schema: Schema
    errors: List[ParseError] = field(default_factory=list)


def display_path(path: Path, base: Optional[Path]) -> str:
    """Path as shown in findings: relative to base when possible, posix style."""
    if base is not None:
        try:
            return path.resolve().relative_to(base.resolve()).as_posix()
        except ValueError:
            pass
    return path.as_posix()


def load_file(path: Path, base: Optional[Path] = None) -> ProtoFile:
    shown = display_path(path, base)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(shown, 1, 1, f"File is not valid UTF-8: {e.reason}") from e
    return parse_proto(text, shown)


def load_schema(files: Sequence[Path], base: Optional[Path] = None) -> LoadResult:
    """
    Parses every file into one Schema. A file that fails to parse is recorded
    in LoadResult.errors and left out; the remaining files still load.
    """
    loaded: List[ProtoFile] = []
    errors: List[ParseError] = []

    for path in files:
        try:
            loaded.append(load_file(path, base))
        except ParseError as e:
            log.warning(f"Skipping {e.path}: {e.message}")
            errors.append(e)
        except OSError as e:
            shown = display_path(path, base)
            log.warning(f"Could not read file {shown}: {e}")
            errors.append(ParseError(shown, 0, 0, f"Could not read file: {e}"))

    return LoadResult(schema=Schema(files=tuple(loaded)), errors=errors)
