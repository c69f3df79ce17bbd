import logging
import os
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Sequence

log = logging.getLogger(__name__)


def _is_excluded(rel_path: str, exclude: Sequence[str]) -> bool:
    return any(fnmatch(rel_path, pattern) for pattern in exclude)


def discover_proto_files(root: Path, exclude: Sequence[str] = ()) -> List[Path]:
    """
    Returns the .proto files under root, sorted by their root-relative posix
    path. Hidden directories are skipped. A file path is returned as-is.
    """
    if root.is_file():
        return [root] if root.suffix == ".proto" else []
    if not root.is_dir():
        raise FileNotFoundError(f"No such file or directory: {root}")

    found: List[Path] = []
    for dirpath, dirs, files in os.walk(root):
        # Skip hidden dirs
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for filename in files:
            if not filename.endswith(".proto") or filename.startswith("."):
                continue
            abs_path = Path(dirpath) / filename
            rel_path = abs_path.relative_to(root).as_posix()
            if _is_excluded(rel_path, exclude):
                log.debug(f"Excluded {rel_path}")
                continue
            found.append(abs_path)

    return sorted(found, key=lambda p: p.relative_to(root).as_posix())
