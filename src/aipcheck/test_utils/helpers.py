from pathlib import Path
from textwrap import dedent
from typing import Optional

from aipcheck.app import AipcheckApp
from aipcheck.config import AipcheckConfig
from aipcheck.loader import parse_proto
from aipcheck.spec import Schema


def schema_from_source(source: str, path: str = "test.proto") -> Schema:
    return Schema(files=(parse_proto(dedent(source), path),))


def create_test_app(
    root_path: Path, config: Optional[AipcheckConfig] = None
) -> AipcheckApp:
    return AipcheckApp(root_path=root_path, config=config)
