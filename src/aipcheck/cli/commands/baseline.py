from pathlib import Path
from typing import Optional

import typer

from aipcheck.common import bus
from aipcheck.needle import L
from aipcheck.analysis import UnknownRuleError
from aipcheck.config import ConfigError
from aipcheck.cli.factories import make_app
from .check import split_selectors


def baseline_command(
    path: Path = typer.Argument(
        ..., exists=True, help="Directory (or single file) of .proto definitions."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Where to write the baseline file."
    ),
    rules: Optional[str] = typer.Option(
        None, "--rules", help="Comma-separated rule ids or groups to record."
    ),
):
    try:
        make_app(path).run_baseline(
            target=path, output=output, rules=split_selectors(rules)
        )
    except UnknownRuleError as e:
        bus.error(L.error.rule.unknown, name=e.name)
        raise typer.Exit(code=2)
    except ConfigError as e:
        bus.error(L.error.config.invalid, error=e)
        raise typer.Exit(code=2)
