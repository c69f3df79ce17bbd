from pathlib import Path
from typing import List, Optional

import typer

from aipcheck.common import bus
from aipcheck.needle import L
from aipcheck.analysis import UnknownRuleError
from aipcheck.app.runners import UnknownFormatError
from aipcheck.config import ConfigError
from aipcheck.cli.factories import make_app


def split_selectors(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def check_command(
    path: Path = typer.Argument(
        ..., exists=True, help="Directory (or single file) of .proto definitions."
    ),
    rules: Optional[str] = typer.Option(
        None, "--rules", help="Comma-separated rule ids or groups to run."
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", help="Output format: text or json."
    ),
    baseline: Optional[Path] = typer.Option(
        None, "--baseline", help="Suppress findings recorded in this baseline file."
    ),
    jobs: Optional[int] = typer.Option(
        None, "--jobs", "-j", min=1, help="Evaluate rules on this many threads."
    ),
):
    try:
        app_instance = make_app(path)
        outcome = app_instance.run_check(
            target=path,
            rules=split_selectors(rules),
            fmt=output_format,
            baseline=baseline,
            jobs=jobs,
        )
    except UnknownRuleError as e:
        bus.error(L.error.rule.unknown, name=e.name)
        raise typer.Exit(code=2)
    except UnknownFormatError as e:
        bus.error(L.error.format.unknown, name=e.name)
        raise typer.Exit(code=2)
    except ConfigError as e:
        bus.error(L.error.config.invalid, error=e)
        raise typer.Exit(code=2)

    typer.echo(outcome.output, nl=False)
    if not outcome.success:
        raise typer.Exit(code=1)
