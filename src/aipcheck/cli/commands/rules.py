from pathlib import Path

import typer

from aipcheck.common import bus
from aipcheck.needle import L
from aipcheck.config import ConfigError
from aipcheck.cli.factories import make_app


def rules_command(
    path: Path = typer.Argument(
        Path("."), exists=True, help="Project whose configuration and plugins apply."
    ),
):
    try:
        app_instance = make_app(path)
    except ConfigError as e:
        bus.error(L.error.config.invalid, error=e)
        raise typer.Exit(code=2)

    for rule in app_instance.list_rules():
        typer.echo(
            f"{rule.id:<30} {rule.group:<10} {rule.severity.value:<8} {rule.summary}"
        )
