import logging

import typer

from aipcheck.common import bus
from aipcheck.needle import L, catalog
from .rendering import CliRenderer

from .commands.check import check_command
from .commands.baseline import baseline_command
from .commands.rules import rules_command

app = typer.Typer(
    name="aipcheck",
    help=catalog.get(L.cli.app.description),
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help=catalog.get(L.cli.option.verbose.help)
    ),
):
    # The CLI is the composition root: it picks the renderer and log level.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    bus.set_renderer(CliRenderer(verbose=verbose))


app.command(name="check", help=catalog.get(L.cli.command.check.help))(check_command)
app.command(name="baseline", help=catalog.get(L.cli.command.baseline.help))(
    baseline_command
)
app.command(name="rules", help=catalog.get(L.cli.command.rules.help))(rules_command)


if __name__ == "__main__":
    app()
