"""StageSim command-line interface.

Entry point for the ``stagesim`` CLI tool.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from stagesim import __app_name__, __version__

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(version=__version__, prog_name=__app_name__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """StageSim — staged combustion engine and propellant tank simulation."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["console"] = console


# Import and register sub-commands
from stagesim.cli.compounds_cmd import compounds  # noqa: E402
from stagesim.cli.simulate_cmd import init, simulate  # noqa: E402

cli.add_command(compounds)
cli.add_command(init)
cli.add_command(simulate)


def main() -> None:
    """Convenience wrapper for entry-point scripts."""
    cli()
