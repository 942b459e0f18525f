"""CLI command for listing the propellant compound catalog."""

from __future__ import annotations

import math

import click
from rich.console import Console
from rich.table import Table

from stagesim.core.compounds import CompoundKind, catalog


def _celsius(value: float) -> str:
    return "—" if math.isnan(value) else f"{value:.1f}"


@click.command("compounds")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in CompoundKind], case_sensitive=False),
    default=None,
    help="Only list fuels or oxidizers.",
)
@click.pass_context
def compounds(ctx: click.Context, kind: str | None) -> None:
    """List available fuels and oxidizers."""
    console: Console = ctx.obj.get("console", Console())
    wanted = CompoundKind(kind.lower()) if kind else None

    table = Table(title="Propellant Compounds")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Formula", style="green")
    table.add_column("Density [kg/L]", justify="right")
    table.add_column("Melting Pt [°C]", justify="right")
    table.add_column("Boiling Pt [°C]", justify="right")

    for name, compound in catalog().items():
        if wanted is not None and compound.kind is not wanted:
            continue
        table.add_row(
            name,
            compound.kind.value,
            compound.formula or "—",
            f"{compound.density * 1e3:.3f}",
            _celsius(compound.melting_point),
            _celsius(compound.boiling_point),
        )
    console.print(table)
