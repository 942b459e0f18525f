"""CLI commands for creating and running simulation scenarios."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from stagesim.core.config import (
    default_scenario,
    load_scenario_json,
    save_scenario_json,
    validate_scenario,
)
from stagesim.core.simulation import run_simulation, save_results_json
from stagesim.utils.constants import KN_TO_N, MN_TO_N
from stagesim.utils.units import parse_quantity


@click.command("init")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def init(ctx: click.Context, path: str) -> None:
    """Write the default twin-engine scenario to PATH."""
    console: Console = ctx.obj.get("console", Console())
    save_scenario_json(default_scenario(), path)
    console.print(f"[dim]Saved default scenario to {path}[/dim]")


@click.command("simulate")
@click.option(
    "--scenario",
    "-s",
    "scenario_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Scenario JSON file (default: built-in twin-engine burn).",
)
@click.option("--duration", type=str, default=None, help="Override duration, e.g. 30 or '2 min'.")
@click.option("--rate", type=float, default=None, help="Override clock rate [Hz].")
@click.option(
    "--throttle",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Override every engine's throttle.",
)
@click.option("--realtime", is_flag=True, help="Pace firings against the wall clock.")
@click.option("--output", "-o", type=click.Path(), default=None, help="Output file (JSON).")
@click.pass_context
def simulate(
    ctx: click.Context,
    scenario_path: str | None,
    duration: str | None,
    rate: float | None,
    throttle: float | None,
    realtime: bool,
    output: str | None,
) -> None:
    """Run a scenario and report engine and tank state."""
    console: Console = ctx.obj.get("console", Console())

    if scenario_path:
        try:
            scenario = load_scenario_json(scenario_path)
        except (KeyError, ValueError) as exc:
            raise click.ClickException(f"Cannot read scenario {scenario_path}: {exc}") from exc
    else:
        scenario = default_scenario()

    if duration is not None:
        try:
            scenario.duration = parse_quantity(duration, "s")
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--duration") from exc
    if rate is not None:
        scenario.rate = rate
    if throttle is not None:
        for engine in scenario.engines:
            engine.throttle = throttle

    check = validate_scenario(scenario)
    for msg in check.warnings:
        console.print(f"[yellow]Warning:[/yellow] {msg.parameter}: {msg.message}")
    if not check.is_valid:
        for msg in check.errors:
            console.print(f"[red]Error:[/red] {msg.parameter}: {msg.message}")
        raise click.ClickException("Scenario is not valid")

    console.print(f"\n[bold]StageSim — {scenario.meta.name}[/bold]\n")
    try:
        result = run_simulation(scenario, realtime=realtime)
    except KeyboardInterrupt:
        raise click.Abort() from None

    engines = Table(title="Engines")
    engines.add_column("Engine", style="cyan")
    engines.add_column("Final Level", justify="right", style="green")
    engines.add_column("Peak Thrust [kN]", justify="right")
    engines.add_column("Total Impulse [MN·s]", justify="right")
    engines.add_column("Burn Time [s]", justify="right")
    for name, data in result.summary["engines"].items():
        engines.add_row(
            name,
            f"{data['final_thrust_level'] * 100:.1f}%",
            f"{data['peak_thrust'] / KN_TO_N:.1f}",
            f"{data['total_impulse'] / MN_TO_N:.2f}",
            f"{data['burn_time']:.2f}",
        )
    console.print(engines)

    tanks = Table(title="Tanks")
    tanks.add_column("Tank", style="cyan")
    tanks.add_column("Level [kg]", justify="right", style="green")
    tanks.add_column("Capacity [kg]", justify="right")
    tanks.add_column("Full", justify="right")
    for name, data in result.summary["tanks"].items():
        tanks.add_row(
            name,
            f"{data['level']:.1f}",
            f"{data['mass_capacity']:.1f}",
            f"{data['fraction_full'] * 100:.1f}%",
        )
    console.print(tanks)

    console.print(
        f"[dim]{result.firings} firings, {result.simulated_time:.2f} s simulated, "
        f"{result.fault_count} faults[/dim]"
    )

    if output:
        save_results_json(result, output)
        console.print(f"\n[dim]Saved to {output}[/dim]")
