"""Scenario wiring and batch runs.

Turns a :class:`~stagesim.core.config.Scenario` into live tanks, engines
and a clock, runs it, and collects the recorder output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from stagesim.core.clock import Clock, FiringResult
from stagesim.core.compounds import get_compound
from stagesim.core.config import Scenario, dump_json
from stagesim.core.engine import Engine
from stagesim.core.tank import Tank
from stagesim.core.telemetry import Recorder

logger = logging.getLogger(__name__)


@dataclass
class Simulation:
    """Live objects built from a scenario."""

    scenario: Scenario
    clock: Clock
    tanks: dict[str, Tank] = field(default_factory=dict)
    engines: dict[str, Engine] = field(default_factory=dict)
    recorder: Recorder | None = None


@dataclass
class SimulationResult:
    """Outcome of a scenario run."""

    scenario_name: str = ""
    firings: int = 0
    simulated_time: float = 0.0  # s
    fault_count: int = 0
    faults: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)
    arrays: dict[str, np.ndarray] = field(default_factory=dict, repr=False)


def build_simulation(scenario: Scenario, **clock_kwargs: Any) -> Simulation:
    """Create and wire every tank and engine of *scenario*.

    Engines are registered in declaration order, the recorder last.

    Raises:
        KeyError: If a compound or tank name is unknown.
        ValueError: If a value breaks a component contract.
    """
    clock = Clock(scenario.rate, **clock_kwargs)
    sim = Simulation(scenario=scenario, clock=clock)

    for cfg in scenario.tanks:
        tank = Tank(get_compound(cfg.compound), cfg.capacity)
        added = tank.fill_mass(cfg.fill)
        if added < cfg.fill:
            logger.info(
                "Tank '%s' holds %.1f kg; fill request of %.1f kg clamped",
                cfg.name, added, cfg.fill,
            )
        sim.tanks[cfg.name] = tank

    for cfg in scenario.engines:
        engine = Engine(cfg.thrust, cfg.fuel_flow, cfg.oxidizer_flow, name=cfg.name)
        engine.fuel_tank = _lookup_tank(sim, cfg.fuel_tank)
        engine.oxidizer_tank = _lookup_tank(sim, cfg.oxidizer_tank)
        engine.throttle = cfg.throttle
        engine.preburner_ignition = cfg.preburner_ignition
        engine.chamber_ignition = cfg.chamber_ignition
        engine.register(clock)
        sim.engines[cfg.name] = engine

    sim.recorder = Recorder(engines=sim.engines, tanks=sim.tanks)
    clock.register(sim.recorder)
    return sim


def _lookup_tank(sim: Simulation, name: str | None) -> Tank | None:
    if name is None:
        return None
    try:
        return sim.tanks[name]
    except KeyError:
        raise KeyError(f"Tank '{name}' not defined. Available: {list(sim.tanks)}") from None


def run_simulation(
    scenario: Scenario,
    realtime: bool = False,
    **clock_kwargs: Any,
) -> SimulationResult:
    """Build *scenario* and run it for ``scenario.duration`` seconds."""
    sim = build_simulation(scenario, **clock_kwargs)
    logger.info(
        "Running '%s': %d firings at %.3g Hz", scenario.meta.name, scenario.firings, scenario.rate
    )
    firings: list[FiringResult] = sim.clock.run(firings=scenario.firings, realtime=realtime)

    faults = [f"t{r.index}: {fault.error}" for r in firings for fault in r.faults]
    return SimulationResult(
        scenario_name=scenario.meta.name,
        firings=len(firings),
        simulated_time=sim.clock.simulated_time,
        fault_count=len(faults),
        faults=faults,
        summary=sim.recorder.summary(),
        arrays=sim.recorder.as_arrays(),
    )


def save_results_json(result: SimulationResult, path: str | Path) -> None:
    """Write a run summary plus its time series to JSON."""
    path = Path(path)
    dump_json(
        {
            "scenario": result.scenario_name,
            "firings": result.firings,
            "simulated_time": result.simulated_time,
            "fault_count": result.fault_count,
            "faults": result.faults,
            "summary": result.summary,
            "series": result.arrays,
        },
        path,
    )
    logger.info("Saved results to %s", path)
