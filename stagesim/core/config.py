"""Scenario definition and persistence for StageSim.

A scenario lists the tanks and engines to build, how they are wired and
how long to run the clock. Scenarios are saved and loaded as JSON. Any
numeric field may also be written as a pint quantity string such as
``"7.77 MN"`` or ``"12000 L"``; it is converted to the core units on load.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np

from stagesim.core.compounds import CompoundKind, get_compound
from stagesim.utils.units import parse_quantity
from stagesim.utils.validation import (
    Severity,
    ValidationResult,
    require_bool,
    validate_positive,
    validate_range,
)

logger = logging.getLogger(__name__)


# --- Scenario metadata ---


@dataclass
class ScenarioMeta:
    """Top-level scenario metadata."""

    name: str = "Untitled"
    description: str = ""
    author: str = ""
    version: str = "0.1.0"
    created: str = ""
    modified: str = ""

    def touch(self) -> None:
        """Update the modified timestamp."""
        self.modified = datetime.now(timezone.utc).isoformat()


@dataclass
class TankConfig:
    """A propellant tank to build."""

    name: str
    compound: str
    capacity: float  # mL
    fill: float = 0.0  # kg requested at start (clamped to capacity)


@dataclass
class EngineConfig:
    """An engine to build and the tanks it draws from."""

    name: str
    thrust: float  # N
    fuel_flow: float  # kg/s
    oxidizer_flow: float  # kg/s
    fuel_tank: str | None = None
    oxidizer_tank: str | None = None
    throttle: float = 1.0
    preburner_ignition: bool = True
    chamber_ignition: bool = True


@dataclass
class Scenario:
    """Complete simulation scenario.

    Engines are registered with the clock in list order, which decides who
    drains a shared tank first.
    """

    meta: ScenarioMeta = field(default_factory=ScenarioMeta)
    rate: float = 24.0  # Hz
    duration: float = 10.0  # s
    tanks: list[TankConfig] = field(default_factory=list)
    engines: list[EngineConfig] = field(default_factory=list)

    @property
    def firings(self) -> int:
        return round(self.duration * self.rate)


def default_scenario() -> Scenario:
    """Two engines sharing one RP-1 and one LOX tank, both lit at full throttle."""
    lox = get_compound("liquid oxygen")
    rp1 = get_compound("RP-1")
    return Scenario(
        meta=ScenarioMeta(
            name="Twin engine burn",
            description="Two staged combustion engines sharing a common tank pair",
        ),
        rate=24.0,
        duration=10.0,
        tanks=[
            TankConfig(name="oxidizer", compound=lox.name, capacity=50000 / lox.density, fill=100000),
            TankConfig(name="fuel", compound=rp1.name, capacity=10000 / rp1.density, fill=50000),
        ],
        engines=[
            EngineConfig(
                name=label,
                thrust=7770000,
                fuel_flow=788,
                oxidizer_flow=2578,
                fuel_tank="fuel",
                oxidizer_tank="oxidizer",
            )
            for label in ("L", "R")
        ],
    )


# --- Validation ---


def validate_scenario(scenario: Scenario) -> ValidationResult:
    """Run design-rule checks on a scenario before it is built."""
    result = ValidationResult()

    validate_positive("rate", scenario.rate, result)
    validate_positive("duration", scenario.duration, result)
    if scenario.rate > 1000:
        result.warning("rate", f"Tick rate {scenario.rate:g} Hz is very high")

    tank_names: set[str] = set()
    kinds: dict[str, CompoundKind] = {}
    for tank in scenario.tanks:
        prefix = f"tanks.{tank.name}"
        if tank.name in tank_names:
            result.error(prefix, f"Duplicate tank name '{tank.name}'")
        tank_names.add(tank.name)
        try:
            kinds[tank.name] = get_compound(tank.compound).kind
        except KeyError:
            result.error(f"{prefix}.compound", f"Unknown compound '{tank.compound}'")
        validate_positive(f"{prefix}.capacity", tank.capacity, result)
        if tank.fill < 0:
            result.error(f"{prefix}.fill", "Initial fill cannot be negative", value=tank.fill)

    if not scenario.engines:
        result.warning("engines", "Scenario has no engines")

    engine_names: set[str] = set()
    for engine in scenario.engines:
        prefix = f"engines.{engine.name}"
        if engine.name in engine_names:
            result.error(prefix, f"Duplicate engine name '{engine.name}'")
        engine_names.add(engine.name)

        validate_positive(f"{prefix}.thrust", engine.thrust, result)
        validate_positive(f"{prefix}.fuel_flow", engine.fuel_flow, result)
        validate_positive(f"{prefix}.oxidizer_flow", engine.oxidizer_flow, result)
        validate_range(f"{prefix}.throttle", engine.throttle, 0.0, 1.0, result)

        for port, tank_name, expected in (
            ("fuel_tank", engine.fuel_tank, CompoundKind.FUEL),
            ("oxidizer_tank", engine.oxidizer_tank, CompoundKind.OXIDIZER),
        ):
            if tank_name is None:
                result.add(
                    Severity.WARNING, f"{prefix}.{port}",
                    "No tank connected; the engine will fault on every tick",
                )
            elif tank_name not in tank_names:
                result.error(f"{prefix}.{port}", f"Unknown tank '{tank_name}'")
            elif tank_name in kinds and kinds[tank_name] is not expected:
                result.error(
                    f"{prefix}.{port}",
                    f"Tank '{tank_name}' does not hold a {expected.value}",
                )

        if not (engine.preburner_ignition and engine.chamber_ignition):
            result.info(prefix, "Not all igniters are armed; the engine may never light")

    return result


# --- JSON serialization ---


class _NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, (np.integer,)):
            return int(obj)
        if isinstance(obj, (np.floating,)):
            return float(obj)
        return super().default(obj)


def dump_json(data: Any, path: str | Path) -> None:
    """Write *data* as indented JSON, converting numpy values."""
    with open(path, "w") as f:
        json.dump(data, f, indent=2, cls=_NumpyEncoder)


def save_scenario_json(scenario: Scenario, path: str | Path) -> None:
    """Save a scenario to a JSON file."""
    path = Path(path)
    if not scenario.meta.created:
        scenario.meta.created = datetime.now(timezone.utc).isoformat()
    scenario.meta.touch()
    dump_json(asdict(scenario), path)
    logger.info("Saved scenario to %s", path)


def _as_dict(what: str, value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _as_list(what: str, value: Any) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _text(what: str, value: Any, optional: bool = False) -> str | None:
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string, got {value!r}")
    return value


def _flag(what: str, value: Any) -> bool:
    try:
        return require_bool(what, value)
    except TypeError as exc:
        raise ValueError(str(exc)) from exc


def _meta_from_dict(data: Any) -> ScenarioMeta:
    data = _as_dict("Scenario meta", data)
    known = {f.name for f in fields(ScenarioMeta)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown meta field(s): {', '.join(unknown)}")
    return ScenarioMeta(**{key: _text(f"Meta '{key}'", value) for key, value in data.items()})


def _tank_from_dict(data: Any) -> TankConfig:
    data = _as_dict("Tank entry", data)
    name = _text("Tank name", data["name"])
    return TankConfig(
        name=name,
        compound=_text(f"Tank '{name}' compound", data["compound"]),
        capacity=parse_quantity(data["capacity"], "mL"),
        fill=parse_quantity(data.get("fill", 0.0), "kg"),
    )


def _engine_from_dict(data: Any) -> EngineConfig:
    data = _as_dict("Engine entry", data)
    name = _text("Engine name", data["name"])
    return EngineConfig(
        name=name,
        thrust=parse_quantity(data["thrust"], "N"),
        fuel_flow=parse_quantity(data["fuel_flow"], "kg/s"),
        oxidizer_flow=parse_quantity(data["oxidizer_flow"], "kg/s"),
        fuel_tank=_text(f"Engine '{name}' fuel_tank", data.get("fuel_tank"), optional=True),
        oxidizer_tank=_text(
            f"Engine '{name}' oxidizer_tank", data.get("oxidizer_tank"), optional=True
        ),
        throttle=parse_quantity(data.get("throttle", 1.0), "dimensionless"),
        preburner_ignition=_flag(
            f"Engine '{name}' preburner_ignition", data.get("preburner_ignition", True)
        ),
        chamber_ignition=_flag(
            f"Engine '{name}' chamber_ignition", data.get("chamber_ignition", True)
        ),
    )


def scenario_from_dict(data: Any) -> Scenario:
    """Build a scenario from plain (JSON-like) data.

    Raises:
        KeyError: If a required field is missing.
        ValueError: If a field has the wrong type or a quantity cannot be
            converted.
    """
    data = _as_dict("Scenario", data)
    return Scenario(
        meta=_meta_from_dict(data.get("meta", {})),
        rate=parse_quantity(data.get("rate", 24.0), "Hz"),
        duration=parse_quantity(data.get("duration", 10.0), "s"),
        tanks=[_tank_from_dict(t) for t in _as_list("Scenario tanks", data.get("tanks", []))],
        engines=[
            _engine_from_dict(e) for e in _as_list("Scenario engines", data.get("engines", []))
        ],
    )


def load_scenario_json(path: str | Path) -> Scenario:
    """Load a scenario from a JSON file."""
    path = Path(path)
    with open(path) as f:
        data = json.load(f)
    scenario = scenario_from_dict(data)
    logger.info(
        "Loaded scenario '%s' from %s (%d tanks, %d engines)",
        scenario.meta.name, path, len(scenario.tanks), len(scenario.engines),
    )
    return scenario
