"""Staged combustion rocket engine model.

A small fraction of the propellant (the pre-burner tap-off) is burned to
drive the turbopumps; the pumps then deliver the rest to the main
combustion chamber. Each tick runs the two stages in order:

1. Pre-burner: requests ``nominal_flow * PREBURNER_TAP_OFF * throttle * dt``
   of each propellant and sets ``preburner_combustion``.
2. Pump / chamber: requests ``nominal_flow * CHAMBER_TAP_OFF *
   preburner_combustion * dt`` and sets ``chamber_combustion``.

A stage's new level is its command (throttle, or pre-burner output for the
chamber) scaled by the worse of the two delivered-to-requested ratios.
Ignition is only needed to light a stage; once its level is positive it
sustains itself until starved back to zero.

This is a scalar mass-flow model. Thrust direction, back-pressure, thermal
limits and fuel/oxidizer-rich pre-burner operation are not modelled.
"""

from __future__ import annotations

import logging
from enum import Enum

from stagesim.core.clock import SimulationError, Temporal
from stagesim.core.compounds import CompoundKind
from stagesim.core.tank import Tank
from stagesim.utils.validation import (
    require_bool,
    require_fraction,
    require_number,
    require_positive,
)

logger = logging.getLogger(__name__)

# Share of nominal propellant flow burned in the pre-burner
PREBURNER_TAP_OFF = 0.05
# Share delivered to the main chamber
CHAMBER_TAP_OFF = 1.0 - PREBURNER_TAP_OFF


# --- Faults ---


class Fault(Enum):
    """Kinds of operational engine fault."""

    NO_FUEL_TANK = "no_fuel_tank"
    NO_OXIDIZER_TANK = "no_oxidizer_tank"
    # Reserved: exhaustion currently shows up only as clamped drains.
    OUT_OF_FUEL = "out_of_fuel"
    OUT_OF_OXIDIZER = "out_of_oxidizer"


class EngineError(SimulationError):
    """Generic engine fault."""

    fault: Fault | None = None


class NoTankConnectedError(EngineError):
    """A propellant tank is not connected to the engine."""


class NoFuelTankConnectedError(NoTankConnectedError):
    fault = Fault.NO_FUEL_TANK


class NoOxidizerTankConnectedError(NoTankConnectedError):
    fault = Fault.NO_OXIDIZER_TANK


class OutOfPropellantError(EngineError):
    """No supply of a propellant component. Reserved, never raised."""


class OutOfFuelError(OutOfPropellantError):
    fault = Fault.OUT_OF_FUEL


class OutOfOxidizerError(OutOfPropellantError):
    fault = Fault.OUT_OF_OXIDIZER


def _delivered(drained: float, requested: float) -> float:
    """Fraction of a request that was met; 1 when nothing was requested."""
    return drained / requested if requested > 0.0 else 1.0


class Engine(Temporal):
    """A bipropellant staged combustion engine.

    Tanks are not owned by the engine and may be shared between engines;
    whichever engine is ticked first drains first.

    Args:
        thrust: Nominal vacuum thrust [N].
        fuel_flow: Nominal fuel mass flow [kg/s].
        oxidizer_flow: Nominal oxidizer mass flow [kg/s].
        name: Label used in logs and reports.
    """

    def __init__(self, thrust: float, fuel_flow: float, oxidizer_flow: float, name: str = ""):
        self._thrust = require_positive("Engine thrust", thrust)
        self._fuel_flow = require_positive("Fuel flow", fuel_flow)
        self._oxidizer_flow = require_positive("Oxidizer flow", oxidizer_flow)
        self._propellant_flow = self._fuel_flow + self._oxidizer_flow
        self._effective_exhaust_velocity = self._thrust / self._propellant_flow
        self.name = name

        self._fuel_tank: Tank | None = None
        self._oxidizer_tank: Tank | None = None
        self._throttle = 0.0
        self._preburner_ignition = False
        self._chamber_ignition = False

        self._preburner_combustion = 0.0
        self._chamber_combustion = 0.0

        # Bookkeeping of the last successful tick and the running totals [kg]
        self._fuel_consumed = 0.0
        self._oxidizer_consumed = 0.0
        self._total_fuel_consumed = 0.0
        self._total_oxidizer_consumed = 0.0

    # --- Nominal design values ---

    @property
    def thrust_nominal(self) -> float:
        return self._thrust

    @property
    def fuel_flow_nominal(self) -> float:
        return self._fuel_flow

    @property
    def oxidizer_flow_nominal(self) -> float:
        return self._oxidizer_flow

    @property
    def propellant_flow_nominal(self) -> float:
        return self._propellant_flow

    @property
    def exhaust_velocity_nominal(self) -> float:
        return self._effective_exhaust_velocity

    # --- Controls ---

    @property
    def fuel_tank(self) -> Tank | None:
        return self._fuel_tank

    @fuel_tank.setter
    def fuel_tank(self, tank: Tank | None) -> None:
        self._fuel_tank = self._check_port(tank, CompoundKind.FUEL)

    @property
    def oxidizer_tank(self) -> Tank | None:
        return self._oxidizer_tank

    @oxidizer_tank.setter
    def oxidizer_tank(self, tank: Tank | None) -> None:
        self._oxidizer_tank = self._check_port(tank, CompoundKind.OXIDIZER)

    @staticmethod
    def _check_port(tank: Tank | None, kind: CompoundKind) -> Tank | None:
        if tank is None:
            return None
        if not isinstance(tank, Tank):
            raise TypeError(f"Invalid tank type: {type(tank).__name__}")
        if tank.compound.kind is not kind:
            raise ValueError(f"A tank of {tank.compound.name} cannot feed the {kind.value} port")
        return tank

    @property
    def throttle(self) -> float:
        """Commanded thrust level as a fraction of nominal, in [0, 1]."""
        return self._throttle

    @throttle.setter
    def throttle(self, level: float) -> None:
        self._throttle = require_fraction("Thrust level", level)

    @property
    def preburner_ignition(self) -> bool:
        return self._preburner_ignition

    @preburner_ignition.setter
    def preburner_ignition(self, active: bool) -> None:
        self._preburner_ignition = require_bool("Ignition control value", active)

    @property
    def chamber_ignition(self) -> bool:
        return self._chamber_ignition

    @chamber_ignition.setter
    def chamber_ignition(self, active: bool) -> None:
        self._chamber_ignition = require_bool("Ignition control value", active)

    def shutdown(self) -> None:
        """Cut throttle and both igniters; the burn then dies out over ticks."""
        self._throttle = 0.0
        self._preburner_ignition = False
        self._chamber_ignition = False

    # --- Combustion state ---

    @property
    def preburner_combustion(self) -> float:
        """Pre-burner level, 0 = extinguished, 1 = nominal."""
        return self._preburner_combustion

    @property
    def chamber_combustion(self) -> float:
        """Main chamber level, 0 = extinguished, 1 = nominal."""
        return self._chamber_combustion

    @property
    def thrust_level(self) -> float:
        """Current thrust as a fraction of nominal."""
        return (
            PREBURNER_TAP_OFF * self._preburner_combustion
            + CHAMBER_TAP_OFF * self._chamber_combustion
        )

    @property
    def thrust(self) -> float:
        """Current vacuum thrust [N]."""
        return self._thrust * self.thrust_level

    @property
    def fuel_flow(self) -> float:
        """Current fuel mass flow [kg/s]."""
        return self._fuel_flow * self.thrust_level

    @property
    def oxidizer_flow(self) -> float:
        """Current oxidizer mass flow [kg/s]."""
        return self._oxidizer_flow * self.thrust_level

    @property
    def propellant_flow(self) -> float:
        """Current total propellant mass flow [kg/s]."""
        return self._propellant_flow * self.thrust_level

    @property
    def effective_exhaust_velocity(self) -> float:
        """Effective exhaust velocity scaled by thrust level [m/s]."""
        return self._effective_exhaust_velocity * self.thrust_level

    def specific_impulse(self, g: float) -> float:
        """Return ``thrust / propellant_flow * g`` for acceleration *g* [m/s²].

        Returns 0.0 while no propellant is flowing.
        """
        g = require_number("Gravitational acceleration", g)
        flow = self.propellant_flow
        if flow <= 0.0:
            return 0.0
        return self.thrust / flow * g

    # --- Consumption bookkeeping ---

    @property
    def fuel_consumed(self) -> float:
        """Fuel drained during the last successful tick [kg]."""
        return self._fuel_consumed

    @property
    def oxidizer_consumed(self) -> float:
        """Oxidizer drained during the last successful tick [kg]."""
        return self._oxidizer_consumed

    @property
    def total_fuel_consumed(self) -> float:
        return self._total_fuel_consumed

    @property
    def total_oxidizer_consumed(self) -> float:
        return self._total_oxidizer_consumed

    # --- Simulation ---

    def tick(self, elapsed: float = 1.0) -> None:
        """Advance both combustion stages by *elapsed* seconds.

        Raises:
            NoFuelTankConnectedError: If no fuel tank is connected.
            NoOxidizerTankConnectedError: If no oxidizer tank is connected.
        """
        super().tick(elapsed)
        elapsed = float(elapsed)

        if self._fuel_tank is None:
            raise NoFuelTankConnectedError(f"{self._label()}: fuel tank is not connected")
        if self._oxidizer_tank is None:
            raise NoOxidizerTankConnectedError(f"{self._label()}: oxidizer tank is not connected")

        self._fuel_consumed = 0.0
        self._oxidizer_consumed = 0.0

        # Pre-burner gas drives the turbopumps
        if self._preburner_ignition or self._preburner_combustion > 0.0:
            self._preburner_combustion = self._stage(self._throttle, PREBURNER_TAP_OFF, elapsed)
        else:
            self._preburner_combustion = 0.0

        # Pumped flow is gated by the pre-burner output, not the throttle
        if self._chamber_ignition or self._chamber_combustion > 0.0:
            self._chamber_combustion = self._stage(
                self._preburner_combustion, CHAMBER_TAP_OFF, elapsed
            )
        else:
            self._chamber_combustion = 0.0

        self._total_fuel_consumed += self._fuel_consumed
        self._total_oxidizer_consumed += self._oxidizer_consumed

    def _stage(self, command: float, tap_off: float, elapsed: float) -> float:
        """Drain one stage's propellant and return the achieved level."""
        fuel_requested = self._fuel_flow * tap_off * command * elapsed
        oxidizer_requested = self._oxidizer_flow * tap_off * command * elapsed

        fuel_drained = self._fuel_tank.drain_mass(fuel_requested)
        oxidizer_drained = self._oxidizer_tank.drain_mass(oxidizer_requested)
        self._fuel_consumed += fuel_drained
        self._oxidizer_consumed += oxidizer_drained

        supply = command * min(
            _delivered(fuel_drained, fuel_requested),
            _delivered(oxidizer_drained, oxidizer_requested),
        )
        if supply < command:
            logger.debug(
                "%s: propellant starved at tap-off %.2f (%.3f of %.3f)",
                self._label(), tap_off, supply, command,
            )
        return min(max(supply, 0.0), 1.0)

    def _label(self) -> str:
        return self.name or "engine"

    def __repr__(self) -> str:
        label = f"'{self.name}', " if self.name else ""
        return f"Engine({label}thrust={self._thrust:g} N, level={self.thrust_level:.3f})"
