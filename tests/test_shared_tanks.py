"""Engines sharing a tank drain it in clock registration order."""

import pytest

from stagesim.core.clock import Clock
from stagesim.core.compounds import get_compound
from stagesim.core.engine import Engine
from stagesim.core.tank import Tank


def _setup(fuel_mass: float):
    """Two engines each needing 1 kg of fuel per firing at 24 Hz."""
    rp1 = get_compound("RP-1")
    lox = get_compound("LOX")
    fuel = Tank(rp1, 100.0 / rp1.density)
    fuel.fill_mass(fuel_mass)
    oxidizer = Tank.full(lox, 10000.0 / lox.density)

    engines = []
    for name in ("first", "second"):
        engine = Engine(10000.0, 24.0, 72.0, name=name)
        engine.fuel_tank = fuel
        engine.oxidizer_tank = oxidizer
        engine.throttle = 1.0
        engine.preburner_ignition = True
        engine.chamber_ignition = True
        engines.append(engine)
    return fuel, engines


class TestSharedTank:
    def test_first_registered_has_priority(self):
        fuel, (first, second) = _setup(2.5)
        clock = Clock(24)
        clock.register(first)
        clock.register(second)

        clock.tick_once()
        assert first.thrust_level == pytest.approx(1.0)
        assert second.thrust_level == pytest.approx(1.0)
        assert fuel.level == pytest.approx(0.5)

        clock.tick_once()
        # first takes the remaining 0.5 kg, second gets nothing
        assert first.fuel_consumed == pytest.approx(0.5)
        assert first.thrust_level == pytest.approx(0.5)
        assert second.fuel_consumed == pytest.approx(0.0, abs=1e-12)
        assert second.thrust_level == pytest.approx(0.0, abs=1e-9)

    def test_reversed_registration_reverses_priority(self):
        fuel, (first, second) = _setup(2.5)
        clock = Clock(24)
        clock.register(second)
        clock.register(first)

        clock.tick_once()
        clock.tick_once()
        assert second.thrust_level == pytest.approx(0.5)
        assert first.thrust_level == pytest.approx(0.0, abs=1e-9)

    def test_total_drained_equals_sum_of_consumption(self):
        initial = 7.3
        fuel, engines = _setup(initial)
        clock = Clock(24)
        for engine in engines:
            clock.register(engine)

        for _ in range(12):
            clock.tick_once()

        consumed = sum(e.total_fuel_consumed for e in engines)
        assert initial - fuel.level == pytest.approx(consumed)
        assert fuel.level == pytest.approx(0.0, abs=1e-9)
        assert engines[0].total_fuel_consumed > engines[1].total_fuel_consumed

    def test_tank_level_never_negative(self):
        fuel, engines = _setup(1.7)
        clock = Clock(24)
        for engine in engines:
            clock.register(engine)
        for _ in range(5):
            clock.tick_once()
            assert 0.0 <= fuel.level <= fuel.mass_capacity
