"""Tests for the telemetry recorder."""

import numpy as np
import pytest

from stagesim.core.clock import Clock
from stagesim.core.compounds import get_compound
from stagesim.core.engine import Engine
from stagesim.core.tank import Tank
from stagesim.core.telemetry import Recorder


@pytest.fixture
def rig():
    rp1 = get_compound("RP-1")
    lox = get_compound("LOX")
    fuel = Tank.full(rp1, 100.0 / rp1.density)
    oxidizer = Tank.full(lox, 300.0 / lox.density)
    engine = Engine(2000.0, 2.0, 6.0, name="main")
    engine.fuel_tank = fuel
    engine.oxidizer_tank = oxidizer
    engine.throttle = 1.0
    engine.preburner_ignition = True
    engine.chamber_ignition = True

    clock = Clock(10)
    clock.register(engine)
    recorder = Recorder(engines={"main": engine}, tanks={"fuel": fuel, "ox": oxidizer})
    clock.register(recorder)
    return clock, engine, fuel, recorder


class TestRecorder:
    def test_sample_count(self, rig):
        clock, _, _, recorder = rig
        for _ in range(5):
            clock.tick_once()
        assert len(recorder) == 5

    def test_arrays(self, rig):
        clock, _, fuel, recorder = rig
        for _ in range(4):
            clock.tick_once()
        arrays = recorder.as_arrays()
        assert set(arrays) == {
            "time",
            "engine.main.thrust_level",
            "engine.main.thrust",
            "tank.fuel.fraction_full",
            "tank.fuel.level",
            "tank.ox.fraction_full",
            "tank.ox.level",
        }
        np.testing.assert_allclose(arrays["time"], [0.1, 0.2, 0.3, 0.4])
        np.testing.assert_allclose(arrays["engine.main.thrust_level"], 1.0)
        # 0.2 kg of fuel burned per firing
        np.testing.assert_allclose(arrays["tank.fuel.level"], [99.8, 99.6, 99.4, 99.2])
        assert arrays["tank.fuel.level"][-1] == pytest.approx(fuel.level)

    def test_summary(self, rig):
        clock, _, _, recorder = rig
        for _ in range(10):
            clock.tick_once()
        summary = recorder.summary()
        main = summary["engines"]["main"]
        assert summary["samples"] == 10
        assert summary["duration"] == pytest.approx(1.0)
        assert main["peak_thrust"] == pytest.approx(2000.0)
        assert main["total_impulse"] == pytest.approx(2000.0)
        assert main["burn_time"] == pytest.approx(1.0)
        assert summary["tanks"]["fuel"]["level"] == pytest.approx(98.0)

    def test_empty_summary(self):
        recorder = Recorder()
        summary = recorder.summary()
        assert summary["samples"] == 0
        assert summary["engines"] == {}

    def test_recorder_is_read_only(self, rig):
        _, engine, fuel, recorder = rig
        level = fuel.level
        recorder.tick(0.1)
        recorder.tick(0.1)
        assert fuel.level == level
        assert engine.thrust_level == 0.0

    def test_rejects_wrong_types(self):
        with pytest.raises(TypeError):
            Recorder(engines={"x": object()})
        with pytest.raises(TypeError):
            Recorder(tanks={"x": "tank"})
