"""Tests for the Temporal interface and the Clock scheduler."""

import logging

import pytest

from stagesim.core.clock import (
    Clock,
    ClockState,
    IllegalStateError,
    SimulationError,
    Temporal,
)


class Probe(Temporal):
    """Temporal that records every tick into a shared log."""

    def __init__(self, name, log):
        self.name = name
        self.log = log

    def tick(self, elapsed=1.0):
        super().tick(elapsed)
        self.log.append((self.name, elapsed))


class Faulty(Temporal):
    def tick(self, elapsed=1.0):
        super().tick(elapsed)
        raise SimulationError("stuck valve")


class Broken(Temporal):
    def tick(self, elapsed=1.0):
        raise ValueError("bad wiring")


class Stopper(Temporal):
    """Stops the clock on its n-th tick."""

    def __init__(self, clock, after):
        self.clock = clock
        self.after = after
        self.ticks = 0

    def tick(self, elapsed=1.0):
        self.ticks += 1
        if self.ticks == self.after:
            self.clock.stop()


class FakeTime:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestTemporal:
    def test_default_tick_is_noop(self):
        Temporal().tick(0.5)

    def test_tick_rejects_bad_elapsed(self):
        with pytest.raises(TypeError):
            Temporal().tick(None)
        with pytest.raises(ValueError):
            Temporal().tick(-1.0)

    def test_register_with_clock(self):
        clock = Clock(10)
        t = Temporal()
        t.register(clock)
        assert clock.temporals == (t,)

    def test_register_rejects_non_clock(self):
        with pytest.raises(TypeError):
            Temporal().register("clock")
        with pytest.raises(TypeError):
            Temporal().register(None)


class TestClockSetup:
    def test_rate_derived_values(self):
        clock = Clock(24)
        assert clock.rate == 24
        assert clock.interval == pytest.approx(1000 / 24)
        assert clock.elapsed == pytest.approx(1 / 24)
        assert clock.state is ClockState.STOPPED
        assert not clock.is_running

    @pytest.mark.parametrize("rate", [0, -5])
    def test_rejects_non_positive_rate(self, rate):
        with pytest.raises(ValueError):
            Clock(rate)

    def test_rejects_non_numeric_rate(self):
        with pytest.raises(TypeError):
            Clock(None)

    def test_register_rejects_non_temporal(self):
        clock = Clock(10)
        with pytest.raises(TypeError):
            clock.register(object())
        with pytest.raises(TypeError):
            clock.register(None)


class TestLifecycle:
    def test_start_stop(self):
        clock = Clock(10)
        clock.start()
        assert clock.is_running
        clock.stop()
        assert clock.state is ClockState.STOPPED

    def test_double_start(self):
        clock = Clock(10)
        clock.start()
        with pytest.raises(IllegalStateError):
            clock.start()

    def test_stop_when_stopped(self):
        clock = Clock(10)
        with pytest.raises(IllegalStateError):
            clock.stop()
        clock.start()
        clock.stop()
        with pytest.raises(IllegalStateError):
            clock.stop()


class TestDispatch:
    def test_registration_order(self):
        log = []
        clock = Clock(4)
        for name in ("a", "b", "c"):
            clock.register(Probe(name, log))
        clock.tick_once()
        clock.tick_once()
        assert [name for name, _ in log] == ["a", "b", "c", "a", "b", "c"]
        assert all(dt == pytest.approx(0.25) for _, dt in log)

    def test_counters(self):
        clock = Clock(4)
        result = clock.tick_once()
        assert result.index == 0
        assert result.ok
        clock.tick_once(1.0)
        assert clock.firings == 2
        assert clock.simulated_time == pytest.approx(1.25)

    def test_fault_does_not_stop_firing(self, caplog):
        log = []
        clock = Clock(10)
        faulty = Faulty()
        clock.register(faulty)
        clock.register(Probe("after", log))

        with caplog.at_level(logging.ERROR, logger="stagesim.core.clock"):
            first = clock.tick_once()
            second = clock.tick_once()

        assert len(log) == 2
        assert not first.ok
        assert first.faults[0].temporal is faulty
        assert "stuck valve" in str(first.faults[0].error)
        assert len(second.faults) == 1
        assert sum("stuck valve" in r.getMessage() for r in caplog.records) == 2

    def test_contract_violation_propagates(self):
        clock = Clock(10)
        clock.register(Broken())
        with pytest.raises(ValueError):
            clock.tick_once()


class TestRun:
    def test_run_firings(self):
        log = []
        clock = Clock(10)
        clock.register(Probe("p", log))
        results = clock.run(firings=5, realtime=False)
        assert len(results) == 5
        assert len(log) == 5
        assert clock.state is ClockState.STOPPED

    def test_run_duration(self):
        clock = Clock(24)
        results = clock.run(duration=1.0, realtime=False)
        assert len(results) == 24
        assert clock.simulated_time == pytest.approx(1.0)

    def test_realtime_pacing(self):
        fake = FakeTime()
        clock = Clock(10, monotonic=fake.monotonic, sleep=fake.sleep)
        clock.run(firings=3)
        assert fake.sleeps == pytest.approx([0.1, 0.1, 0.1])

    def test_no_sleep_when_behind_schedule(self):
        fake = FakeTime()

        class Slow(Temporal):
            def tick(self, elapsed=1.0):
                fake.now += 0.25

        clock = Clock(10, monotonic=fake.monotonic, sleep=fake.sleep)
        clock.register(Slow())
        clock.run(firings=3)
        # first firing waits one period, later ones are already late
        assert fake.sleeps == pytest.approx([0.1])

    def test_stop_from_temporal_finishes_firing(self):
        log = []
        clock = Clock(10)
        clock.register(Stopper(clock, after=2))
        clock.register(Probe("p", log))
        results = clock.run(firings=10, realtime=False)
        assert len(results) == 2
        assert len(log) == 2
        assert not clock.is_running

    def test_run_while_running(self):
        clock = Clock(10)
        clock.start()
        with pytest.raises(IllegalStateError):
            clock.run(firings=1, realtime=False)

    def test_stopped_after_interrupt(self):
        class Interrupt(Temporal):
            def tick(self, elapsed=1.0):
                raise KeyboardInterrupt

        clock = Clock(10)
        clock.register(Interrupt())
        with pytest.raises(KeyboardInterrupt):
            clock.run(firings=3, realtime=False)
        assert clock.state is ClockState.STOPPED
