"""Time-stepping for StageSim.

Anything that changes over simulated time implements :class:`Temporal`.
A :class:`Clock` owns an ordered list of temporals and, on each firing,
advances every one of them by the same fixed quantum ``1 / rate`` seconds.

Scheduling is single-threaded and cooperative: a firing runs to
completion before the next one starts, and temporals are ticked in
registration order, so state written by an earlier temporal (e.g. a tank
drained by the first engine) is visible to later ones in the same firing.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from stagesim.utils.constants import MS_PER_S
from stagesim.utils.validation import require_finite, require_positive

logger = logging.getLogger(__name__)


class SimulationError(Exception):
    """Operational fault raised by a temporal during a tick.

    The clock reports these and carries on; anything else escaping a tick
    is treated as a programming error and propagates.
    """


class IllegalStateError(RuntimeError):
    """Raised when the clock is started twice or stopped while stopped."""


class Temporal:
    """Base class of all objects that depend on time."""

    def register(self, clock: Clock) -> None:
        """Register this object with *clock*."""
        if clock is None:
            raise TypeError("Clock cannot be None")
        if not isinstance(clock, Clock):
            raise TypeError(f"Invalid type of clock: {type(clock).__name__}")
        clock.register(self)

    def tick(self, elapsed: float = 1.0) -> None:
        """Signal that *elapsed* seconds of simulated time have passed.

        Subclasses override this and call ``super().tick(elapsed)`` first
        to validate the argument.
        """
        elapsed = require_finite("Elapsed time", elapsed)
        if elapsed < 0:
            raise ValueError(f"Elapsed time cannot be negative, got {elapsed}")


class ClockState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class TickFault:
    """A fault raised by one temporal during one firing."""

    temporal: Temporal
    error: SimulationError


@dataclass
class FiringResult:
    """Outcome of a single clock firing."""

    index: int
    elapsed: float  # s
    faults: list[TickFault] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.faults


class Clock:
    """Cooperative scheduler that ticks registered temporals at a fixed rate.

    Args:
        rate: Firings per second.
        monotonic: Time source for the real-time driver [s].
        sleep: Sleep function for the real-time driver [s].
    """

    def __init__(
        self,
        rate: float,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._rate = require_positive("Clock tick rate", rate)
        self._interval = MS_PER_S / self._rate  # ms
        self._elapsed = 1.0 / self._rate  # s
        self._monotonic = monotonic
        self._sleep = sleep
        self._temporals: list[Temporal] = []
        self._state = ClockState.STOPPED
        self._firings = 0
        self._simulated_time = 0.0  # s

    @property
    def rate(self) -> float:
        """Firings per second."""
        return self._rate

    @property
    def interval(self) -> float:
        """Time between firings [ms]."""
        return self._interval

    @property
    def elapsed(self) -> float:
        """Simulated time passed to temporals on each firing [s]."""
        return self._elapsed

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ClockState.RUNNING

    @property
    def temporals(self) -> tuple[Temporal, ...]:
        return tuple(self._temporals)

    @property
    def firings(self) -> int:
        """Number of firings dispatched so far."""
        return self._firings

    @property
    def simulated_time(self) -> float:
        """Total simulated time dispatched so far [s]."""
        return self._simulated_time

    def register(self, temporal: Temporal) -> None:
        """Append *temporal* to the tick order."""
        if temporal is None:
            raise TypeError("Temporal object cannot be None")
        if not isinstance(temporal, Temporal):
            raise TypeError(f"Invalid type of temporal object: {type(temporal).__name__}")
        self._temporals.append(temporal)
        logger.debug("Registered %r (position %d)", temporal, len(self._temporals))

    # --- Lifecycle ---

    def start(self) -> None:
        """Move to RUNNING.

        Raises:
            IllegalStateError: If the clock is already running.
        """
        if self._state is ClockState.RUNNING:
            raise IllegalStateError("Clock is already running")
        self._state = ClockState.RUNNING
        logger.info("Clock started at %.3g Hz (%d temporals)", self._rate, len(self._temporals))

    def stop(self) -> None:
        """Move to STOPPED. A firing in progress still completes.

        Raises:
            IllegalStateError: If the clock is not running.
        """
        if self._state is not ClockState.RUNNING:
            raise IllegalStateError("Clock is not running")
        self._state = ClockState.STOPPED
        logger.info("Clock stopped after %d firings", self._firings)

    # --- Dispatch ---

    def tick_once(self, elapsed: float | None = None) -> FiringResult:
        """Dispatch one firing to every temporal, in registration order.

        Works whether or not the clock is running, which makes it the
        deterministic entry point for tests and batch runs.

        Args:
            elapsed: Simulated seconds for this firing; defaults to the
                clock quantum ``1 / rate``.
        """
        dt = self._elapsed if elapsed is None else require_finite("Elapsed time", elapsed)
        result = FiringResult(index=self._firings, elapsed=dt)

        for temporal in self._temporals:
            try:
                temporal.tick(dt)
            except SimulationError as exc:
                logger.error("Tick %d failed for %r: %s", result.index, temporal, exc)
                result.faults.append(TickFault(temporal=temporal, error=exc))

        self._firings += 1
        self._simulated_time += dt
        return result

    def run(
        self,
        firings: int | None = None,
        duration: float | None = None,
        realtime: bool = True,
    ) -> list[FiringResult]:
        """Real-time driver: start the clock and fire on a fixed period.

        Firing *n* (counting from 1) is scheduled at ``t0 + n * interval``
        so that sleeping jitter does not accumulate. The loop ends when
        *firings* have been dispatched or *duration* simulated seconds
        have elapsed, or when a temporal calls :meth:`stop`. The clock is
        STOPPED on return.

        Args:
            firings: Maximum number of firings, or None for no limit.
            duration: Maximum simulated time [s], or None for no limit.
            realtime: If False, fire back-to-back without sleeping.

        Returns:
            Results of every firing dispatched by this call.
        """
        limit = firings
        if duration is not None:
            by_duration = round(require_finite("Duration", duration) * self._rate)
            limit = by_duration if limit is None else min(limit, by_duration)

        self.start()
        results: list[FiringResult] = []
        period = self._interval / MS_PER_S
        t0 = self._monotonic()
        try:
            while self.is_running and (limit is None or len(results) < limit):
                if realtime:
                    delay = t0 + (len(results) + 1) * period - self._monotonic()
                    if delay > 0:
                        self._sleep(delay)
                results.append(self.tick_once())
        finally:
            if self.is_running:
                self.stop()
        return results

    def __repr__(self) -> str:
        return f"Clock(rate={self._rate:g}, state={self._state.value}, firings={self._firings})"
