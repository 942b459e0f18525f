"""Telemetry recording for StageSim.

:class:`Recorder` is a read-only consumer of engine and tank state, the
same snapshots a gauge display would draw. Register it on the clock after
the engines so that each sample reflects the firing just computed.
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np

from stagesim.core.clock import Temporal
from stagesim.core.engine import Engine
from stagesim.core.tank import Tank


class Recorder(Temporal):
    """Sample engine thrust and tank levels once per tick.

    Args:
        engines: Engines to watch, keyed by label.
        tanks: Tanks to watch, keyed by label.
    """

    def __init__(
        self,
        engines: Mapping[str, Engine] | None = None,
        tanks: Mapping[str, Tank] | None = None,
    ):
        self._engines = dict(engines or {})
        self._tanks = dict(tanks or {})
        for name, engine in self._engines.items():
            if not isinstance(engine, Engine):
                raise TypeError(f"'{name}' is not an Engine")
        for name, tank in self._tanks.items():
            if not isinstance(tank, Tank):
                raise TypeError(f"'{name}' is not a Tank")

        self._time: list[float] = []
        self._dt: list[float] = []
        self._engine_samples: dict[str, dict[str, list[float]]] = {
            name: {"thrust_level": [], "thrust": []} for name in self._engines
        }
        self._tank_samples: dict[str, dict[str, list[float]]] = {
            name: {"fraction_full": [], "level": []} for name in self._tanks
        }
        self._t = 0.0

    def __len__(self) -> int:
        return len(self._time)

    def tick(self, elapsed: float = 1.0) -> None:
        super().tick(elapsed)
        self._t += elapsed
        self._time.append(self._t)
        self._dt.append(float(elapsed))

        for name, engine in self._engines.items():
            samples = self._engine_samples[name]
            samples["thrust_level"].append(engine.thrust_level)
            samples["thrust"].append(engine.thrust)

        for name, tank in self._tanks.items():
            samples = self._tank_samples[name]
            samples["fraction_full"].append(tank.fraction_full)
            samples["level"].append(tank.level)

    def as_arrays(self) -> dict[str, np.ndarray]:
        """Return every recorded series as a flat dict of numpy arrays.

        Keys are ``"time"``, ``"engine.<name>.<field>"`` and
        ``"tank.<name>.<field>"``.
        """
        arrays: dict[str, np.ndarray] = {"time": np.asarray(self._time, dtype=float)}
        for name, samples in self._engine_samples.items():
            for key, values in samples.items():
                arrays[f"engine.{name}.{key}"] = np.asarray(values, dtype=float)
        for name, samples in self._tank_samples.items():
            for key, values in samples.items():
                arrays[f"tank.{name}.{key}"] = np.asarray(values, dtype=float)
        return arrays

    def summary(self) -> dict[str, Any]:
        """Per-engine peak thrust, total impulse and burn time; final tank state."""
        dt = np.asarray(self._dt, dtype=float)
        engines: dict[str, dict[str, float]] = {}
        for name, samples in self._engine_samples.items():
            thrust = np.asarray(samples["thrust"], dtype=float)
            burning = thrust > 0.0
            engines[name] = {
                "peak_thrust": float(thrust.max()) if thrust.size else 0.0,
                "total_impulse": float(np.sum(thrust * dt)),
                "burn_time": float(np.sum(dt[burning])),
                "final_thrust_level": samples["thrust_level"][-1] if thrust.size else 0.0,
            }

        tanks: dict[str, dict[str, float]] = {}
        for name, tank in self._tanks.items():
            tanks[name] = {
                "level": tank.level,
                "fraction_full": tank.fraction_full,
                "mass_capacity": tank.mass_capacity,
            }

        return {"samples": len(self), "duration": self._t, "engines": engines, "tanks": tanks}

    def __repr__(self) -> str:
        return f"Recorder({len(self._engines)} engines, {len(self._tanks)} tanks, {len(self)} samples)"
