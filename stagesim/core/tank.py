"""Propellant tank model.

A tank is a depletable reservoir of a single compound. Its level is kept
in kilograms and clamped to ``[0, mass_capacity]`` on every transfer.
Fills and drains never fail for asking too much: they move what they can
and return the amount actually transferred, which is how engines detect
propellant starvation.
"""

from __future__ import annotations

from stagesim.core.compounds import Compound
from stagesim.utils.validation import require_finite, require_positive


class Tank:
    """A tank with propellant.

    Args:
        compound: Propellant compound held by the tank.
        capacity: Tank capacity [mL].
    """

    def __init__(self, compound: Compound, capacity: float):
        if compound is None:
            raise TypeError("Propellant compound cannot be None")
        if not isinstance(compound, Compound):
            raise TypeError(f"Invalid compound type: {type(compound).__name__}")

        self._compound = compound
        self._volume_capacity = require_positive("Tank capacity", capacity)
        self._mass_capacity = self._volume_capacity * compound.density
        self._level = 0.0  # kg

    @classmethod
    def full(cls, compound: Compound, capacity: float) -> Tank:
        """Create a tank filled to capacity."""
        tank = cls(compound, capacity)
        tank.fill_mass(tank.mass_capacity)
        return tank

    # --- Read-only state ---

    @property
    def compound(self) -> Compound:
        return self._compound

    @property
    def volume_capacity(self) -> float:
        """Capacity [mL]."""
        return self._volume_capacity

    @property
    def mass_capacity(self) -> float:
        """Capacity [kg]."""
        return self._mass_capacity

    @property
    def level(self) -> float:
        """Current contents [kg]."""
        return self._level

    @property
    def volume_level(self) -> float:
        """Current contents [mL]."""
        return self._level / self._compound.density

    @property
    def fraction_full(self) -> float:
        """Current contents as a fraction of capacity, 0 = empty, 1 = full."""
        return self._level / self._mass_capacity

    @property
    def empty(self) -> bool:
        return self._level <= 0.0

    # --- Transfers ---

    def fill_mass(self, mass: float) -> float:
        """Add up to *mass* [kg]; return the mass actually added."""
        mass = max(require_finite("Compound mass", mass), 0.0)
        added = min(self._mass_capacity - self._level, mass)
        self._level = min(self._level + added, self._mass_capacity)
        return added

    def fill_volume(self, volume: float) -> float:
        """Add up to *volume* [mL]; return the volume actually added."""
        volume = max(require_finite("Compound volume", volume), 0.0)
        return self.fill_mass(volume * self._compound.density) / self._compound.density

    def drain_mass(self, mass: float) -> float:
        """Remove up to *mass* [kg]; return the mass actually removed."""
        mass = max(require_finite("Compound mass", mass), 0.0)
        drained = min(self._level, mass)
        self._level = max(self._level - drained, 0.0)
        return drained

    def drain_volume(self, volume: float) -> float:
        """Remove up to *volume* [mL]; return the volume actually removed."""
        volume = max(require_finite("Compound volume", volume), 0.0)
        return self.drain_mass(volume * self._compound.density) / self._compound.density

    def __repr__(self) -> str:
        return (
            f"Tank('{self._compound.name}', {self._level:.3f}/{self._mass_capacity:.3f} kg)"
        )
