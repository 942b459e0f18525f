"""Propellant compound data.

A compound is immutable physical reference data tagged as either a fuel or
an oxidizer. The bundled catalog (``data/compounds.json``) is loaded once
and shared read-only across the process.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from stagesim.utils.validation import require_number, require_positive

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
_COMPOUND_DB_PATH = _DATA_DIR / "compounds.json"


class CompoundKind(Enum):
    """Role of a compound in a bipropellant mixture."""

    FUEL = "fuel"
    OXIDIZER = "oxidizer"


@dataclass(frozen=True)
class Compound:
    """A chemical compound used as one component of the propellant.

    Args:
        name: Catalog identifier, e.g. ``"RP-1"``.
        kind: Whether the compound is a fuel or an oxidizer.
        density: Density [kg/mL].
        melting_point: Melting point [°C], NaN when unknown.
        boiling_point: Boiling point [°C].
        formula: Chemical formula, informational only.
    """

    name: str
    kind: CompoundKind
    density: float  # kg/mL
    melting_point: float = math.nan  # °C
    boiling_point: float = math.nan  # °C
    formula: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.kind, CompoundKind):
            raise TypeError(f"Compound kind must be a CompoundKind, got {self.kind!r}")
        object.__setattr__(self, "density", require_positive("Compound density", self.density))
        object.__setattr__(
            self, "melting_point", require_number("Compound melting point", self.melting_point)
        )
        object.__setattr__(
            self, "boiling_point", require_number("Compound boiling point", self.boiling_point)
        )

    @property
    def is_fuel(self) -> bool:
        return self.kind is CompoundKind.FUEL

    @property
    def is_oxidizer(self) -> bool:
        return self.kind is CompoundKind.OXIDIZER

    def __str__(self) -> str:
        return self.name


def _compound_from_record(name: str, record: dict[str, Any]) -> Compound:
    melting = record.get("melting_point")
    boiling = record.get("boiling_point")
    return Compound(
        name=name,
        kind=CompoundKind(record["kind"]),
        density=record["density"],
        melting_point=math.nan if melting is None else melting,
        boiling_point=math.nan if boiling is None else boiling,
        formula=record.get("formula", ""),
    )


@lru_cache(maxsize=1)
def _load_compound_db() -> tuple[Mapping[str, Compound], Mapping[str, str]]:
    """Load the catalog and its alias table from the bundled JSON file."""
    if not _COMPOUND_DB_PATH.exists():
        logger.warning("Compound catalog not found at %s", _COMPOUND_DB_PATH)
        return MappingProxyType({}), MappingProxyType({})
    with open(_COMPOUND_DB_PATH) as f:
        raw = json.load(f)

    compounds: dict[str, Compound] = {}
    aliases: dict[str, str] = {}
    for name, record in raw.items():
        compounds[name] = _compound_from_record(name, record)
        aliases[name.lower()] = name
        for alias in record.get("aliases", []):
            aliases[alias.lower()] = name
    logger.debug("Loaded %d compounds from %s", len(compounds), _COMPOUND_DB_PATH)
    return MappingProxyType(compounds), MappingProxyType(aliases)


def catalog() -> Mapping[str, Compound]:
    """Return the read-only compound catalog keyed by name."""
    return _load_compound_db()[0]


def list_compounds(kind: CompoundKind | None = None) -> list[str]:
    """Return catalog names, optionally restricted to one kind."""
    return [name for name, c in catalog().items() if kind is None or c.kind is kind]


def get_compound(name: str) -> Compound:
    """Look up a compound by name or alias (case-insensitive).

    Raises:
        KeyError: If the compound is not in the catalog.
    """
    compounds, aliases = _load_compound_db()
    key = aliases.get(name.strip().lower())
    if key is None:
        raise KeyError(f"Compound '{name}' not found. Available: {list(compounds.keys())}")
    return compounds[key]


def fuels() -> Mapping[str, Compound]:
    """Catalog entries tagged as fuels."""
    return MappingProxyType({n: c for n, c in catalog().items() if c.is_fuel})


def oxidizers() -> Mapping[str, Compound]:
    """Catalog entries tagged as oxidizers."""
    return MappingProxyType({n: c for n, c in catalog().items() if c.is_oxidizer})
