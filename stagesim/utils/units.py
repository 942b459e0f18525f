"""Unit handling for StageSim.

Thin layer over pint used wherever user input (scenario files, CLI
options) may carry explicit units. The simulation core itself works in
fixed units: N, kg, kg/s, s and mL.
"""

from __future__ import annotations

import math
from numbers import Real

import pint

# Module-level unit registry (singleton)
_ureg = pint.UnitRegistry()

Q_ = _ureg.Quantity


def parse_quantity(value: float | int | str, unit: str) -> float:
    """Return *value* expressed in *unit*.

    Plain numbers are assumed to already be in *unit*. Strings are parsed
    by pint, so ``"7.77 MN"`` or ``"12000 L"`` are accepted as long as they
    are dimensionally compatible with *unit*.

    Raises:
        ValueError: If the value is not a number or string, cannot be
            parsed, has the wrong dimensionality, or is not finite.
    """
    if isinstance(value, str):
        try:
            quantity = Q_(value)
            if quantity.dimensionless:
                number = float(quantity.to("dimensionless").magnitude)
            else:
                number = float(quantity.to(unit).magnitude)
        except pint.errors.PintError as exc:
            raise ValueError(f"Cannot express '{value}' in {unit}: {exc}") from exc
    elif isinstance(value, Real) and not isinstance(value, bool):
        number = float(value)
    else:
        raise ValueError(f"Expected a number or quantity string in {unit}, got {value!r}")

    if not math.isfinite(number):
        raise ValueError(f"Quantity in {unit} must be finite, got {value!r}")
    return number
