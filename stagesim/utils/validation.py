"""Contract checks and design-rule validation for StageSim.

Two layers live here:

* ``require_*`` helpers enforce call contracts on the simulation core.
  They raise immediately (``TypeError`` / ``ValueError``) and are never
  caught inside the library.
* ``ValidationResult`` collects design-rule findings for a scenario before
  it is built, so that every problem can be reported at once.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any


# --- Call contracts ---


def require_number(name: str, value: Any) -> float:
    """Return *value* as a float, rejecting None, bools and non-numbers."""
    if value is None:
        raise TypeError(f"{name} cannot be None")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")
    return float(value)


def require_finite(name: str, value: Any) -> float:
    """Like :func:`require_number` but also rejects NaN and infinities."""
    number = require_number(name, value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {number}")
    return number


def require_positive(name: str, value: Any) -> float:
    """Require a finite, strictly positive number."""
    number = require_finite(name, value)
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


def require_fraction(name: str, value: Any) -> float:
    """Require a finite number within [0, 1]."""
    number = require_finite(name, value)
    if number < 0.0 or number > 1.0:
        raise ValueError(f"{name} must be a value between 0 and 1, got {number}")
    return number


def require_bool(name: str, value: Any) -> bool:
    """Require a real ``bool`` (ints are rejected)."""
    if value is None:
        raise TypeError(f"{name} cannot be None")
    if not isinstance(value, bool):
        raise TypeError(f"{name} must be a bool, got {type(value).__name__}")
    return value


# --- Design-rule findings ---


class Severity(Enum):
    """Severity level for validation messages."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationMessage:
    """A single validation finding."""

    severity: Severity
    parameter: str
    message: str
    value: Any = None
    limit: Any = None


@dataclass
class ValidationResult:
    """Aggregated validation result."""

    messages: list[ValidationMessage] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(m.severity == Severity.ERROR for m in self.messages)

    @property
    def has_warnings(self) -> bool:
        return any(m.severity == Severity.WARNING for m in self.messages)

    @property
    def errors(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.WARNING]

    def add(self, severity: Severity, parameter: str, message: str, **kwargs: Any) -> None:
        self.messages.append(
            ValidationMessage(severity=severity, parameter=parameter, message=message, **kwargs)
        )

    def error(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.ERROR, parameter, message, **kwargs)

    def warning(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.WARNING, parameter, message, **kwargs)

    def info(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.INFO, parameter, message, **kwargs)

    def merge(self, other: ValidationResult) -> None:
        self.messages.extend(other.messages)


def validate_positive(name: str, value: float, result: ValidationResult) -> None:
    """Validate that a value is strictly positive."""
    if value <= 0:
        result.error(name, f"{name} must be positive, got {value}", value=value)


def validate_range(
    name: str,
    value: float,
    low: float,
    high: float,
    result: ValidationResult,
    severity: Severity = Severity.ERROR,
) -> None:
    """Validate that a value falls within [low, high]."""
    if value < low or value > high:
        result.add(
            severity, name, f"{name} = {value} is outside [{low}, {high}]",
            value=value, limit=(low, high),
        )
