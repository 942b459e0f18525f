"""Utility modules for StageSim."""

from stagesim.utils.constants import G_0
from stagesim.utils.units import parse_quantity

__all__ = ["G_0", "parse_quantity"]
