"""Tests for the compound catalog."""

import dataclasses
import math

import pytest

from stagesim.core.compounds import (
    Compound,
    CompoundKind,
    catalog,
    fuels,
    get_compound,
    list_compounds,
    oxidizers,
)


class TestCompound:
    def test_basic(self):
        c = Compound("test fuel", CompoundKind.FUEL, 0.0008, -10.0, 200.0)
        assert c.is_fuel
        assert not c.is_oxidizer
        assert c.density == pytest.approx(0.0008)

    def test_immutable(self):
        c = Compound("test fuel", CompoundKind.FUEL, 0.0008)
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.density = 1.0

    def test_unknown_points_default_to_nan(self):
        c = Compound("test oxidizer", CompoundKind.OXIDIZER, 0.001)
        assert math.isnan(c.melting_point)
        assert math.isnan(c.boiling_point)

    def test_rejects_non_positive_density(self):
        with pytest.raises(ValueError):
            Compound("bad", CompoundKind.FUEL, 0.0)

    def test_rejects_non_numeric_density(self):
        with pytest.raises(TypeError):
            Compound("bad", CompoundKind.FUEL, "dense")

    def test_rejects_missing_boiling_point(self):
        with pytest.raises(TypeError):
            Compound("bad", CompoundKind.FUEL, 0.001, 0.0, None)

    def test_rejects_bad_kind(self):
        with pytest.raises(TypeError):
            Compound("bad", "fuel", 0.001)


class TestCatalog:
    def test_catalog_size(self):
        assert len(catalog()) == 9
        assert len(list_compounds(CompoundKind.FUEL)) == 7
        assert len(list_compounds(CompoundKind.OXIDIZER)) == 2

    def test_fuels_and_oxidizers_disjoint(self):
        assert not set(fuels()) & set(oxidizers())
        assert all(c.is_fuel for c in fuels().values())
        assert all(c.is_oxidizer for c in oxidizers().values())

    def test_rp1(self):
        rp1 = get_compound("RP-1")
        assert rp1.kind is CompoundKind.FUEL
        assert rp1.density == pytest.approx(0.000820)
        assert math.isnan(rp1.melting_point)
        assert rp1.boiling_point == pytest.approx(274.0)

    def test_liquid_oxygen(self):
        lox = get_compound("liquid oxygen")
        assert lox.kind is CompoundKind.OXIDIZER
        assert lox.density == pytest.approx(0.00114)
        assert lox.melting_point == pytest.approx(-218.8)

    def test_case_insensitive_and_aliases(self):
        assert get_compound("rp-1") is get_compound("RP-1")
        assert get_compound("LOX") is get_compound("liquid oxygen")
        assert get_compound("nto").name == "nitrogen tetroxide"
        assert get_compound("LH2").density == pytest.approx(0.000071)

    def test_unknown_compound(self):
        with pytest.raises(KeyError, match="not found"):
            get_compound("unobtainium")

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            catalog()["water"] = get_compound("RP-1")

    def test_catalog_is_shared(self):
        assert catalog() is catalog()
