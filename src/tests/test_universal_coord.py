"""
Tests for fixed-point universal coordinates.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from orrery.core.constants import KM_PER_LY
from orrery.core.universal_coord import UniversalCoord


@pytest.fixture
def far_coord():
    """A position ~1e13 km from the origin."""
    return UniversalCoord.from_km([1.0e13, -2.0e13, 5.0e12])


class TestPrecision:

    def test_offset_round_trip_at_interstellar_distance(self, far_coord):
        """A 1e9 km offset survives offset + difference with sub-meter error."""
        offset = np.array([1.234567891234e9, -9.87654321e8, 3.3e7 + 0.000123])
        moved = far_coord.offset_km(offset)
        assert_allclose(moved.offset_from_km(far_coord), offset, rtol=0.0, atol=1e-6)

    def test_small_offset_not_absorbed(self, far_coord):
        """A one-meter step on top of 1e13 km is still visible."""
        moved = far_coord.offset_km(np.array([0.001, 0.0, 0.0]))
        assert_allclose(moved.offset_from_km(far_coord), [0.001, 0.0, 0.0], atol=1e-9)
        assert moved != far_coord

    def test_repeated_offsets_are_exact(self, far_coord):
        step = np.array([0.5, 0.25, -0.125])
        c = far_coord
        for _ in range(1000):
            c = c.offset_km(step)
        assert_allclose(c.offset_from_km(far_coord), step * 1000, atol=1e-9)


class TestConversions:

    def test_zero(self):
        assert UniversalCoord.zero().fixed == (0, 0, 0)

    def test_from_km_to_km(self):
        assert_allclose(UniversalCoord.from_km([1.5, -2.0, 3.25]).to_km(),
                        [1.5, -2.0, 3.25], atol=1e-12)

    def test_from_light_years(self):
        c = UniversalCoord.from_light_years([1.0, 0.0, 0.0])
        assert_allclose(c.to_km(), [KM_PER_LY, 0.0, 0.0], rtol=1e-15)
        assert_allclose(c.to_light_years(), [1.0, 0.0, 0.0], rtol=1e-15)

    def test_distance(self):
        a = UniversalCoord.from_km([0.0, 0.0, 0.0])
        b = UniversalCoord.from_km([3.0, 4.0, 0.0])
        assert_allclose(a.distance_from_km(b), 5.0, atol=1e-12)


class TestArithmetic:

    def test_difference_exact(self, far_coord):
        other = UniversalCoord.from_km([1.0, 2.0, 3.0])
        assert (far_coord - other) + other == far_coord

    def test_difference_matches_offset_from(self, far_coord):
        other = far_coord.offset_km(np.array([10.0, 20.0, 30.0]))
        assert_allclose(other.difference(far_coord).to_km(), [10.0, 20.0, 30.0], atol=1e-12)

    def test_hash_consistent_with_equality(self):
        a = UniversalCoord.from_km([1.0, 2.0, 3.0])
        b = UniversalCoord.from_km([1.0, 2.0, 3.0])
        assert a == b
        assert len({a, b}) == 1
