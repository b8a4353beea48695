"""
===============================================================================
ORRERY - Universal Coordinates
===============================================================================
High-precision absolute positions.

Absolute positions span interstellar distances (~1e13 km and beyond) while
the offsets composed inside a planetary system are ~1e6 - 1e9 km. A single
float64 carries ~16 significant digits, so a naive sum near 1e13 km keeps
only millimeter-to-meter resolution and loses it entirely once positions are
subtracted again to recover relative vectors.

UniversalCoord therefore stores each axis as a fixed-point integer count of
micrometers (UNIVERSAL_UNITS_PER_KM per km). Python integers are unbounded,
so addition and subtraction are exact; only the conversion of a float offset
into fixed point rounds, and that rounding is relative to the offset, not to
the absolute coordinate.

Typical use:

    star_pos = star.get_position(tdb)              # UniversalCoord
    body_pos = star_pos.offset_km(offset_vector)   # exact integer add
    rel = body_pos.offset_from_km(other_pos)       # exact diff -> float km
===============================================================================
"""

from typing import Iterable, Tuple

import numpy as np

from orrery.core.constants import KM_PER_LY, UNIVERSAL_UNITS_PER_KM


def _to_fixed(value_km: float) -> int:
    return int(round(float(value_km) * UNIVERSAL_UNITS_PER_KM))


class UniversalCoord:
    """
    Absolute 3D position in fixed-point micrometers.

    Parameters
    ----------
    x, y, z : int
        Axis values in micrometers (1e-9 km). Use the from_km / from_light_years
        factories to build coordinates from floating-point values.
    """

    __slots__ = ("_x", "_y", "_z")

    def __init__(self, x: int = 0, y: int = 0, z: int = 0) -> None:
        self._x = int(x)
        self._y = int(y)
        self._z = int(z)

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @staticmethod
    def zero() -> 'UniversalCoord':
        """The universal origin."""
        return UniversalCoord(0, 0, 0)

    @staticmethod
    def from_km(v: Iterable[float]) -> 'UniversalCoord':
        """Build from a 3-vector in kilometers."""
        x, y, z = v
        return UniversalCoord(_to_fixed(x), _to_fixed(y), _to_fixed(z))

    @staticmethod
    def from_light_years(v: Iterable[float]) -> 'UniversalCoord':
        """Build from a 3-vector in light years."""
        x, y, z = v
        return UniversalCoord(
            _to_fixed(x * KM_PER_LY),
            _to_fixed(y * KM_PER_LY),
            _to_fixed(z * KM_PER_LY),
        )

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def fixed(self) -> Tuple[int, int, int]:
        """Raw fixed-point components (micrometers)."""
        return (self._x, self._y, self._z)

    def to_km(self) -> np.ndarray:
        """
        Lossy conversion to a float64 vector in kilometers.

        Only appropriate for display or when the coordinate is known to be
        small; use offset_from_km for relative vectors.
        """
        return np.array([self._x, self._y, self._z], dtype=np.float64) / UNIVERSAL_UNITS_PER_KM

    def to_light_years(self) -> np.ndarray:
        return self.to_km() / KM_PER_LY

    # =========================================================================
    # ARITHMETIC
    # =========================================================================

    def offset_km(self, v: np.ndarray) -> 'UniversalCoord':
        """
        Return this coordinate displaced by a vector in kilometers.

        Parameters
        ----------
        v : np.ndarray
            3-element offset (km).
        """
        dx, dy, dz = v
        return UniversalCoord(
            self._x + _to_fixed(dx),
            self._y + _to_fixed(dy),
            self._z + _to_fixed(dz),
        )

    def offset_from_km(self, other: 'UniversalCoord') -> np.ndarray:
        """
        Vector from other to self in kilometers.

        The integer difference is exact; precision is lost only when the
        (small) result is converted to float64.
        """
        return np.array(
            [self._x - other._x, self._y - other._y, self._z - other._z],
            dtype=np.float64,
        ) / UNIVERSAL_UNITS_PER_KM

    def distance_from_km(self, other: 'UniversalCoord') -> float:
        """Euclidean distance to other in kilometers."""
        return float(np.linalg.norm(self.offset_from_km(other)))

    def difference(self, other: 'UniversalCoord') -> 'UniversalCoord':
        """Exact difference self - other as a UniversalCoord."""
        return UniversalCoord(self._x - other._x, self._y - other._y, self._z - other._z)

    def __add__(self, other: 'UniversalCoord') -> 'UniversalCoord':
        if not isinstance(other, UniversalCoord):
            return NotImplemented
        return UniversalCoord(self._x + other._x, self._y + other._y, self._z + other._z)

    def __sub__(self, other: 'UniversalCoord') -> 'UniversalCoord':
        if not isinstance(other, UniversalCoord):
            return NotImplemented
        return self.difference(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniversalCoord):
            return NotImplemented
        return self.fixed == other.fixed

    def __hash__(self) -> int:
        return hash(self.fixed)

    def __repr__(self) -> str:
        x, y, z = self.to_km()
        return f"UniversalCoord(x={x:.6f} km, y={y:.6f} km, z={z:.6f} km)"
