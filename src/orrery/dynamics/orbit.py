"""
===============================================================================
ORRERY - Orbit Contract
===============================================================================
An orbit is an opaque, immutable function of time giving a position (km) and
velocity (km/day) in the coordinates of the reference frame it is attached to
by a timeline phase. Orbits may be shared by any number of phases and bodies.

The default velocity_at_time central-differences position_at_time, so a
subclass only has to provide positions; analytic models override it.
===============================================================================
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from orrery.core.config import get_settings
from orrery.core.constants import TWO_PI


class Orbit(ABC):
    """Abstract orbit: position and velocity relative to the orbit frame."""

    @abstractmethod
    def position_at_time(self, tdb: float) -> np.ndarray:
        """Position (km) in the orbit frame at tdb."""

    def velocity_at_time(self, tdb: float) -> np.ndarray:
        """
        Velocity (km/day) in the orbit frame at tdb.

        Central difference of position_at_time over settings.velocity_delta.
        """
        dt = get_settings().velocity_delta
        p0 = self.position_at_time(tdb - dt)
        p1 = self.position_at_time(tdb + dt)
        return (p1 - p0) / (2.0 * dt)

    @abstractmethod
    def bounding_radius(self) -> float:
        """Radius (km) of a sphere about the frame center enclosing the orbit."""

    def period(self) -> float:
        """Orbital period in days; 0.0 for aperiodic orbits."""
        return 0.0

    def is_periodic(self) -> bool:
        return self.period() > 0.0


class FixedOrbit(Orbit):
    """
    A body at rest at a fixed position in its orbit frame.

    Parameters
    ----------
    position : array_like
        3-element position (km).
    """

    def __init__(self, position) -> None:
        self._position = np.asarray(position, dtype=np.float64).copy()
        if self._position.shape != (3,):
            raise ValueError(f"position must have 3 elements, got {self._position.shape}")

    def position_at_time(self, tdb: float) -> np.ndarray:
        return self._position.copy()

    def velocity_at_time(self, tdb: float) -> np.ndarray:
        return np.zeros(3)

    def bounding_radius(self) -> float:
        return float(np.linalg.norm(self._position))

    def __repr__(self) -> str:
        return f"FixedOrbit(position={self._position.tolist()})"


class CircularOrbit(Orbit):
    """
    Uniform circular motion, used for synthetic systems and tests.

    The orbit lies in the plane perpendicular to ``normal`` (default +Z, the
    ecliptic plane of an ecliptic frame). At ``epoch`` the body sits at angle
    ``phase`` from the reference direction and advances counter-clockwise
    about the normal.

    Parameters
    ----------
    radius : float
        Orbit radius (km).
    period : float
        Orbital period (days). Negative periods give retrograde motion.
    epoch : float, optional
        Reference time (TDB Julian date).
    phase : float, optional
        Angle (rad) at epoch.
    normal : array_like, optional
        Orbit pole; the reference direction is the projection of +X (or +Y
        when the normal is parallel to X).
    """

    def __init__(self, radius: float, period: float, epoch: float = 0.0,
                 phase: float = 0.0, normal: Optional[np.ndarray] = None) -> None:
        if radius < 0.0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        if period == 0.0:
            raise ValueError("period must be non-zero")

        self._radius = float(radius)
        self._period = float(period)
        self._epoch = float(epoch)
        self._phase = float(phase)

        n = np.array([0.0, 0.0, 1.0]) if normal is None else np.asarray(normal, dtype=np.float64)
        n_norm = np.linalg.norm(n)
        if n_norm < 1e-12:
            raise ValueError("normal must be a non-zero vector")
        n = n / n_norm

        ref = np.array([1.0, 0.0, 0.0])
        if abs(np.dot(ref, n)) > 0.9:
            ref = np.array([0.0, 1.0, 0.0])
        u = ref - np.dot(ref, n) * n
        u /= np.linalg.norm(u)

        self._u = u
        self._v = np.cross(n, u)

    @property
    def mean_motion(self) -> float:
        """Angular rate (rad/day)."""
        return TWO_PI / self._period

    def _angle(self, tdb: float) -> float:
        return self._phase + self.mean_motion * (tdb - self._epoch)

    def position_at_time(self, tdb: float) -> np.ndarray:
        theta = self._angle(tdb)
        return self._radius * (np.cos(theta) * self._u + np.sin(theta) * self._v)

    def velocity_at_time(self, tdb: float) -> np.ndarray:
        theta = self._angle(tdb)
        speed = self._radius * self.mean_motion
        return speed * (-np.sin(theta) * self._u + np.cos(theta) * self._v)

    def bounding_radius(self) -> float:
        return self._radius

    def period(self) -> float:
        return abs(self._period)

    def __repr__(self) -> str:
        return (f"CircularOrbit(radius={self._radius:.3f} km, "
                f"period={self._period:.6f} d)")
