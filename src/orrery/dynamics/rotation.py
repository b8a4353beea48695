"""
===============================================================================
ORRERY - Rotation Model Contract
===============================================================================
A rotation model gives a body's orientation relative to its body frame as a
function of time, split into two factors:

    equator_orientation_at_time(t)  -- body frame -> mean equator
    spin(t)                         -- mean equator -> body fixed
    orientation_at_time(t)          = spin(t) * equator_orientation_at_time(t)

The body-fixed axes follow the IAU planetographic convention: +Z is the
rotation axis (north pole) and +X passes through the prime meridian.

angular_velocity_at_time(t) is expressed in body-frame axes (rad/day). The
default differentiates orientation_at_time numerically; analytic models
override it.
===============================================================================
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from orrery.core.config import get_settings
from orrery.core.constants import TWO_PI
from orrery.core.quaternion import Quaternion


class RotationModel(ABC):
    """Abstract rotation model."""

    @abstractmethod
    def spin(self, tdb: float) -> Quaternion:
        """Rotation from the mean equator to the body-fixed axes."""

    def equator_orientation_at_time(self, tdb: float) -> Quaternion:
        """Rotation from the body frame to the mean equator."""
        return Quaternion.identity()

    def orientation_at_time(self, tdb: float) -> Quaternion:
        return self.spin(tdb) * self.equator_orientation_at_time(tdb)

    def angular_velocity_at_time(self, tdb: float) -> np.ndarray:
        """
        Angular velocity (rad/day) in body-frame axes.

        Finite difference of orientation_at_time over
        settings.angular_velocity_delta.
        """
        dt = get_settings().angular_velocity_delta
        q0 = self.orientation_at_time(tdb)
        q1 = self.orientation_at_time(tdb + dt)
        return q0.angular_velocity_to(q1, dt)

    def period(self) -> float:
        """Rotation period in days; 0.0 when not periodic."""
        return 0.0

    def is_periodic(self) -> bool:
        return self.period() > 0.0


class ConstantOrientation(RotationModel):
    """
    A body that never rotates relative to its body frame.

    Parameters
    ----------
    orientation : Quaternion, optional
        Fixed body-frame -> body-fixed rotation. Identity by default.
    """

    def __init__(self, orientation: Optional[Quaternion] = None) -> None:
        self._orientation = orientation if orientation is not None else Quaternion.identity()

    def spin(self, tdb: float) -> Quaternion:
        return self._orientation

    def angular_velocity_at_time(self, tdb: float) -> np.ndarray:
        return np.zeros(3)


class UniformRotationModel(RotationModel):
    """
    Constant-rate rotation about a fixed pole.

    Parameters
    ----------
    period : float
        Sidereal rotation period (days).
    offset : float, optional
        Meridian angle (rad) at epoch.
    epoch : float, optional
        Reference time (TDB Julian date).
    inclination : float, optional
        Tilt of the equator relative to the body frame's XY plane (rad).
    ascending_node : float, optional
        Longitude of the equator's ascending node (rad).
    """

    def __init__(self, period: float, offset: float = 0.0, epoch: float = 0.0,
                 inclination: float = 0.0, ascending_node: float = 0.0) -> None:
        if period <= 0.0:
            raise ValueError(f"Rotation period must be positive, got {period}")
        self._period = float(period)
        self._offset = float(offset)
        self._epoch = float(epoch)
        self._equator = (Quaternion.x_rotation(-inclination)
                         * Quaternion.z_rotation(-ascending_node))

    def meridian_angle(self, tdb: float) -> float:
        """Prime meridian angle (rad) in [0, 2*pi) plus the offset."""
        rotations = (tdb - self._epoch) / self._period
        return (rotations - np.floor(rotations)) * TWO_PI + self._offset

    def spin(self, tdb: float) -> Quaternion:
        return Quaternion.z_rotation(-self.meridian_angle(tdb))

    def equator_orientation_at_time(self, tdb: float) -> Quaternion:
        return self._equator

    def angular_velocity_at_time(self, tdb: float) -> np.ndarray:
        v = np.array([0.0, 0.0, TWO_PI / self._period])
        return self._equator.conjugate().rotate_vector(v)

    def period(self) -> float:
        return self._period
