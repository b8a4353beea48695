"""
===============================================================================
ORRERY - Reference Frames
===============================================================================
A reference frame supplies, for any instant, its orientation relative to the
universal frame (the J2000 ecliptic), its angular velocity and its center.

    orientation(t)        q such that v_frame = q.rotate_vector(v_universal)
    angular_velocity(t)   rad/day, universal axes
    center                Selection (body, star or barycenter)

A frame resolves its own rotational ancestry (a body-fixed frame asks the
body for its full orientation). It never resolves translation; composing
orbit offsets up the center chain is the body's job.

Frames are immutable after construction and may be shared by any number of
timeline phases and bodies.

Concrete frames:
    J2000EclipticFrame    identity orientation, inertial
    J2000EquatorFrame     Earth mean equator of J2000, inertial
    BodyFixedFrame        follows the full orientation of a body or star
    BodyMeanEquatorFrame  follows the mean equator of a body, optionally
                          frozen at an epoch
===============================================================================
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import numpy as np

from orrery.core.config import get_settings
from orrery.core.constants import J2000_OBLIQUITY
from orrery.core.quaternion import Quaternion
from orrery.core.universal_coord import UniversalCoord
from orrery.frames.selection import Selection


def _as_selection(obj: Any) -> Selection:
    if isinstance(obj, Selection):
        return obj
    return Selection(obj)


class ReferenceFrame(ABC):
    """
    Abstract reference frame.

    Parameters
    ----------
    center : Selection, Body, Star or Barycenter
        Origin of the frame. Raw objects are wrapped in a Selection.
    """

    def __init__(self, center: Any) -> None:
        self._center = _as_selection(center)

    @property
    def center(self) -> Selection:
        return self._center

    @abstractmethod
    def orientation(self, tdb: float) -> Quaternion:
        """Rotation from universal axes to this frame's axes."""

    @abstractmethod
    def is_inertial(self) -> bool:
        """True when the frame has zero angular velocity for all time."""

    def angular_velocity(self, tdb: float) -> np.ndarray:
        """
        Angular velocity of the frame (rad/day) in universal axes.

        Inertial frames return zero. Other frames are differentiated
        numerically over settings.angular_velocity_delta unless they
        override this method.
        """
        return self._differentiate_orientation(tdb, 0)

    # Resolution hooks used by bodies. depth counts the frame centers and
    # followed objects visited so far; frames that follow another object
    # pass it on so that cycles end in FrameGraphError.

    def _orientation(self, tdb: float, depth: int) -> Quaternion:
        return self.orientation(tdb)

    def _angular_velocity(self, tdb: float, depth: int) -> np.ndarray:
        return self.angular_velocity(tdb)

    def _differentiate_orientation(self, tdb: float, depth: int) -> np.ndarray:
        if self.is_inertial():
            return np.zeros(3)
        dt = get_settings().angular_velocity_delta
        q0 = self._orientation(tdb, depth)
        q1 = self._orientation(tdb + dt, depth)
        return q0.angular_velocity_to(q1, dt)

    def followed_object(self) -> Selection:
        """Object whose orientation this frame tracks; empty for fixed frames."""
        return Selection()

    # =========================================================================
    # CONVERSIONS
    # =========================================================================

    def convert_to_astrocentric(self, p: np.ndarray, tdb: float) -> np.ndarray:
        """
        Convert a frame-local position (km) to a position relative to the
        star or barycenter at the root of the frame's center chain.
        """
        local = self.orientation(tdb).conjugate().rotate_vector(p)
        body = self._center.body
        if body is not None:
            return body.get_astrocentric_position(tdb) + local
        return local

    def convert_to_universal(self, p: np.ndarray, tdb: float) -> UniversalCoord:
        """Convert a frame-local position (km) to universal coordinates."""
        local = self.orientation(tdb).conjugate().rotate_vector(p)
        return self._center.get_position(tdb).offset_km(local)

    def convert_from_universal(self, uc: UniversalCoord, tdb: float) -> np.ndarray:
        """Convert universal coordinates to a frame-local position (km)."""
        rel = uc.offset_from_km(self._center.get_position(tdb))
        return self.orientation(tdb).rotate_vector(rel)

    def convert_orientation_to_universal(self, q: Quaternion, tdb: float) -> Quaternion:
        """Turn a frame-relative orientation into a universal one."""
        return q * self.orientation(tdb)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(center={self._center!r})"


class J2000EclipticFrame(ReferenceFrame):
    """The universal axes, translated to a center."""

    def orientation(self, tdb: float) -> Quaternion:
        return Quaternion.identity()

    def is_inertial(self) -> bool:
        return True


class J2000EquatorFrame(ReferenceFrame):
    """Earth mean equator and equinox of J2000."""

    _ORIENTATION = Quaternion.x_rotation(J2000_OBLIQUITY)

    def orientation(self, tdb: float) -> Quaternion:
        return self._ORIENTATION

    def is_inertial(self) -> bool:
        return True


class BodyFixedFrame(ReferenceFrame):
    """
    Frame rotating with a body (or star).

    Parameters
    ----------
    center : Selection or object
        Frame origin.
    fix_object : Selection or object
        Object whose full orientation the frame follows; usually the center.
    """

    def __init__(self, center: Any, fix_object: Any) -> None:
        super().__init__(center)
        self._fix_object = _as_selection(fix_object)
        if self._fix_object.is_empty():
            raise ValueError("BodyFixedFrame needs an object to follow")

    def followed_object(self) -> Selection:
        return self._fix_object

    def orientation(self, tdb: float) -> Quaternion:
        return self._orientation(tdb, 0)

    def angular_velocity(self, tdb: float) -> np.ndarray:
        return self._angular_velocity(tdb, 0)

    def _orientation(self, tdb: float, depth: int) -> Quaternion:
        return self._fix_object._referent()._orientation(tdb, depth + 1)

    def _angular_velocity(self, tdb: float, depth: int) -> np.ndarray:
        return self._fix_object._referent()._angular_velocity(tdb, depth + 1)

    def is_inertial(self) -> bool:
        return False


class BodyMeanEquatorFrame(ReferenceFrame):
    """
    Frame aligned with a body's mean equator, without its spin.

    Parameters
    ----------
    center : Selection or object
        Frame origin.
    equator_object : Selection or object
        Body or star whose equator defines the frame.
    freeze_epoch : float, optional
        When given, the equator is evaluated once at this epoch and the
        frame is inertial.
    """

    def __init__(self, center: Any, equator_object: Any,
                 freeze_epoch: Optional[float] = None) -> None:
        super().__init__(center)
        self._equator_object = _as_selection(equator_object)
        if self._equator_object.is_empty():
            raise ValueError("BodyMeanEquatorFrame needs an equator object")
        self._freeze_epoch = freeze_epoch

    @property
    def freeze_epoch(self) -> Optional[float]:
        return self._freeze_epoch

    def followed_object(self) -> Selection:
        return self._equator_object

    def orientation(self, tdb: float) -> Quaternion:
        return self._orientation(tdb, 0)

    def _orientation(self, tdb: float, depth: int) -> Quaternion:
        t = self._freeze_epoch if self._freeze_epoch is not None else tdb
        obj = self._equator_object._referent()
        return obj._ecliptic_to_equatorial(t, depth + 1)

    def _angular_velocity(self, tdb: float, depth: int) -> np.ndarray:
        return self._differentiate_orientation(tdb, depth)

    def is_inertial(self) -> bool:
        return self._freeze_epoch is not None
