"""
===============================================================================
ORRERY - Stars and Barycenters
===============================================================================
Stellar objects terminate every orbit-frame center chain. A star or
barycenter is either fixed at a universal position or orbits another
barycenter:

    position(t) = barycenter.position(t) + orbit.position_at_time(t)

with the orbit expressed in ecliptic axes centered on the barycenter. The
chain of barycenters is walked recursively under the same depth bound as
body resolution.

A Barycenter is a massless, invisible reference point, usually the center
of mass of a multiple star system, listing the stars that orbit it.
===============================================================================
"""

import logging
from typing import List, Optional

import numpy as np

from orrery.core.quaternion import Quaternion
from orrery.core.universal_coord import UniversalCoord
from orrery.dynamics.orbit import Orbit
from orrery.dynamics.rotation import ConstantOrientation, RotationModel
from orrery.frames.frame_tree import FrameTree
from orrery.frames.selection import SelectionType, check_frame_depth

logger = logging.getLogger(__name__)


class StellarObject:
    """
    Common base of Star and Barycenter.

    Parameters
    ----------
    name : str
        Catalog name.
    position : UniversalCoord, optional
        Fixed universal position. Ignored while an orbit is set.
    rotation_model : RotationModel, optional
        Orientation relative to the ecliptic; no rotation by default.
    """

    SELECTION_TYPE = SelectionType.STAR
    visible = True

    def __init__(self, name: str, position: Optional[UniversalCoord] = None,
                 rotation_model: Optional[RotationModel] = None) -> None:
        self.name = name
        self._position_fixed = position if position is not None else UniversalCoord.zero()
        self._orbit: Optional[Orbit] = None
        self._orbit_barycenter: Optional['Barycenter'] = None
        self.rotation_model = rotation_model if rotation_model is not None else ConstantOrientation()
        self._frame_tree: Optional[FrameTree] = None

    def get_name(self, i18n: bool = False) -> str:
        return self.name

    # =========================================================================
    # ORBIT
    # =========================================================================

    def set_orbit(self, orbit: Orbit, barycenter: 'Barycenter') -> None:
        """Make this object orbit a barycenter."""
        if barycenter is self:
            raise ValueError(f"{self.name} cannot orbit itself")
        self._orbit = orbit
        self._orbit_barycenter = barycenter
        if isinstance(barycenter, Barycenter) and self.visible:
            barycenter.add_orbiting_star(self)
        logger.debug("%s now orbits %s", self.name, barycenter.name)

    @property
    def orbit(self) -> Optional[Orbit]:
        return self._orbit

    @property
    def orbit_barycenter(self) -> Optional['Barycenter']:
        return self._orbit_barycenter

    # =========================================================================
    # STATE
    # =========================================================================

    def get_position(self, tdb: float) -> UniversalCoord:
        return self._position(tdb, 0)

    def get_velocity(self, tdb: float) -> np.ndarray:
        """Universal velocity (km/day)."""
        return self._velocity(tdb, 0)

    def _position(self, tdb: float, depth: int) -> UniversalCoord:
        check_frame_depth(depth, self)
        if self._orbit is None or self._orbit_barycenter is None:
            return self._position_fixed
        base = self._orbit_barycenter._position(tdb, depth + 1)
        return base.offset_km(self._orbit.position_at_time(tdb))

    def _velocity(self, tdb: float, depth: int) -> np.ndarray:
        check_frame_depth(depth, self)
        if self._orbit is None or self._orbit_barycenter is None:
            return np.zeros(3)
        base = self._orbit_barycenter._velocity(tdb, depth + 1)
        return base + self._orbit.velocity_at_time(tdb)

    def get_orientation(self, tdb: float) -> Quaternion:
        return self._orientation(tdb, 0)

    def get_angular_velocity(self, tdb: float) -> np.ndarray:
        return self._angular_velocity(tdb, 0)

    def get_ecliptic_to_equatorial(self, tdb: float) -> Quaternion:
        return self._ecliptic_to_equatorial(tdb, 0)

    # Stellar rotation is relative to the ecliptic, so these end the walk.

    def _orientation(self, tdb: float, depth: int) -> Quaternion:
        check_frame_depth(depth, self)
        return self.rotation_model.orientation_at_time(tdb)

    def _angular_velocity(self, tdb: float, depth: int) -> np.ndarray:
        check_frame_depth(depth, self)
        return self.rotation_model.angular_velocity_at_time(tdb)

    def _ecliptic_to_equatorial(self, tdb: float, depth: int) -> Quaternion:
        check_frame_depth(depth, self)
        return self.rotation_model.equator_orientation_at_time(tdb)

    # =========================================================================
    # FRAME TREE
    # =========================================================================

    def get_frame_tree(self) -> Optional[FrameTree]:
        return self._frame_tree

    def get_or_create_frame_tree(self) -> FrameTree:
        if self._frame_tree is None:
            self._frame_tree = FrameTree(self)
        return self._frame_tree

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.name}')"


class Star(StellarObject):
    """
    A visible star.

    Parameters
    ----------
    name : str
    position : UniversalCoord, optional
    radius : float
        Photospheric radius (km).
    temperature : float
        Effective temperature (K).
    luminosity : float
        Luminosity relative to the Sun.
    """

    def __init__(self, name: str, position: Optional[UniversalCoord] = None,
                 radius: float = 695700.0, temperature: float = 5772.0,
                 luminosity: float = 1.0,
                 rotation_model: Optional[RotationModel] = None) -> None:
        super().__init__(name, position, rotation_model)
        self.radius = float(radius)
        self.temperature = float(temperature)
        self.luminosity = float(luminosity)


class Barycenter(StellarObject):
    """Massless, invisible center of a star system."""

    SELECTION_TYPE = SelectionType.BARYCENTER
    visible = False
    radius = 0.0
    temperature = 0.0
    luminosity = 0.0

    def __init__(self, name: str, position: Optional[UniversalCoord] = None) -> None:
        super().__init__(name, position)
        self._orbiting_stars: List[Star] = []

    def add_orbiting_star(self, star: Star) -> None:
        if any(s is star for s in self._orbiting_stars):
            return
        self._orbiting_stars.append(star)

    @property
    def orbiting_stars(self) -> List[Star]:
        return list(self._orbiting_stars)
