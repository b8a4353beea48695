"""
===============================================================================
ORRERY - Body Attributes
===============================================================================
Value types attached to bodies: classification flags, orbit visibility
policy, ring systems, atmospheres and reference marks. None of them know
about frames or timelines.

BodyClassification bit values are stable; masks built from them are stored
in frame trees and compared by render-side filters.
===============================================================================
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntFlag

import numpy as np


class BodyClassification(IntFlag):
    PLANET = 0x01
    MOON = 0x02
    ASTEROID = 0x04
    COMET = 0x08
    SPACECRAFT = 0x10
    INVISIBLE = 0x20
    BARYCENTER = 0x40
    SMALL_BODY = 0x80
    DWARF_PLANET = 0x100
    STELLAR = 0x200
    SURFACE_FEATURE = 0x400
    COMPONENT = 0x800
    MINOR_MOON = 0x1000
    DIFFUSE = 0x2000
    UNKNOWN = 0x10000


# Order in which an invisible body borrows its children's classification
# for orbit display.
ORBIT_CLASS_PRIORITY = (
    BodyClassification.PLANET,
    BodyClassification.DWARF_PLANET,
    BodyClassification.ASTEROID,
    BodyClassification.MOON,
    BodyClassification.MINOR_MOON,
    BodyClassification.SPACECRAFT,
)


class VisibilityPolicy(Enum):
    NEVER_VISIBLE = 0
    USE_CLASS_VISIBILITY = 1
    ALWAYS_VISIBLE = 2


@dataclass(frozen=True)
class RingSystem:
    """
    Planetary ring annulus.

    Attributes
    ----------
    inner_radius : float
        Inner edge (km from the body center).
    outer_radius : float
        Outer edge (km from the body center).
    """
    inner_radius: float
    outer_radius: float

    def __post_init__(self) -> None:
        if self.inner_radius < 0.0 or self.outer_radius < self.inner_radius:
            raise ValueError(
                f"Invalid ring radii: inner={self.inner_radius}, outer={self.outer_radius}"
            )


@dataclass(frozen=True)
class Atmosphere:
    """
    Atmosphere shell.

    Attributes
    ----------
    height : float
        Height (km) of the visible atmosphere above the surface.
    cloud_height : float
        Height (km) of the cloud layer above the surface.
    """
    height: float = 0.0
    cloud_height: float = 0.0

    @property
    def shell_height(self) -> float:
        return max(self.height, self.cloud_height)


class ReferenceMark(ABC):
    """
    Visual annotation drawn with a body (axes, grids, vectors).

    Only the tag and the bounding sphere matter here; the bounding sphere
    feeds the body's culling radius.
    """

    def __init__(self, tag: str) -> None:
        self._tag = tag

    @property
    def tag(self) -> str:
        return self._tag

    @abstractmethod
    def bounding_sphere_radius(self) -> float:
        """Radius (km) about the body center enclosing the mark."""


class AxesReferenceMark(ReferenceMark):
    """Three arrows along the body-fixed axes."""

    # Arrow heads stick out past the nominal axis length.
    _HEAD_OVERHANG = 1.1

    def __init__(self, size: float, tag: str = "body axes") -> None:
        super().__init__(tag)
        if size <= 0.0:
            raise ValueError(f"Axis size must be positive, got {size}")
        self._size = float(size)

    @property
    def size(self) -> float:
        return self._size

    def bounding_sphere_radius(self) -> float:
        return self._size * self._HEAD_OVERHANG


class VectorReferenceMark(ReferenceMark):
    """A single arrow from the body center, e.g. a velocity or sun direction."""

    def __init__(self, direction, length: float, tag: str) -> None:
        super().__init__(tag)
        d = np.asarray(direction, dtype=np.float64)
        norm = np.linalg.norm(d)
        if norm < 1e-12:
            raise ValueError("Vector mark direction must be non-zero")
        self._direction = d / norm
        self._length = float(length)

    @property
    def direction(self) -> np.ndarray:
        return self._direction.copy()

    def bounding_sphere_radius(self) -> float:
        return self._length
