"""
===============================================================================
ORRERY - Body
===============================================================================
A solar-system body: planet, moon, asteroid, comet, spacecraft or an
invisible reference point. Each body exclusively owns one Timeline and
resolves its state at an instant tdb by walking the active phase's frames.

State resolution (universal frame = J2000 ecliptic):

    position          explicit loop up the orbit-frame centers that are
                      bodies, rotating the accumulated offset out of each
                      frame and adding the parent's own orbit offset, then
                      one high-precision offset from the terminal star or
                      barycenter:

                          p = conj(q_f) * p + parent.orbit(t)   (per level)
                          P = center.position(t) + p

    orientation       rotation_model.orientation(t) * body_frame.orientation(t)

    velocity          recursive on the orbit-frame center:

                          v = conj(q_f) * orbit.velocity(t) + center.velocity(t)
                          v += omega_f x r          (non-inertial frames only)

    angular velocity  conj(q_b) * rotation_model.omega(t) + omega_b
                      (omega_b only for a non-inertial body frame)

Every walk counts the frame centers it visits and raises FrameGraphError past
settings.max_frame_depth.

Times outside the timeline resolve against the nearest phase; extant(t)
reports whether the body actually exists at t.
===============================================================================
"""

import logging
import weakref
from typing import List, Optional, Tuple

import numpy as np

from orrery.bodies import localization
from orrery.bodies.attributes import (
    ORBIT_CLASS_PRIORITY,
    Atmosphere,
    BodyClassification,
    ReferenceMark,
    RingSystem,
    VisibilityPolicy,
)
from orrery.bodies.planetary_system import PlanetarySystem
from orrery.core import astro
from orrery.core.constants import EARTH_MASS, SOLAR_POWER, SQRT3
from orrery.core.exceptions import TimelineError
from orrery.core.quaternion import Quaternion
from orrery.core.universal_coord import UniversalCoord
from orrery.dynamics.orbit import Orbit
from orrery.dynamics.rotation import RotationModel
from orrery.frames.frame_tree import FrameTree
from orrery.frames.reference_frame import ReferenceFrame
from orrery.frames.selection import Selection, SelectionType, check_frame_depth
from orrery.timeline.timeline import Timeline, TimelinePhase

logger = logging.getLogger(__name__)


class Body:
    """
    Solar-system body.

    Parameters
    ----------
    name : str
        Primary name. Its translation through the active gettext catalog
        becomes the localized name.
    system : PlanetarySystem, optional
        System the body belongs to; the body is added to it.
    """

    SELECTION_TYPE = SelectionType.BODY

    def __init__(self, name: str, system: Optional[PlanetarySystem] = None) -> None:
        self._names: List[str] = [name]
        self._localized_name: Optional[str] = None
        self._set_name(name)

        self._system_ref = None
        self._timeline: Optional[Timeline] = None
        self._frame_tree: Optional[FrameTree] = None
        self._satellites: Optional[PlanetarySystem] = None
        self._reference_marks: List[ReferenceMark] = []
        self._culling_radius = 0.0
        self.info_url = ""

        self.set_default_properties()

        if system is not None:
            system.add_body(self)

    def set_default_properties(self) -> None:
        """
        Reset physical and display attributes to their defaults.

        Names, timeline, satellites and reference marks are left untouched.
        """
        self._radius = 1.0
        self._semi_axes = np.ones(3)
        self.mass = 0.0
        self._density = 0.0
        self.bond_albedo = 0.5
        self.geom_albedo = 0.5
        self.reflectivity = 0.5
        self._temperature = 0.0
        self.temp_discrepancy = 0.0
        self.geometry_orientation = Quaternion.identity()
        self.geometry = None
        self.geometry_scale = 1.0
        self._atmosphere: Optional[Atmosphere] = None
        self._rings: Optional[RingSystem] = None
        self._classification = BodyClassification.UNKNOWN
        self.visible = True
        self.clickable = True
        self.visible_as_point = True
        self.orbit_visibility = VisibilityPolicy.USE_CLASS_VISIBILITY
        self._secondary_illuminator = True
        self.recompute_culling_radius()

    # =========================================================================
    # NAMES
    # =========================================================================

    def _set_name(self, name: str) -> None:
        localized = localization.translate(name)
        self._localized_name = localized if localized != name else None

    @property
    def name(self) -> str:
        return self._names[0]

    @property
    def names(self) -> List[str]:
        """Primary name followed by aliases; never localized."""
        return list(self._names)

    def get_name(self, i18n: bool = False) -> str:
        if i18n and self._localized_name is not None:
            return self._localized_name
        return self._names[0]

    @property
    def localized_name(self) -> str:
        return self._localized_name if self._localized_name is not None else self._names[0]

    def has_localized_name(self) -> bool:
        return self._localized_name is not None

    def add_alias(self, alias: str) -> None:
        if alias in self._names:
            return
        self._names.append(alias)
        system = self.system
        if system is not None:
            system.add_alias(self, alias)

    # =========================================================================
    # HIERARCHY
    # =========================================================================

    @property
    def system(self) -> Optional[PlanetarySystem]:
        """Planetary system this body belongs to (not owned)."""
        return self._system_ref() if self._system_ref is not None else None

    def _attach_to_system(self, system: Optional[PlanetarySystem]) -> None:
        self._system_ref = weakref.ref(system) if system is not None else None

    @property
    def satellites(self) -> Optional[PlanetarySystem]:
        return self._satellites

    def set_satellites(self, satellites: Optional[PlanetarySystem]) -> None:
        self._satellites = satellites

    def get_or_create_satellites(self) -> PlanetarySystem:
        if self._satellites is None:
            self._satellites = PlanetarySystem(primary=self)
        return self._satellites

    def get_frame_tree(self) -> Optional[FrameTree]:
        return self._frame_tree

    def get_or_create_frame_tree(self) -> FrameTree:
        if self._frame_tree is None:
            self._frame_tree = FrameTree(self)
            # A new tree starts dirty and will not propagate on its own
            self.mark_changed()
        return self._frame_tree

    def to_selection(self) -> Selection:
        return Selection(self)

    # =========================================================================
    # TIMELINE
    # =========================================================================

    @property
    def timeline(self) -> Optional[Timeline]:
        return self._timeline

    def set_timeline(self, timeline: Timeline) -> None:
        """
        Replace the body's timeline.

        The body leaves the frame trees of its old orbit-frame centers, joins
        those of the new phases' centers and propagates a change upward.
        Setting the current timeline again does nothing.
        """
        if timeline is self._timeline:
            return
        if timeline is None:
            raise TimelineError(f"Body '{self.name}' cannot drop its timeline")

        old = self._timeline
        if old is not None:
            for tree in old.frame_trees():
                old.detach_frame_tree(tree)
                tree.remove_child(self)

        self._timeline = timeline
        for phase in timeline:
            tree = phase.orbit_frame.center.get_or_create_frame_tree()
            if tree is None:
                continue
            timeline.attach_frame_tree(tree)
            tree.add_child(self)

        logger.info("Timeline of '%s' set: %d phase(s), [%s, %s)",
                    self.name, len(timeline), timeline.start_time, timeline.end_time)
        self.mark_changed()

    def mark_changed(self) -> None:
        if self._timeline is not None:
            self._timeline.mark_changed()

    def mark_updated(self) -> None:
        if self._frame_tree is not None:
            self._frame_tree.mark_updated()

    def _require_timeline(self) -> Timeline:
        if self._timeline is None:
            raise TimelineError(f"Body '{self.name}' has no timeline")
        return self._timeline

    def find_phase(self, tdb: float) -> TimelinePhase:
        return self._require_timeline().find_phase(tdb)

    def get_orbit(self, tdb: float) -> Orbit:
        return self.find_phase(tdb).orbit

    def get_orbit_frame(self, tdb: float) -> ReferenceFrame:
        return self.find_phase(tdb).orbit_frame

    def get_body_frame(self, tdb: float) -> ReferenceFrame:
        return self.find_phase(tdb).body_frame

    def get_rotation_model(self, tdb: float) -> RotationModel:
        return self.find_phase(tdb).rotation_model

    def extant(self, tdb: float) -> bool:
        return self._require_timeline().includes(tdb)

    def get_lifespan(self) -> Tuple[float, float]:
        timeline = self._require_timeline()
        return (timeline.start_time, timeline.end_time)

    def orbit_bounding_radius_about(self, center) -> float:
        """Largest orbit bounding radius among phases centered on center."""
        if self._timeline is None:
            return 0.0
        radii = [p.orbit.bounding_radius() for p in self._timeline
                 if p.orbit_frame.center.obj is center]
        return max(radii, default=0.0)

    # =========================================================================
    # STATE RESOLUTION
    # =========================================================================

    def get_position(self, tdb: float) -> UniversalCoord:
        """Universal position at tdb."""
        return self._position(tdb, 0)

    def get_orientation(self, tdb: float) -> Quaternion:
        """Rotation from universal axes to the body-fixed axes."""
        return self._orientation(tdb, 0)

    def get_velocity(self, tdb: float) -> np.ndarray:
        """Universal velocity (km/day)."""
        return self._velocity(tdb, 0)

    def get_angular_velocity(self, tdb: float) -> np.ndarray:
        """Angular velocity (rad/day) in universal axes."""
        return self._angular_velocity(tdb, 0)

    def get_astrocentric_position(self, tdb: float) -> np.ndarray:
        """Position (km) relative to the star or barycenter at the root."""
        offset, _, _ = self._accumulate_offset(tdb, 0)
        return offset

    def _accumulate_offset(self, tdb: float, depth: int):
        """
        Walk the orbit-frame centers that are bodies.

        Returns the offset (km, universal axes) from the terminal center, the
        terminal frame and the depth reached.
        """
        check_frame_depth(depth, self)
        phase = self.find_phase(tdb)
        position = phase.orbit.position_at_time(tdb)
        frame = phase.orbit_frame

        while True:
            parent = frame.center._referent()
            if parent is None or parent.SELECTION_TYPE is not SelectionType.BODY:
                break
            depth += 1
            check_frame_depth(depth, parent)
            parent_phase = parent.find_phase(tdb)
            position = (frame._orientation(tdb, depth).conjugate().rotate_vector(position)
                        + parent_phase.orbit.position_at_time(tdb))
            frame = parent_phase.orbit_frame

        position = frame._orientation(tdb, depth).conjugate().rotate_vector(position)
        return position, frame, depth

    def _position(self, tdb: float, depth: int) -> UniversalCoord:
        offset, frame, depth = self._accumulate_offset(tdb, depth)
        return frame.center._position(tdb, depth + 1).offset_km(offset)

    def _velocity(self, tdb: float, depth: int) -> np.ndarray:
        check_frame_depth(depth, self)
        phase = self.find_phase(tdb)
        frame = phase.orbit_frame
        to_parent = frame._orientation(tdb, depth).conjugate()

        v = to_parent.rotate_vector(phase.orbit.velocity_at_time(tdb))
        v = v + frame.center._velocity(tdb, depth + 1)

        if not frame.is_inertial():
            # Offset from the center, same as position(t) - center.position(t)
            r = to_parent.rotate_vector(phase.orbit.position_at_time(tdb))
            v = v + np.cross(frame._angular_velocity(tdb, depth), r)
        return v

    def _orientation(self, tdb: float, depth: int) -> Quaternion:
        check_frame_depth(depth, self)
        phase = self.find_phase(tdb)
        return (phase.rotation_model.orientation_at_time(tdb)
                * phase.body_frame._orientation(tdb, depth))

    def _angular_velocity(self, tdb: float, depth: int) -> np.ndarray:
        check_frame_depth(depth, self)
        phase = self.find_phase(tdb)
        body_frame = phase.body_frame
        omega = phase.rotation_model.angular_velocity_at_time(tdb)
        omega = body_frame._orientation(tdb, depth).conjugate().rotate_vector(omega)
        if not body_frame.is_inertial():
            omega = omega + body_frame._angular_velocity(tdb, depth)
        return omega

    def _ecliptic_to_equatorial(self, tdb: float, depth: int) -> Quaternion:
        check_frame_depth(depth, self)
        phase = self.find_phase(tdb)
        return (phase.rotation_model.equator_orientation_at_time(tdb)
                * phase.body_frame._orientation(tdb, depth))

    # =========================================================================
    # DERIVED TRANSFORMS
    # =========================================================================

    def get_local_to_astrocentric(self, tdb: float) -> np.ndarray:
        """4x4 translation from body-centered to astrocentric coordinates."""
        m = np.eye(4)
        m[:3, 3] = self.get_astrocentric_position(tdb)
        return m

    def get_body_fixed_to_astrocentric(self, tdb: float) -> np.ndarray:
        """4x4 transform from body-fixed to astrocentric ecliptic coordinates."""
        m = np.eye(4)
        m[:3, :3] = self.get_ecliptic_to_body_fixed(tdb).conjugate().to_dcm()
        m[:3, 3] = self.get_astrocentric_position(tdb)
        return m

    def get_ecliptic_to_frame(self, tdb: float) -> Quaternion:
        return self.find_phase(tdb).body_frame.orientation(tdb)

    def get_ecliptic_to_equatorial(self, tdb: float) -> Quaternion:
        return self._ecliptic_to_equatorial(tdb, 0)

    def get_ecliptic_to_body_fixed(self, tdb: float) -> Quaternion:
        return self.get_orientation(tdb)

    def get_equatorial_to_body_fixed(self, tdb: float) -> Quaternion:
        return self.find_phase(tdb).rotation_model.spin(tdb)

    def planetocentric_to_cartesian(self, lon: float, lat: float, alt: float) -> np.ndarray:
        """
        Body-fixed position (km) of a point at longitude/latitude (rad) and
        altitude (km) above the mean radius.
        """
        r = self._radius + alt
        return r * np.array([
            np.cos(lat) * np.cos(lon),
            np.cos(lat) * np.sin(lon),
            np.sin(lat),
        ])

    def cartesian_to_planetocentric(self, v: np.ndarray) -> np.ndarray:
        """Inverse of planetocentric_to_cartesian: returns (lon, lat, alt)."""
        v = np.asarray(v, dtype=np.float64)
        dist = np.linalg.norm(v)
        if dist == 0.0:
            return np.array([0.0, 0.0, -self._radius])
        lat = np.arcsin(np.clip(v[2] / dist, -1.0, 1.0))
        lon = np.arctan2(v[1], v[0])
        return np.array([lon, lat, dist - self._radius])

    def ecliptic_to_planetocentric(self, ecl: np.ndarray, tdb: float) -> np.ndarray:
        """(lon, lat, alt) of a body-centered ecliptic position."""
        body_fixed = self.get_ecliptic_to_body_fixed(tdb).rotate_vector(ecl)
        return self.cartesian_to_planetocentric(body_fixed)

    # =========================================================================
    # SHAPE AND CULLING
    # =========================================================================

    @property
    def radius(self) -> float:
        """Largest semi-axis (km)."""
        return self._radius

    @property
    def semi_axes(self) -> np.ndarray:
        return self._semi_axes.copy()

    def set_semi_axes(self, semi_axes) -> None:
        axes = np.asarray(semi_axes, dtype=np.float64)
        if axes.shape != (3,) or np.any(axes < 0.0):
            raise ValueError(f"semi_axes must be three non-negative values, got {semi_axes}")
        self._semi_axes = axes.copy()
        self._radius = float(axes.max())
        self.recompute_culling_radius()

    def set_radius(self, radius: float) -> None:
        """Make the body a sphere of the given radius (km)."""
        self.set_semi_axes([radius, radius, radius])

    def set_geometry(self, geometry) -> None:
        """Attach an opaque mesh handle; None reverts to an ellipsoid."""
        self.geometry = geometry
        self.recompute_culling_radius()

    def is_ellipsoid(self) -> bool:
        return self.geometry is None

    def is_sphere(self) -> bool:
        a = self._semi_axes
        return self.geometry is None and a[0] == a[1] == a[2]

    def get_bounding_radius(self) -> float:
        """
        Radius of a sphere enclosing the primary geometry.

        Mesh radii are the largest semi-axis of the bounding box, so the
        enclosing sphere is larger by sqrt(3).
        """
        if self.geometry is None:
            return self._radius
        return self._radius * SQRT3

    @property
    def culling_radius(self) -> float:
        return self._culling_radius

    @property
    def rings(self) -> Optional[RingSystem]:
        return self._rings

    def set_rings(self, rings: Optional[RingSystem]) -> None:
        self._rings = rings
        self.recompute_culling_radius()

    @property
    def atmosphere(self) -> Optional[Atmosphere]:
        return self._atmosphere

    def set_atmosphere(self, atmosphere: Optional[Atmosphere]) -> None:
        self._atmosphere = atmosphere
        self.recompute_culling_radius()

    @property
    def reference_marks(self) -> List[ReferenceMark]:
        return list(self._reference_marks)

    def add_reference_mark(self, mark: ReferenceMark) -> None:
        self._reference_marks.append(mark)
        self.recompute_culling_radius()

    def find_reference_mark(self, tag: str) -> Optional[ReferenceMark]:
        for mark in self._reference_marks:
            if mark.tag == tag:
                return mark
        return None

    def remove_reference_mark(self, tag: str) -> None:
        """Remove the first reference mark with the given tag, if any."""
        mark = self.find_reference_mark(tag)
        if mark is not None:
            self._reference_marks.remove(mark)
            self.recompute_culling_radius()

    def recompute_culling_radius(self) -> None:
        """
        Recompute the radius enclosing geometry, atmosphere, rings and
        reference marks. Notifies the frame hierarchy only on a change.
        """
        r = self.get_bounding_radius()

        if self._atmosphere is not None:
            r += self._atmosphere.shell_height
        if self._rings is not None:
            r = max(r, self._rings.outer_radius)
        for mark in self._reference_marks:
            r = max(r, mark.bounding_sphere_radius())
        if self._classification == BodyClassification.COMET:
            r = max(r, astro.au_to_km(1.0))

        if r != self._culling_radius:
            self._culling_radius = r
            self.mark_changed()

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    @property
    def classification(self) -> BodyClassification:
        return self._classification

    def set_classification(self, classification: BodyClassification) -> None:
        self._classification = BodyClassification(classification)
        self.recompute_culling_radius()
        self.mark_changed()

    def get_orbit_classification(self) -> BodyClassification:
        """
        Classification used when displaying the orbit.

        Invisible bodies (typically barycenters of planet-moon pairs) take
        the highest-priority classification among their children.
        """
        if self._classification != BodyClassification.INVISIBLE or self._frame_tree is None:
            return self._classification

        mask = self._frame_tree.child_class_mask()
        for cls in ORBIT_CLASS_PRIORITY:
            if mask & cls:
                return cls
        return BodyClassification.INVISIBLE

    @property
    def is_secondary_illuminator(self) -> bool:
        return self._secondary_illuminator

    def set_secondary_illuminator(self, enable: bool) -> None:
        if enable != self._secondary_illuminator:
            self._secondary_illuminator = enable
            self.mark_changed()

    # =========================================================================
    # PHYSICAL PROPERTIES
    # =========================================================================

    @property
    def density(self) -> float:
        """
        Density (kg/m^3). Derived from mass and radius for spheres when not
        set explicitly; 0.0 when it cannot be derived.
        """
        if self._density > 0.0:
            return self._density
        if self._radius == 0.0 or not self.is_sphere():
            return 0.0
        volume_km3 = 4.0 / 3.0 * np.pi * self._radius ** 3
        return self.mass * EARTH_MASS / 1e9 / volume_km3

    @density.setter
    def density(self, value: float) -> None:
        self._density = float(value)

    @property
    def albedo(self) -> float:
        return self.geom_albedo

    @albedo.setter
    def albedo(self, value: float) -> None:
        self.geom_albedo = value

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        self._temperature = float(value)

    def get_temperature(self, tdb: float) -> float:
        """
        Surface temperature (K).

        An explicit temperature wins. Otherwise the equilibrium temperature
        is estimated from the system's star, or from every star orbiting the
        system's barycenter, plus the temperature discrepancy. Returns 0.0
        when there is no star or a stellar distance is zero.
        """
        if self._temperature > 0.0:
            return self._temperature

        system = self.system
        sun = system.star if system is not None else None
        if sun is None:
            return 0.0

        if sun.visible:
            dist = float(np.linalg.norm(self.get_astrocentric_position(tdb)))
            if dist == 0.0:
                return 0.0
            temp = (sun.temperature * (1.0 - self.bond_albedo) ** 0.25
                    * np.sqrt(sun.radius / (2.0 * dist)))
        else:
            stars = getattr(sun, "orbiting_stars", [])
            if not stars:
                return 0.0
            body_pos = self.get_position(tdb)
            flux = 0.0
            for star in stars:
                dist = star.get_position(tdb).distance_from_km(body_pos)
                if dist == 0.0:
                    return 0.0
                flux += star.radius ** 2 * star.temperature ** 4 / dist ** 2
            temp = ((1.0 - self.bond_albedo) * flux) ** 0.25 / np.sqrt(2.0)

        return self.temp_discrepancy + float(temp)

    def get_luminosity(self, sun_luminosity: float, distance_from_sun: float) -> float:
        """Reflected luminosity relative to the Sun; 0.0 at zero distance."""
        if distance_from_sun <= 0.0:
            return 0.0
        power = SOLAR_POWER * sun_luminosity
        irradiance = power / astro.sphere_area(distance_from_sun * 1000.0)
        incident = irradiance * astro.circle_area(self._radius * 1000.0)
        return incident * self.reflectivity / SOLAR_POWER

    def get_apparent_magnitude(self, sun_luminosity: float, distance_from_sun: float,
                               distance_from_viewer: float) -> float:
        """Apparent magnitude at opposition (phase ignored)."""
        return astro.lum_to_app_mag(
            self.get_luminosity(sun_luminosity, distance_from_sun),
            astro.km_to_light_years(distance_from_viewer),
        )

    def get_phase_apparent_magnitude(self, sun_luminosity: float,
                                     sun_position: np.ndarray,
                                     viewer_position: np.ndarray) -> float:
        """
        Apparent magnitude corrected for the illuminated fraction.

        Both positions are relative to the body (km).
        """
        d_viewer = float(np.linalg.norm(viewer_position))
        d_sun = float(np.linalg.norm(sun_position))
        if d_viewer == 0.0 or d_sun == 0.0:
            return 0.0
        fraction = (1.0 + np.dot(viewer_position / d_viewer, sun_position / d_sun)) / 2.0
        return astro.lum_to_app_mag(
            self.get_luminosity(sun_luminosity, d_sun) * fraction,
            astro.km_to_light_years(d_viewer),
        )

    def __repr__(self) -> str:
        return f"Body('{self.name}', {self._classification.name})"
