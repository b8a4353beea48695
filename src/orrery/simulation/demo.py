"""
===============================================================================
ORRERY - Demonstration Entry Point
===============================================================================
Builds a small synthetic system, validates its frame graph and prints state
tables:

    Sun      star placed a few light years from the universal origin
    Earth    circular heliocentric orbit, spinning in the J2000 equator frame
    Moon     inclined circular orbit about Earth, synchronous rotation
    Relay    fixed point in Earth's body-fixed frame (geostationary)

USAGE:
    orrery-demo                         # 30 days from J2000, daily steps
    orrery-demo --days 2 --step 0.25    # finer sampling
    orrery-demo --config orrery.yaml    # settings from YAML
    orrery-demo --csv output/states     # also write one CSV per body
===============================================================================
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from orrery.bodies.attributes import Atmosphere, BodyClassification
from orrery.bodies.body import Body
from orrery.bodies.planetary_system import PlanetarySystem
from orrery.bodies.star import Star
from orrery.core.config import configure_logging, load_settings, use_settings
from orrery.core.constants import DEG2RAD, J2000, J2000_OBLIQUITY, KM_PER_AU
from orrery.core.exceptions import OrreryError
from orrery.core.universal_coord import UniversalCoord
from orrery.dynamics.orbit import CircularOrbit, FixedOrbit
from orrery.dynamics.rotation import ConstantOrientation, UniformRotationModel
from orrery.frames.reference_frame import (
    BodyFixedFrame,
    J2000EclipticFrame,
    J2000EquatorFrame,
)
from orrery.simulation.ephemeris import sample_states, save_states
from orrery.timeline.timeline import Timeline

logger = logging.getLogger(__name__)

EARTH_YEAR = 365.25636        # sidereal, days
EARTH_DAY = 0.99726968        # sidereal, days
MOON_MONTH = 27.321661        # sidereal, days
MOON_SMA = 384400.0           # km
GEO_RADIUS = 42164.0          # km


def build_demo_system() -> Tuple[Star, PlanetarySystem]:
    """
    Create the Sun-Earth-Moon-Relay system.

    The caller must keep the returned star alive; frames refer to it weakly.
    """
    sun = Star("Sun", position=UniversalCoord.from_light_years([2.5, -1.0, 0.4]),
               radius=695700.0, temperature=5772.0, luminosity=1.0)
    system = PlanetarySystem(star=sun)

    earth = Body("Earth", system)
    earth.set_semi_axes([6378.137, 6378.137, 6356.752])
    earth.set_atmosphere(Atmosphere(height=60.0, cloud_height=7.0))
    earth.set_classification(BodyClassification.PLANET)
    earth.mass = 1.0
    earth.set_timeline(Timeline.single_phase(
        J2000EclipticFrame(sun),
        CircularOrbit(KM_PER_AU, EARTH_YEAR, epoch=J2000),
        J2000EquatorFrame(earth),
        UniformRotationModel(EARTH_DAY, epoch=J2000),
    ))

    satellites = earth.get_or_create_satellites()

    moon = Body("Moon", satellites)
    moon.set_radius(1737.4)
    moon.set_classification(BodyClassification.MOON)
    moon.add_alias("Luna")
    moon_normal = [0.0, -np.sin(5.145 * DEG2RAD), np.cos(5.145 * DEG2RAD)]
    moon.set_timeline(Timeline.single_phase(
        J2000EclipticFrame(earth),
        CircularOrbit(MOON_SMA, MOON_MONTH, epoch=J2000, normal=moon_normal),
        J2000EclipticFrame(earth),
        UniformRotationModel(MOON_MONTH, epoch=J2000, inclination=1.54 * DEG2RAD),
    ))

    relay = Body("Relay", satellites)
    relay.set_radius(0.005)
    relay.set_classification(BodyClassification.SPACECRAFT)
    earth_fixed = BodyFixedFrame(earth, earth)
    relay.set_timeline(Timeline.single_phase(
        earth_fixed,
        FixedOrbit([GEO_RADIUS, 0.0, 0.0]),
        earth_fixed,
        ConstantOrientation(),
        start_tdb=J2000,
    ))

    logger.info("Demo system built: %d planet(s), %d satellite(s), obliquity %.4f deg",
                len(system), len(satellites), J2000_OBLIQUITY / DEG2RAD)
    return sun, system


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Resolve body states in a synthetic Sun-Earth-Moon system',
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to settings YAML')
    parser.add_argument('--start', type=float, default=J2000,
                        help='Start time, TDB Julian date (default: J2000)')
    parser.add_argument('--days', type=float, default=30.0,
                        help='Time span in days (default: 30)')
    parser.add_argument('--step', type=float, default=1.0,
                        help='Sample step in days (default: 1)')
    parser.add_argument('--body', type=str, default=None,
                        help='Only report this body')
    parser.add_argument('--csv', type=str, default=None,
                        help='Directory for per-body CSV state tables')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Override the configured log level')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        if args.config:
            use_settings(load_settings(args.config))
        configure_logging(args.log_level)

        sun, system = build_demo_system()
        system.validate()
    except OrreryError as exc:
        logger.error("Setup failed: %s", exc)
        return 1

    if args.step <= 0.0:
        logger.error("Step must be positive, got %s", args.step)
        return 2
    times = np.arange(args.start, args.start + args.days + 0.5 * args.step, args.step)

    bodies = []
    system.traverse(lambda b: bodies.append(b) or True)
    if args.body:
        body = system.find(args.body, deep_search=True, i18n=True)
        if body is None:
            logger.error("No body named '%s'", args.body)
            return 2
        bodies = [body]

    print("=" * 70)
    print(f"  ORRERY DEMO  ({sun.name} system, {len(times)} samples)")
    print("=" * 70)

    for body in bodies:
        df = sample_states(body, times, origin=sun)
        print(f"\n  {body.name}  [{body.get_orbit_classification().name}]  "
              f"culling radius {body.culling_radius:.1f} km")
        print(df[['pos_x', 'pos_y', 'pos_z', 'vel_x', 'vel_y', 'vel_z', 'extant']]
              .to_string(float_format=lambda v: f"{v:.3f}"))
        if args.csv:
            out_dir = Path(args.csv)
            out_dir.mkdir(parents=True, exist_ok=True)
            save_states(df, str(out_dir / f"{body.name.lower()}.csv"))

    tree = sun.get_frame_tree()
    print("\n" + "=" * 70)
    print(f"  Bounding sphere of the {sun.name} system: "
          f"{tree.bounding_sphere_radius() / KM_PER_AU:.4f} AU")
    print("=" * 70)
    tree.mark_updated()
    return 0


if __name__ == '__main__':
    sys.exit(main())
