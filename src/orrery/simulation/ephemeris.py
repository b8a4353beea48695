"""
===============================================================================
ORRERY - Ephemeris Sampling and Orbit Path Cache
===============================================================================
sample_states() evaluates a body's full state over a time grid and returns a
pandas DataFrame indexed by tdb, one row per sample:

    pos_x/y/z     km, relative to an origin (astrocentric by default)
    vel_x/y/z     km/day, universal axes
    quat_w/x/y/z  orientation, universal -> body fixed
    omega_x/y/z   rad/day, universal axes
    phase         index of the active timeline phase
    extant        whether the body exists at that instant

OrbitPathCache keeps sampled orbit paths (in orbit-frame coordinates) for
drawing. Entries are pulled on demand and dropped when the body's timeline
object is replaced or one of its parent frame trees has been notified of a
change since the path was sampled.
===============================================================================
"""

import logging
import weakref
from collections import OrderedDict
from typing import Any, Iterable

import numpy as np
import pandas as pd

from orrery.core.universal_coord import UniversalCoord

logger = logging.getLogger(__name__)


def _origin_position(origin: Any, tdb: float) -> UniversalCoord:
    if isinstance(origin, UniversalCoord):
        return origin
    return origin.get_position(tdb)


def sample_states(body, times: Iterable[float], origin: Any = None) -> pd.DataFrame:
    """
    Tabulate the state of a body.

    Parameters
    ----------
    body : Body
        Body with a timeline.
    times : iterable of float
        TDB Julian dates.
    origin : UniversalCoord, Body, Star, Barycenter or Selection, optional
        Position origin. Moving origins are evaluated at each sample time.
        When omitted, positions are astrocentric.

    Returns
    -------
    pd.DataFrame
        Indexed by 'tdb'; empty when times is empty.
    """
    timeline = body.timeline
    records = []

    for tdb in times:
        tdb = float(tdb)
        if origin is None:
            pos = body.get_astrocentric_position(tdb)
        else:
            pos = body.get_position(tdb).offset_from_km(_origin_position(origin, tdb))
        vel = body.get_velocity(tdb)
        att = body.get_orientation(tdb)
        omega = body.get_angular_velocity(tdb)
        phase = timeline.find_phase(tdb)

        records.append({
            'tdb': tdb,
            'pos_x': pos[0],
            'pos_y': pos[1],
            'pos_z': pos[2],
            'vel_x': vel[0],
            'vel_y': vel[1],
            'vel_z': vel[2],
            'quat_w': att.w,
            'quat_x': att.x,
            'quat_y': att.y,
            'quat_z': att.z,
            'omega_x': omega[0],
            'omega_y': omega[1],
            'omega_z': omega[2],
            'phase': timeline.phases.index(phase),
            'extant': timeline.includes(tdb),
        })

    if not records:
        logger.warning("No sample times given for '%s'", body.name)
        return pd.DataFrame()

    df = pd.DataFrame(records)
    df.set_index('tdb', inplace=True)
    return df


def save_states(df: pd.DataFrame, filepath: str) -> None:
    """Write a state table to CSV."""
    df.to_csv(filepath)
    logger.info("States saved to %s  (%d records)", filepath, len(df))


class _PathEntry:
    __slots__ = ("body_ref", "timeline", "phase", "generations",
                 "window", "points")

    def __init__(self, body, phase, generations, window, points) -> None:
        self.body_ref = weakref.ref(body)
        self.timeline = body.timeline
        self.phase = phase
        self.generations = generations
        self.window = window
        self.points = points


class OrbitPathCache:
    """
    Least-recently-used cache of sampled orbit paths.

    Parameters
    ----------
    samples : int
        Points per path.
    aperiodic_span : float
        Time span (days) sampled around the query time for aperiodic orbits.
    max_entries : int
        Maximum number of cached paths.
    """

    def __init__(self, samples: int = 100, aperiodic_span: float = 365.25,
                 max_entries: int = 256) -> None:
        if samples < 2:
            raise ValueError(f"samples must be at least 2, got {samples}")
        self._samples = samples
        self._span = float(aperiodic_span)
        self._max_entries = max_entries
        self._entries: 'OrderedDict[int, _PathEntry]' = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def invalidate(self, body) -> None:
        self._entries.pop(id(body), None)

    @staticmethod
    def _generations(body) -> tuple:
        return tuple(tree.generation for tree in body.timeline.frame_trees())

    def _is_valid(self, entry: _PathEntry, body, tdb: float) -> bool:
        if entry.body_ref() is not body or entry.timeline is not body.timeline:
            return False
        if entry.phase is not body.find_phase(tdb):
            return False
        if entry.generations != self._generations(body):
            return False
        start, end = entry.window
        if entry.phase.orbit.is_periodic():
            return True
        # Aperiodic paths are re-centered once tdb leaves the middle half,
        # except on a side where the window already reaches the phase bound.
        quarter = (end - start) / 4.0
        low_ok = tdb >= start + quarter or start <= entry.phase.start_tdb
        high_ok = tdb <= end - quarter or end >= entry.phase.end_tdb
        return start <= tdb <= end and low_ok and high_ok

    def get_path(self, body, tdb: float) -> np.ndarray:
        """
        Orbit path of the phase active at tdb, shape (samples, 3), in the
        phase's orbit-frame coordinates.
        """
        key = id(body)
        entry = self._entries.get(key)
        if entry is not None and self._is_valid(entry, body, tdb):
            self._entries.move_to_end(key)
            self.hits += 1
            return entry.points

        self.misses += 1
        phase = body.find_phase(tdb)
        window = self._sample_window(phase, tdb)
        times = np.linspace(window[0], window[1], self._samples)
        points = np.array([phase.orbit.position_at_time(t) for t in times])

        self._entries[key] = _PathEntry(body, phase, self._generations(body), window, points)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

        logger.debug("Sampled orbit path of '%s' over [%.3f, %.3f]",
                     body.name, window[0], window[1])
        return points

    def _sample_window(self, phase, tdb: float):
        orbit = phase.orbit
        if orbit.is_periodic():
            return (tdb, tdb + orbit.period())
        half = self._span / 2.0
        start = max(tdb - half, phase.start_tdb)
        end = min(tdb + half, phase.end_tdb)
        if end <= start:
            end = start + self._span
        return (start, end)
